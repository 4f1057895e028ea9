"""Operation data models: one frozen dataclass per kind of file mutation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar, Union


def normalize_path(path: str) -> str:
    """Canonical relative path: forward slashes, no ``./`` segments, no doubled separators."""
    p = path.strip().replace("\\", "/")
    p = re.sub(r"/{2,}", "/", p)
    parts = [seg for seg in p.split("/") if seg != "."]
    if p.startswith("/"):
        return "/" + "/".join(s for s in parts if s)
    return "/".join(parts).rstrip("/")


def _require(value: str, what: str, kind: str) -> None:
    if not value:
        raise ValueError(f"{kind.upper()} requires {what}")


@dataclass(frozen=True)
class Create:
    file: str
    content: str

    kind: ClassVar[str] = "create"

    def __post_init__(self) -> None:
        _require(self.file, "a file path", self.kind)

    def paths(self) -> tuple[str, ...]:
        return (self.file,)

    def label(self) -> str:
        return self.file


@dataclass(frozen=True)
class Delete:
    file: str

    kind: ClassVar[str] = "delete"

    def __post_init__(self) -> None:
        _require(self.file, "a file path", self.kind)

    def paths(self) -> tuple[str, ...]:
        return (self.file,)

    def label(self) -> str:
        return self.file


@dataclass(frozen=True)
class Rename:
    source: str
    target: str

    kind: ClassVar[str] = "rename"

    def __post_init__(self) -> None:
        _require(self.source, "a source path", self.kind)
        _require(self.target, "a destination path", self.kind)

    def paths(self) -> tuple[str, ...]:
        return (self.source, self.target)

    def label(self) -> str:
        return f"{self.source} -> {self.target}"


@dataclass(frozen=True)
class SearchReplace:
    file: str
    search: str
    replace: str

    kind: ClassVar[str] = "search-replace"

    def __post_init__(self) -> None:
        _require(self.file, "a file path", self.kind)
        _require(self.search, "search text", self.kind)

    def paths(self) -> tuple[str, ...]:
        return (self.file,)

    def label(self) -> str:
        return self.file


@dataclass(frozen=True)
class Overwrite:
    file: str
    content: str

    kind: ClassVar[str] = "overwrite"

    def __post_init__(self) -> None:
        _require(self.file, "a file path", self.kind)

    def paths(self) -> tuple[str, ...]:
        return (self.file,)

    def label(self) -> str:
        return self.file


Operation = Union[Create, Delete, Rename, SearchReplace, Overwrite]


def to_dict(op: Operation) -> dict[str, str]:
    """JSON-friendly form, keyed like the protocol (``type``, ``file``, ``from``, ``to``...)."""
    match op:
        case Create(file=f, content=c):
            return {"type": op.kind, "file": f, "content": c}
        case Delete(file=f):
            return {"type": op.kind, "file": f}
        case Rename(source=s, target=t):
            return {"type": op.kind, "from": s, "to": t}
        case SearchReplace(file=f, search=s, replace=r):
            return {"type": op.kind, "file": f, "search": s, "replace": r}
        case Overwrite(file=f, content=c):
            return {"type": op.kind, "file": f, "content": c}
    raise TypeError(f"Not an operation: {op!r}")


def operation_from_dict(data: dict[str, Any]) -> Operation:
    """Inverse of :func:`to_dict`. Raises ``ValueError`` on unknown or incomplete records."""
    kind = data.get("type")
    try:
        match kind:
            case "create":
                return Create(data["file"], data.get("content", ""))
            case "delete":
                return Delete(data["file"])
            case "rename":
                return Rename(data["from"], data["to"])
            case "search-replace":
                return SearchReplace(data["file"], data["search"], data.get("replace", ""))
            case "overwrite":
                return Overwrite(data["file"], data.get("content", ""))
    except KeyError as exc:
        raise ValueError(f"{kind} operation is missing field {exc}") from exc
    raise ValueError(f"Unknown operation type: {kind!r}")
