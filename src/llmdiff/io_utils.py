"""Text file I/O with UTF-8 encoding and untouched line endings."""

from __future__ import annotations

from io import TextIOWrapper
from pathlib import Path
from typing import Any

PathLike = Path | str


def read_text(path: PathLike, errors: str = "strict") -> str:
    """Read path as UTF-8 text without newline translation (``\\r\\n`` stays ``\\r\\n``)."""
    with open(path, "r", encoding="utf-8", errors=errors, newline="") as f:
        return f.read()


def write_text(path: PathLike, text: str, *, make_parents: bool = False) -> None:
    """Write text to path as UTF-8, byte for byte. Optionally create missing parent dirs."""
    p = path if isinstance(path, Path) else Path(path)
    if make_parents:
        p.parent.mkdir(parents=True, exist_ok=True)
    with open(p, "w", encoding="utf-8", newline="") as f:
        f.write(text)


def open_text(
    path: PathLike,
    mode: str = "r",
    *,
    encoding: str = "utf-8",
    errors: str = "strict",
    **kwargs: Any,
) -> TextIOWrapper:
    """Open path for text I/O with UTF-8 by default. Use for append (e.g. log files)."""
    return open(path, mode, encoding=encoding, errors=errors, **kwargs)
