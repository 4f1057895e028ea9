"""Apply parsed operations to a workspace directory.

Each operation runs inside its own failure boundary: an error is logged and
counted, and the batch moves on. Nothing already applied is rolled back.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from llmdiff import log
from llmdiff.config import resolve_workspace
from llmdiff.errors import (
    ContainmentError,
    DeclinedOverwriteError,
    OperationError,
    PreconditionError,
)
from llmdiff.io_utils import read_text, write_text
from llmdiff.ops.model import (
    Create,
    Delete,
    Operation,
    Overwrite,
    Rename,
    SearchReplace,
    normalize_path,
)

ConfirmOverwrite = Callable[[str], bool]


@dataclass
class Failure:
    operation: Operation
    reason: str


@dataclass
class BatchResult:
    success: int = 0
    errors: int = 0
    applied: list[Operation] = field(default_factory=list)
    failures: list[Failure] = field(default_factory=list)

    def summary(self) -> str:
        text = f"{self.success} applied, {self.errors} failed"
        return f"{text} (see log)" if self.errors else text


class Executor:
    """Runs operations against *root*.

    ``confirm_overwrite(path)`` is asked before a Create replaces an existing
    file; when it is not given, the overwrite is declined. ``diagnostics`` is
    any object with a ``write(msg)`` method, usually a ``log.DiagnosticLog``.
    """

    def __init__(
        self,
        root: Path | str,
        *,
        confirm_overwrite: ConfirmOverwrite | None = None,
        diagnostics: log.DiagnosticLog | None = None,
    ) -> None:
        self.root = resolve_workspace(root)
        self._confirm_overwrite = confirm_overwrite
        self._diagnostics = diagnostics

    # ── batch ────────────────────────────────────────────────────

    def execute_all(self, operations: Iterable[Operation]) -> BatchResult:
        result = BatchResult()
        for op in operations:
            try:
                self.execute(op)
            except (OperationError, OSError, ValueError) as exc:
                result.errors += 1
                result.failures.append(Failure(op, str(exc)))
                self._record(f"✗ {op.kind}: {exc}")
            else:
                result.success += 1
                result.applied.append(op)
                self._record(f"✓ {op.kind}: {op.label()}")
        return result

    def execute(self, op: Operation) -> None:
        match op:
            case Create():
                self._create(op)
            case Delete():
                self._delete(op)
            case Rename():
                self._rename(op)
            case SearchReplace():
                self._search_replace(op)
            case Overwrite():
                self._overwrite(op)
            case _:
                raise TypeError(f"Not an operation: {op!r}")

    # ── path safety ──────────────────────────────────────────────

    def resolve(self, relative: str) -> Path:
        """Absolute path for *relative*, or ``ContainmentError`` if it leaves the root."""
        rel = normalize_path(relative)
        try:
            target = (self.root / rel).resolve()
        except (ValueError, RuntimeError) as exc:
            # NUL bytes, symlink loops
            raise OperationError(f"Invalid path {relative!r}: {exc}") from exc
        if target == self.root or not target.is_relative_to(self.root):
            raise ContainmentError(relative)
        return target

    # ── per-kind handlers ────────────────────────────────────────

    def _create(self, op: Create) -> None:
        path = self.resolve(op.file)
        if path.is_dir():
            raise PreconditionError(f"{op.file} is a directory")
        if path.exists():
            if self._confirm_overwrite is None or not self._confirm_overwrite(op.file):
                raise DeclinedOverwriteError(op.file)
        write_text(path, op.content, make_parents=True)

    def _delete(self, op: Delete) -> None:
        path = self.resolve(op.file)
        if not path.is_file():
            raise PreconditionError(f"File {op.file} does not exist")
        path.unlink()

    def _rename(self, op: Rename) -> None:
        src = self.resolve(op.source)
        dst = self.resolve(op.target)
        if not src.exists():
            raise PreconditionError(f"Source file {op.source} does not exist")
        if dst.exists():
            raise PreconditionError(f"Destination file {op.target} already exists")
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(src), str(dst))

    def _search_replace(self, op: SearchReplace) -> None:
        path = self._existing_file(op.file)
        content = read_text(path)
        count = content.count(op.search)
        if count == 0:
            raise PreconditionError(f"Search text not found in {op.file}")
        write_text(path, content.replace(op.search, op.replace))
        log.debug(f"Replaced {count} occurrence(s) in {op.file}")

    def _overwrite(self, op: Overwrite) -> None:
        write_text(self._existing_file(op.file), op.content)

    def _existing_file(self, relative: str) -> Path:
        path = self.resolve(relative)
        if not path.is_file():
            raise PreconditionError(f"File {relative} does not exist")
        return path

    def _record(self, msg: str) -> None:
        if self._diagnostics is not None:
            self._diagnostics.write(msg)
        else:
            log.debug(msg)


def execute_all(
    operations: Iterable[Operation],
    root: Path | str | None,
    *,
    confirm_overwrite: ConfirmOverwrite | None = None,
    diagnostics: log.DiagnosticLog | None = None,
) -> BatchResult:
    """Apply *operations* under *root*. Raises ``WorkspaceUnavailableError`` up front."""
    executor = Executor(
        root if root is not None else resolve_workspace(),
        confirm_overwrite=confirm_overwrite,
        diagnostics=diagnostics,
    )
    return executor.execute_all(operations)
