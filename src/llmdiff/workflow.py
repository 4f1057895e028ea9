"""Glue between parser, executor and ledger: the parse-and-apply request."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from llmdiff import log
from llmdiff.errors import ContainmentError, NoActiveTaskError
from llmdiff.ops.executor import BatchResult, Executor
from llmdiff.ops.model import Operation, normalize_path
from llmdiff.ops.parser import parse
from llmdiff.tasks.ledger import TaskLedger


@dataclass
class ApplyOutcome:
    operations: list[Operation] = field(default_factory=list)
    result: BatchResult = field(default_factory=BatchResult)

    @property
    def parsed(self) -> bool:
        return bool(self.operations)


def apply_text(ledger: TaskLedger, text: str, executor: Executor) -> ApplyOutcome:
    """Parse *text*, apply it, and record the applied subset on the current task.

    The whole request runs under the task's lock, so two applies (or an apply
    and a commit) against the same task never interleave.
    """
    task = ledger.get_current_task()
    if task is None:
        raise NoActiveTaskError()

    ops = parse(text)
    if not ops:
        log.debug("No operation blocks found")
        return ApplyOutcome()

    with ledger.task_lock(task.id):
        result = executor.execute_all(ops)
        if result.applied:
            ledger.add_operations(result.applied, task=task)
    return ApplyOutcome(operations=ops, result=result)


def to_workspace_relative(path: str | Path, root: Path) -> str:
    """Workspace-relative, forward-slash form of *path* (absolute or relative to cwd)."""
    p = Path(path)
    absolute = (p if p.is_absolute() else Path.cwd() / p).resolve()
    if not absolute.is_relative_to(root):
        raise ContainmentError(str(path))
    return normalize_path(os.path.relpath(absolute, root))


def include_files(ledger: TaskLedger, paths: Iterable[str | Path], root: Path) -> list[str]:
    """Add files selected for context to the current task. Returns only the new ones."""
    relative = [to_workspace_relative(p, root) for p in paths]
    fresh = ledger.new_files(list(dict.fromkeys(relative)))
    return ledger.add_included_files(fresh)
