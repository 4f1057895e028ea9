"""Task ledger: one JSON record per task, plus the commit/undo state machine."""

from __future__ import annotations

import json
import threading
import uuid
from collections import Counter
from collections.abc import Callable, Iterable
from datetime import timedelta
from pathlib import Path

from llmdiff import log
from llmdiff.errors import (
    LedgerError,
    NoActiveTaskError,
    TaskNotFoundError,
    TaskStateError,
    VcsError,
)
from llmdiff.git_ops import VcsRunner
from llmdiff.io_utils import read_text, write_text
from llmdiff.ops.model import Operation
from llmdiff.tasks.model import Task, TaskStatus

COMMIT_PREFIX = "Task: "


class TaskLedger:
    """Persists tasks under *tasks_dir* and tracks the current one.

    Usage::

        ledger = TaskLedger(tasks_dir, GitRunner(root))
        ledger.start_task("Add login")       # lookup-or-create by name
        ledger.add_operations(result.applied)  # pending/applied -> applied
        ledger.commit_task()                   # applied -> committed
        ledger.undo_task(confirm)              # applied -> undone

    Status transitions::

        pending --add_operations--> applied --commit_task--> committed
                                    applied --undo_task----> undone

    Appending operations to a committed or undone task reopens it as applied.
    """

    def __init__(
        self,
        tasks_dir: Path,
        vcs: VcsRunner,
        current_file: Path | None = None,
    ) -> None:
        self.tasks_dir = tasks_dir
        self._vcs = vcs
        self._current_file = current_file
        self._current: Task | None = None
        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()
        self.tasks_dir.mkdir(parents=True, exist_ok=True)
        self._restore_current()

    # ── serialization per task ───────────────────────────────────

    def task_lock(self, task_id: str) -> threading.RLock:
        """Re-entrant lock serializing apply/commit/undo for one task id."""
        with self._locks_guard:
            lock = self._locks.get(task_id)
            if lock is None:
                lock = self._locks[task_id] = threading.RLock()
            return lock

    # ── lookup / lifecycle ───────────────────────────────────────

    def start_task(self, name: str, description: str | None = None) -> Task:
        """Make the task called *name* current, creating it when none exists.

        Names are matched exactly, whitespace included.
        """
        if not name.strip():
            raise LedgerError("Task name cannot be empty")

        known = self.load_recent_tasks(limit=0)
        existing = next((t for t in known if t.name == name), None)
        if existing is not None:
            if description and not existing.description:
                existing.description = description
                self._save(existing)
            log.debug(f"Reusing task {existing.id} ({name})")
            self._set_current(existing)
            return existing

        task = Task(id=uuid.uuid4().hex[:12], name=name, description=description or "")
        # Keep creation times strictly increasing so "most recent" is well defined.
        if known and task.created_at <= known[0].created_at:
            task.created_at = known[0].created_at + timedelta(microseconds=1)
        self._save(task)
        self._set_current(task)
        log.debug(f"Created task {task.id} ({name})")
        return task

    def get_task(self, task_id: str) -> Task:
        path = self._task_path(task_id)
        if not path.is_file():
            raise TaskNotFoundError(task_id)
        return self._load(path)

    def find_task_by_name(self, name: str) -> Task | None:
        """Most recent task whose name matches exactly."""
        for task in self.load_recent_tasks(limit=0):
            if task.name == name:
                return task
        return None

    def get_current_task(self) -> Task | None:
        return self._current

    def set_current_task(self, task_id: str) -> Task:
        task = self.get_task(task_id)
        self._set_current(task)
        return task

    def clear_current_task(self) -> None:
        """End the current task. Its record stays on disk."""
        self._set_current(None)

    def load_recent_tasks(self, limit: int = 10) -> list[Task]:
        """Persisted tasks, newest first. ``limit <= 0`` returns all of them."""
        tasks: list[Task] = []
        for path in self.tasks_dir.glob("*.json"):
            try:
                tasks.append(self._load(path))
            except (ValueError, KeyError) as exc:
                log.warn(f"Skipping unreadable task record {path.name}: {exc}")
        tasks.sort(key=lambda t: (t.created_at, t.id), reverse=True)
        return tasks[:limit] if limit > 0 else tasks

    # ── context files ────────────────────────────────────────────

    def add_included_files(self, paths: Iterable[str]) -> list[str]:
        """Union *paths* into the current task's context files. Returns the new ones."""
        task = self._require_current()
        added: list[str] = []
        for p in paths:
            if p not in task.included_files:
                task.included_files.append(p)
                added.append(p)
        if added:
            self._save(task)
        return added

    def new_files(self, paths: Iterable[str]) -> list[str]:
        """Subset of *paths* not yet in the current task's context."""
        if self._current is None:
            return list(paths)
        known = set(self._current.included_files)
        return [p for p in paths if p not in known]

    def clear_included_files(self) -> None:
        task = self._require_current()
        task.included_files = []
        self._save(task)

    # ── operations and status ────────────────────────────────────

    def add_operations(self, applied: Iterable[Operation], task: Task | None = None) -> Task:
        """Record successfully applied operations on *task* (default: the current task)."""
        task = task if task is not None else self._require_current()
        ops = list(applied)
        if not ops:
            return task
        with self.task_lock(task.id):
            task.operations.extend(ops)
            for op in ops:
                for p in op.paths():
                    if p not in task.affected_files:
                        task.affected_files.append(p)
            task.status = TaskStatus.APPLIED
            self._save(task)
        return task

    def commit_task(self) -> Task:
        """Stage and commit the working tree, named after the task."""
        task = self._require_current()
        with self.task_lock(task.id):
            self._require_status(task, "commit")
            message = f"{COMMIT_PREFIX}{task.name}"
            if not self._vcs.stage_and_commit(message):
                raise VcsError(f"Commit failed for task '{task.name}'")
            task.status = TaskStatus.COMMITTED
            self._save(task)
        return task

    def undo_task(self, confirm: Callable[[str], bool]) -> bool:
        """Hard-reset the whole working tree once *confirm* agrees.

        Returns ``False`` when the user declines; the task is left untouched.
        """
        task = self._require_current()
        with self.task_lock(task.id):
            self._require_status(task, "undo")
            if not confirm(f"Discard ALL working-tree changes for task '{task.name}'? (git reset --hard HEAD)"):
                return False
            if not self._vcs.hard_reset():
                raise VcsError(f"Undo failed for task '{task.name}'")
            task.status = TaskStatus.UNDONE
            self._save(task)
        return True

    def summary(self) -> str:
        task = self._current
        if task is None:
            return "No active task"
        counts = Counter(op.kind for op in task.operations)
        ops = ", ".join(f"{n} x {kind}" for kind, n in counts.items()) or "no operations"
        text = f"Task: {task.name} | {ops} ({task.status.value})"
        if task.included_files:
            text += f" | {len(task.included_files)} file(s) in context"
        return text

    # ── persistence ──────────────────────────────────────────────

    def _task_path(self, task_id: str) -> Path:
        return self.tasks_dir / f"{task_id}.json"

    def _save(self, task: Task) -> None:
        write_text(self._task_path(task.id), json.dumps(task.to_dict(), indent=2, ensure_ascii=False) + "\n")

    def _load(self, path: Path) -> Task:
        return Task.from_dict(json.loads(read_text(path)))

    def _set_current(self, task: Task | None) -> None:
        self._current = task
        if self._current_file is None:
            return
        if task is None:
            self._current_file.unlink(missing_ok=True)
        else:
            write_text(self._current_file, task.id + "\n", make_parents=True)

    def _restore_current(self) -> None:
        if self._current_file is None or not self._current_file.is_file():
            return
        task_id = read_text(self._current_file).strip()
        try:
            self._current = self.get_task(task_id)
        except TaskNotFoundError:
            log.warn(f"Current task {task_id} no longer exists; clearing it")
            self._current_file.unlink(missing_ok=True)

    def _require_current(self) -> Task:
        if self._current is None:
            raise NoActiveTaskError()
        return self._current

    @staticmethod
    def _require_status(task: Task, action: str) -> None:
        if task.status is not TaskStatus.APPLIED:
            raise TaskStateError(
                f"Cannot {action} task '{task.name}': status is {task.status.value}, expected applied"
            )
