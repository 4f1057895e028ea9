"""Exception hierarchy shared by the executor, the ledger and the CLI."""

from __future__ import annotations


class LlmDiffError(Exception):
    """Base class for every error raised by llmdiff."""


class WorkspaceUnavailableError(LlmDiffError):
    """No usable workspace root. Raised before any operation in a batch runs."""


# ── Per-operation failures (caught at the batch boundary) ────────────


class OperationError(LlmDiffError):
    """A single operation could not be applied. Never aborts the batch."""


class ContainmentError(OperationError):
    """A path resolves outside the workspace root."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Path outside workspace: {path}")
        self.path = path


class PreconditionError(OperationError):
    """The target is missing when it must exist, or present when it must not."""


class DeclinedOverwriteError(OperationError):
    """Create hit an existing file and the caller declined to overwrite it."""

    def __init__(self, path: str) -> None:
        super().__init__(f"File {path} already exists (overwrite declined)")
        self.path = path


# ── Ledger ───────────────────────────────────────────────────────────


class LedgerError(LlmDiffError):
    """Misuse of the task ledger or a failed ledger action."""


class NoActiveTaskError(LedgerError):
    def __init__(self) -> None:
        super().__init__("No active task. Start one with `llmdiff task start NAME`.")


class TaskNotFoundError(LedgerError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Unknown task: {task_id}")
        self.task_id = task_id


class TaskStateError(LedgerError):
    """The requested transition is not allowed from the task's current status."""


class VcsError(LedgerError):
    """The version-control collaborator reported failure."""
