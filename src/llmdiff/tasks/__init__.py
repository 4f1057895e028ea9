from llmdiff.tasks.ledger import TaskLedger
from llmdiff.tasks.model import Task, TaskStatus

__all__ = ["Task", "TaskLedger", "TaskStatus"]
