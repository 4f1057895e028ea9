"""Task data model persisted by the ledger."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from llmdiff.ops.model import Operation, operation_from_dict, to_dict


class TaskStatus(str, Enum):
    PENDING = "pending"
    APPLIED = "applied"
    COMMITTED = "committed"
    UNDONE = "undone"


@dataclass
class Task:
    id: str
    name: str
    description: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operations: list[Operation] = field(default_factory=list)
    status: TaskStatus = TaskStatus.PENDING
    # Ordered sets: insertion order kept, no duplicates.
    affected_files: list[str] = field(default_factory=list)
    included_files: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "createdAt": self.created_at.isoformat(),
            "operations": [to_dict(op) for op in self.operations],
            "status": self.status.value,
            "affectedFiles": list(self.affected_files),
            "includedFiles": list(self.included_files),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        created = datetime.fromisoformat(data["createdAt"])
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return cls(
            id=str(data["id"]),
            name=data["name"],
            description=data.get("description") or "",
            created_at=created,
            operations=[operation_from_dict(op) for op in data.get("operations", [])],
            status=TaskStatus(data.get("status", TaskStatus.PENDING.value)),
            affected_files=list(data.get("affectedFiles", [])),
            included_files=list(data.get("includedFiles", [])),
        )
