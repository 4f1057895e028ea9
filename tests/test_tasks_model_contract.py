"""Contract tests for the task data model persisted by the ledger."""

from __future__ import annotations

from dataclasses import fields
from datetime import datetime, timezone

from llmdiff.ops.model import Create, Delete
from llmdiff.tasks.model import Task, TaskStatus


def test_task_fields() -> None:
    names = {f.name for f in fields(Task)}
    assert {
        "id",
        "name",
        "description",
        "created_at",
        "operations",
        "status",
        "affected_files",
        "included_files",
    } <= names


def test_new_task_defaults() -> None:
    task = Task(id="t1", name="A")
    assert task.status is TaskStatus.PENDING
    assert task.operations == [] and task.affected_files == [] and task.included_files == []
    assert task.created_at.tzinfo is not None


def test_status_values_are_stable_strings() -> None:
    assert [s.value for s in TaskStatus] == ["pending", "applied", "committed", "undone"]


def test_dict_round_trip() -> None:
    task = Task(
        id="t1",
        name="A",
        description="d",
        created_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        operations=[Create("a.py", "x"), Delete("b.py")],
        status=TaskStatus.APPLIED,
        affected_files=["a.py", "b.py"],
        included_files=["c.py"],
    )
    data = task.to_dict()
    assert data["createdAt"] == "2024-05-01T12:00:00+00:00"
    assert Task.from_dict(data) == task


def test_from_dict_tolerates_missing_optional_keys() -> None:
    task = Task.from_dict({"id": 1700000000000, "name": "old", "createdAt": "2024-01-01T00:00:00"})
    assert task.id == "1700000000000"
    assert task.included_files == []
    assert task.created_at.tzinfo is timezone.utc
