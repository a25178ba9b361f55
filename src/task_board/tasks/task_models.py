# src/task_board/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    """Task lifecycle status as stored in the record files."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @classmethod
    def from_raw(cls, raw: Any) -> TaskStatus:
        if not isinstance(raw, str):
            return cls.PENDING
        try:
            return cls(raw)
        except ValueError:
            return cls.PENDING


@dataclass(frozen=True, slots=True)
class TaskRecord:
    """
    One validated task.

    Built by the parser every time a file is read and never mutated;
    a changed file produces a brand new record.
    """

    id: str
    subject: str
    description: str = ""
    status: TaskStatus = TaskStatus.PENDING
    active_form: str | None = None
    blocks: tuple[str, ...] = ()
    blocked_by: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "subject": self.subject,
            "description": self.description,
            "status": self.status.value,
            "blocks": list(self.blocks),
            "blockedBy": list(self.blocked_by),
        }
        if self.active_form is not None:
            out["activeForm"] = self.active_form
        return out


@dataclass(frozen=True, slots=True)
class TaskList:
    id: str
    name: str
    task_count: int

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "taskCount": self.task_count}


class TaskEventKind(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"

    @property
    def wire_type(self) -> str:
        return f"task:{self.value}"


@dataclass(frozen=True, slots=True)
class TaskEvent:
    """
    Typed change notification for a single task file.

    created/updated always carry the freshly parsed record; deleted never does.
    """

    kind: TaskEventKind
    list_id: str
    task_id: str
    task: TaskRecord | None = None

    def __post_init__(self) -> None:
        if self.kind is TaskEventKind.DELETED:
            if self.task is not None:
                raise ValueError("deleted events must not carry a task")
        elif self.task is None:
            raise ValueError(f"{self.kind.value} events require a task")

    @classmethod
    def created(cls, list_id: str, task: TaskRecord, task_id: str | None = None) -> TaskEvent:
        return cls(TaskEventKind.CREATED, list_id, task_id or task.id, task)

    @classmethod
    def updated(cls, list_id: str, task: TaskRecord, task_id: str | None = None) -> TaskEvent:
        return cls(TaskEventKind.UPDATED, list_id, task_id or task.id, task)

    @classmethod
    def deleted(cls, list_id: str, task_id: str) -> TaskEvent:
        return cls(TaskEventKind.DELETED, list_id, task_id)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "type": self.kind.wire_type,
            "taskListId": self.list_id,
            "taskId": self.task_id,
        }
        if self.task is not None:
            out["task"] = self.task.to_dict()
        return out
