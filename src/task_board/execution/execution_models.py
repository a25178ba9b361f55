# src/task_board/execution/execution_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

EXECUTING = "Executing"


@dataclass(frozen=True, slots=True)
class ActiveTask:
    id: str
    subject: str
    phase: str = ""


@dataclass(frozen=True, slots=True)
class CompletedTask:
    id: str
    subject: str
    result: str = ""


@dataclass(frozen=True, slots=True)
class ExecutionProgress:
    """
    Snapshot of an execution session, projected from its progress artifact.

    Not a store of record: recomputed on every read.
    """

    status: str
    wave: int = 0
    total_waves: int = 0
    updated: str = ""
    max_parallel: int | None = None
    active_tasks: tuple[ActiveTask, ...] = ()
    completed_tasks: tuple[CompletedTask, ...] = ()

    @property
    def is_executing(self) -> bool:
        return self.status == EXECUTING

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "status": self.status,
            "wave": self.wave,
            "totalWaves": self.total_waves,
            "updated": self.updated,
            "activeTasks": [
                {"id": t.id, "subject": t.subject, "phase": t.phase} for t in self.active_tasks
            ],
            "completedTasks": [
                {"id": t.id, "subject": t.subject, "result": t.result} for t in self.completed_tasks
            ],
        }
        if self.max_parallel is not None:
            out["maxParallel"] = self.max_parallel
        return out


@dataclass(frozen=True, slots=True)
class ExecutionArtifact:
    name: str
    content: str
    last_modified: int  # epoch milliseconds

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "content": self.content, "lastModified": self.last_modified}


@dataclass(frozen=True, slots=True)
class ExecutionContext:
    execution_dir: Path
    artifacts: tuple[ExecutionArtifact, ...] = field(default_factory=tuple)
    progress: ExecutionProgress | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "executionDir": str(self.execution_dir),
            "artifacts": [a.to_dict() for a in self.artifacts],
            "progress": self.progress.to_dict() if self.progress is not None else None,
        }
