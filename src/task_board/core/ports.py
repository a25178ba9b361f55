# src/task_board/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) between the live-update components.

The classifier only needs a way to load one record file, the pipeline only
needs somewhere to publish events. Tests swap both for fakes.
"""

from pathlib import Path
from typing import Protocol

from ..tasks.task_models import TaskEvent, TaskRecord


class TaskFileReader(Protocol):
    def load_task_file(self, path: str | Path) -> TaskRecord | None: ...


class EventPublisher(Protocol):
    def publish(self, event: TaskEvent) -> int: ...
