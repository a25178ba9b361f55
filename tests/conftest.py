# tests/conftest.py

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from types import SimpleNamespace

import pytest

from task_board.cli.bootstrap import create_initial_state
from task_board.core.state import AppState
from task_board.tasks.task_store import TaskStore

from .fakes import write_task


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests away from the real ~/.claude directory.
    """
    return SimpleNamespace(
        app_name="task-board-test",
        log_level="INFO",
        data_dir=tmp_path / "data",
        claude_dir=tmp_path / "claude",
        tasks_dir=tmp_path / "claude" / "tasks",
        # Fast polling keeps watcher tests short.
        watch_interval_seconds=0.05,
        watch_retry_seconds=0.1,
        classifier_workers=2,
        subscriber_queue_size=64,
    )


@pytest.fixture()
def tasks_root(settings: SimpleNamespace) -> Path:
    root: Path = settings.tasks_dir
    root.mkdir(parents=True, exist_ok=True)
    return root


@pytest.fixture()
def sprint_root(tasks_root: Path) -> Path:
    """The sprint-1 list: ids 1, 2 and x (mixed, so ordered lexically)."""
    write_task(tasks_root, "sprint-1", "1", {"subject": "A"})
    write_task(tasks_root, "sprint-1", "2", {"subject": "B", "status": "completed"})
    write_task(tasks_root, "sprint-1", "x", {"subject": "C"})
    return tasks_root


@pytest.fixture()
def store(tasks_root: Path) -> TaskStore:
    return TaskStore(tasks_root)


@pytest.fixture()
def state(settings: SimpleNamespace, tasks_root: Path) -> Iterator[AppState]:
    """AppState wired exactly like the CLI does, pointed at a tmp tasks root."""
    app_state = create_initial_state(settings=settings)
    try:
        yield app_state
    finally:
        app_state.shutdown()
