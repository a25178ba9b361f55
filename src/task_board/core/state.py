# src/task_board/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..live.broadcaster import Broadcaster
from ..live.service import LiveUpdates
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Settings are kept on the state so commands can read them without globals.
    settings: Any

    store: TaskStore
    broadcaster: Broadcaster
    live: LiveUpdates

    def shutdown(self) -> None:
        """Stop the watcher and end every open subscription."""
        self.live.stop()
        self.broadcaster.close()
