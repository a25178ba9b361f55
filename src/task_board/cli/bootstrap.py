# src/task_board/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- wires the store, broadcaster and live-update service into AppState.

The watcher is owned by the returned AppState and is NOT started here;
callers that need live events call state.live.start().
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..live.broadcaster import Broadcaster
from ..live.service import LiveUpdates
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    store = TaskStore(settings.tasks_dir)
    broadcaster = Broadcaster(max_pending=settings.subscriber_queue_size)
    live = LiveUpdates(
        store,
        broadcaster,
        interval=settings.watch_interval_seconds,
        retry_interval=settings.watch_retry_seconds,
        workers=settings.classifier_workers,
    )

    logger.debug("AppState created tasks_dir=%s", settings.tasks_dir)
    return AppState(settings=settings, store=store, broadcaster=broadcaster, live=live)
