# src/task_board/live/service.py

from __future__ import annotations

import logging
import threading
from pathlib import Path

from ..tasks.task_store import TaskStore
from .broadcaster import Broadcaster
from .classifier import ChangeClassifier
from .pipeline import ChangePipeline
from .watcher import DirectoryWatcher, RawChange

logger = logging.getLogger(__name__)


class LiveUpdates:
    """
    Watcher -> classifier -> broadcaster, with one start/stop switch.

    Owned by the composition root (AppState). start() and stop() are
    idempotent and may be called repeatedly (e.g. by a host that
    re-initializes its app); each start() builds a fresh watcher and pipeline.
    """

    def __init__(
        self,
        store: TaskStore,
        broadcaster: Broadcaster,
        *,
        interval: float = 0.3,
        retry_interval: float = 2.0,
        workers: int = 4,
    ) -> None:
        self._store = store
        self._broadcaster = broadcaster
        self._classifier = ChangeClassifier(store)
        self._interval = interval
        self._retry_interval = retry_interval
        self._workers = workers

        self._lock = threading.Lock()
        self._watcher: DirectoryWatcher | None = None
        self._pipeline: ChangePipeline | None = None

    @property
    def root(self) -> Path:
        return self._store.root

    @property
    def broadcaster(self) -> Broadcaster:
        return self._broadcaster

    @property
    def is_running(self) -> bool:
        return self._watcher is not None and self._watcher.is_started

    @property
    def watcher(self) -> DirectoryWatcher | None:
        return self._watcher

    def start(self) -> None:
        with self._lock:
            if self._watcher is not None:
                return

            pipeline = ChangePipeline(self._classifier, self._broadcaster, max_workers=self._workers)

            def on_change(change: RawChange) -> None:
                pipeline.submit(change)

            watcher = DirectoryWatcher(
                self._store.root,
                on_change,
                interval=self._interval,
                retry_interval=self._retry_interval,
            )
            watcher.start()
            self._pipeline = pipeline
            self._watcher = watcher

        logger.info("Live updates started root=%s", self._store.root)

    def stop(self) -> None:
        with self._lock:
            watcher, self._watcher = self._watcher, None
            pipeline, self._pipeline = self._pipeline, None

        if watcher is None:
            return

        # Watcher first, so nothing new is submitted while the pipeline drains.
        watcher.stop()
        if pipeline is not None:
            pipeline.close(wait=True)
        logger.info("Live updates stopped")
