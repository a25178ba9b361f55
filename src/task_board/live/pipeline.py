# src/task_board/live/pipeline.py

from __future__ import annotations

"""
Change pipeline.

Sits between the watcher and the broadcaster:

  watcher thread -> submit() -> per-path FIFO -> worker pool -> classify -> publish

Guarantees:
- notifications for the same path are classified and published in the
  order they were submitted (one drain per path at a time)
- a slow read for one path never holds up other paths
- after close() no new notifications are accepted; work already queued
  may still finish
"""

import logging
import threading
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from ..core.ports import EventPublisher
from .classifier import ChangeClassifier
from .watcher import RawChange

logger = logging.getLogger(__name__)


class ChangePipeline:
    def __init__(
        self,
        classifier: ChangeClassifier,
        publisher: EventPublisher,
        *,
        max_workers: int = 4,
    ) -> None:
        self._classifier = classifier
        self._publisher = publisher
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, int(max_workers)),
            thread_name_prefix="task-board-classify",
        )
        self._lock = threading.Lock()
        self._pending: dict[Path, deque[RawChange]] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, change: RawChange) -> bool:
        """Queue a notification; False if the pipeline is closed."""
        with self._lock:
            if self._closed:
                logger.debug("Pipeline closed; ignoring %s %s", change.op.value, change.path)
                return False

            queue = self._pending.get(change.path)
            if queue is not None:
                # A drain for this path is already scheduled; it will pick this up.
                queue.append(change)
                return True

            self._pending[change.path] = deque([change])
            self._executor.submit(self._drain, change.path)
            return True

    def _drain(self, path: Path) -> None:
        while True:
            with self._lock:
                queue = self._pending.get(path)
                if not queue:
                    self._pending.pop(path, None)
                    return
                change = queue.popleft()

            try:
                event = self._classifier.classify(change)
                if event is not None:
                    self._publisher.publish(event)
            except Exception:
                logger.exception("Failed to process %s %s", change.op.value, change.path)

    def close(self, *, wait: bool = True) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=wait)
