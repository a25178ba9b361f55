# src/task_board/live/watcher.py

"""
Directory watcher.

Wraps watchdog's polling observer around the tasks root and turns its events
into RawChange notifications for record files exactly two levels deep:

  <root>/<list_id>/<task_id>.json

Polling is used instead of native events: native backends drop events on
some filesystems (network mounts, containers), polling does not.
The polling snapshot never lists directories below <root>/<list_id>, so
deep trees under a list are not walked on every poll.

Lifecycle:
- start() is idempotent; a running watcher ignores repeated calls
- stop() joins the observer and resets state, so start() works again
- a missing or deleted root is not fatal: a supervisor thread re-arms
  the watch once the directory (re)appears
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from watchdog.events import (
    DirDeletedEvent,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers.api import ObservedWatch
from watchdog.observers.polling import PollingObserverVFS

from ..tasks.task_store import RECORD_SUFFIX

logger = logging.getLogger(__name__)

WATCH_DEPTH = 2


class ChangeOp(StrEnum):
    ADD = "add"
    CHANGE = "change"
    UNLINK = "unlink"


@dataclass(frozen=True, slots=True)
class RawChange:
    op: ChangeOp
    path: Path


ChangeCallback = Callable[[RawChange], None]


class _RecordEventHandler(FileSystemEventHandler):
    """Translate watchdog events into RawChange calls on the owning watcher."""

    def __init__(self, watcher: DirectoryWatcher) -> None:
        super().__init__()
        self._watcher = watcher

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._watcher._emit(ChangeOp.ADD, event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._watcher._emit(ChangeOp.CHANGE, event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if isinstance(event, DirDeletedEvent) or event.is_directory:
            self._watcher._on_dir_deleted(event.src_path)
            return
        self._watcher._emit(ChangeOp.UNLINK, event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._watcher._emit(ChangeOp.UNLINK, event.src_path)
        self._watcher._emit(ChangeOp.ADD, event.dest_path)


class DirectoryWatcher:
    """Background watcher for a tasks root directory."""

    def __init__(
        self,
        root: str | Path,
        on_change: ChangeCallback,
        *,
        interval: float = 0.3,
        retry_interval: float = 2.0,
    ) -> None:
        self._root = Path(root).expanduser()
        self._on_change = on_change
        self._interval = max(0.01, float(interval))
        self._retry_interval = max(0.01, float(retry_interval))

        self._lock = threading.RLock()
        self._observer: PollingObserverVFS | None = None
        self._watch: ObservedWatch | None = None
        self._supervisor: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._started = False
        self._armed = False

    @property
    def root(self) -> Path:
        return self._root

    @property
    def is_started(self) -> bool:
        return self._started

    @property
    def is_armed(self) -> bool:
        """True while the root directory is actually being polled."""
        return self._armed

    # ---- lifecycle ----

    def start(self) -> None:
        with self._lock:
            if self._started:
                return

            self._stop_event = threading.Event()
            self._observer = PollingObserverVFS(
                stat=os.stat,
                listdir=self._listdir,
                polling_interval=self._interval,
            )
            self._observer.start()
            self._started = True
            self._arm()

            self._supervisor = threading.Thread(
                target=self._supervise,
                args=(self._stop_event,),
                name="task-board-watch-supervisor",
                daemon=True,
            )
            self._supervisor.start()

        logger.info("File watcher started: watching %s (interval=%.2fs)", self._root, self._interval)

    def stop(self) -> None:
        with self._lock:
            if not self._started:
                return
            self._started = False
            self._armed = False
            self._stop_event.set()
            observer, self._observer = self._observer, None
            supervisor, self._supervisor = self._supervisor, None
            self._watch = None

        if observer is not None:
            observer.stop()
            observer.join(timeout=5.0)
        if supervisor is not None and supervisor is not threading.current_thread():
            supervisor.join(timeout=5.0)

        logger.info("File watcher stopped")

    # ---- arming / recovery ----

    def _arm(self) -> None:
        with self._lock:
            if not self._started or self._armed or self._observer is None:
                return

            if self._watch is not None:
                try:
                    self._observer.unschedule(self._watch)
                except KeyError:
                    pass
                self._watch = None

            if not self._root.is_dir():
                logger.warning("Tasks directory not found: %s (waiting for it to appear)", self._root)
                return

            try:
                self._watch = self._observer.schedule(
                    _RecordEventHandler(self),
                    str(self._root),
                    recursive=True,
                )
            except OSError as e:
                logger.error("File watcher could not watch %s: %s", self._root, e)
                return

            self._armed = True
            logger.debug("File watcher armed on %s", self._root)

    def _supervise(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self._retry_interval):
            if not self._armed:
                try:
                    self._arm()
                except Exception:
                    logger.exception("File watcher re-arm failed")

    def _on_dir_deleted(self, raw_path: bytes | str) -> None:
        # Called on the observer thread while it holds the observer lock;
        # taking self._lock here would deadlock against _arm().
        if Path(os.fsdecode(raw_path)) != self._root or not self._armed:
            return
        self._armed = False
        logger.warning("File watcher error: tasks directory removed: %s", self._root)

    # ---- event filtering ----

    def _relative_parts(self, path: Path) -> tuple[str, ...] | None:
        try:
            return path.relative_to(self._root).parts
        except ValueError:
            return None

    def _listdir(self, path: str):
        """Directory listing for the polling snapshot; nothing below <root>/<list>."""
        parts = self._relative_parts(Path(os.fsdecode(path)))
        if parts is None or len(parts) >= WATCH_DEPTH:
            return []
        return os.scandir(path)

    def _emit(self, op: ChangeOp, raw_path: bytes | str) -> None:
        if not raw_path:
            return
        path = Path(os.fsdecode(raw_path))
        if path.suffix != RECORD_SUFFIX:
            return

        parts = self._relative_parts(path)
        if parts is None or len(parts) != WATCH_DEPTH:
            return

        # After stop() returns nothing else may reach the callback.
        if not self._started:
            return

        try:
            self._on_change(RawChange(op=op, path=path))
        except Exception:
            logger.exception("File watcher callback failed op=%s path=%s", op.value, path)
