# src/task_board/tasks/task_store.py

from __future__ import annotations

import logging
import re
from pathlib import Path

from .task_models import TaskList, TaskRecord
from .task_parser import parse_task

logger = logging.getLogger(__name__)

RECORD_SUFFIX = ".json"

_INT_ID = re.compile(r"-?\d+")


def is_record_file(path: Path) -> bool:
    return path.suffix == RECORD_SUFFIX and path.is_file()


def _is_safe_name(name: str) -> bool:
    """A single path component that cannot escape its parent directory."""
    if not name or name in (".", ".."):
        return False
    return "/" not in name and "\\" not in name and "\0" not in name


def sort_tasks(tasks: list[TaskRecord]) -> list[TaskRecord]:
    """
    Canonical task ordering.

    Numeric ascending when every id is an integer literal, otherwise
    lexicographic over the whole list (never a mix of the two).
    """
    if tasks and all(_INT_ID.fullmatch(t.id) for t in tasks):
        return sorted(tasks, key=lambda t: (int(t.id), t.id))
    return sorted(tasks, key=lambda t: t.id)


class TaskStore:
    """
    Read-only view over a directory of task lists.

    Layout:
      <root>/<list_id>/<task_id>.json

    There is no cache: every call walks the filesystem again, because other
    processes write the tree concurrently and the files are the only truth.

    Thread-safety:
    - no shared mutable state, every method can be called from any thread
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).expanduser()
        logger.info("TaskStore ready root=%s exists=%s", self._root, self._root.is_dir())

    @property
    def root(self) -> Path:
        return self._root

    # ---- low-level helpers ----

    def list_dir(self, list_id: str) -> Path | None:
        if not _is_safe_name(list_id):
            return None
        return self._root / list_id

    def task_path(self, list_id: str, task_id: str) -> Path | None:
        list_dir = self.list_dir(list_id)
        if list_dir is None or not _is_safe_name(task_id):
            return None
        return list_dir / f"{task_id}{RECORD_SUFFIX}"

    @staticmethod
    def read_text(path: str | Path) -> str | None:
        """Read a UTF-8 text file; None when it is missing or unreadable."""
        try:
            return Path(path).read_text("utf-8")
        except FileNotFoundError:
            logger.debug("File vanished or missing: %s", path)
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Error reading file %s: %s", path, e)
            return None

    def load_task_file(self, path: str | Path) -> TaskRecord | None:
        """Read and parse one record file; the file stem is the fallback id."""
        p = Path(path)
        content = self.read_text(p)
        if content is None:
            return None
        return parse_task(content, p.stem)

    def _record_files(self, directory: Path) -> list[Path]:
        try:
            return [p for p in directory.iterdir() if is_record_file(p)]
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.error("Error reading directory %s: %s", directory, e)
            return []

    # ---- public API ----

    def list_task_lists(self) -> list[TaskList]:
        try:
            entries = list(self._root.iterdir())
        except FileNotFoundError:
            logger.warning("Tasks directory not found: %s", self._root)
            return []
        except OSError as e:
            logger.error("Tasks directory %s is not readable: %s", self._root, e)
            return []

        lists: list[TaskList] = []
        for entry in entries:
            try:
                if not entry.is_dir():
                    continue
            except OSError:
                continue

            count = len(self._record_files(entry))
            if count > 0:
                lists.append(TaskList(id=entry.name, name=entry.name, task_count=count))

        lists.sort(key=lambda tl: tl.name)
        return lists

    def list_tasks(self, list_id: str) -> list[TaskRecord]:
        list_dir = self.list_dir(list_id)
        if list_dir is None:
            logger.warning("Rejected task list id %r", list_id)
            return []

        tasks: list[TaskRecord] = []
        for path in self._record_files(list_dir):
            task = self.load_task_file(path)
            if task is not None:
                tasks.append(task)

        return sort_tasks(tasks)

    def get_task(self, list_id: str, task_id: str) -> TaskRecord | None:
        path = self.task_path(list_id, task_id)
        if path is None:
            return None
        return self.load_task_file(path)
