# src/task_board/live/classifier.py

from __future__ import annotations

import logging

from ..core.ports import TaskFileReader
from ..tasks.task_models import TaskEvent, TaskEventKind
from .watcher import ChangeOp, RawChange

logger = logging.getLogger(__name__)

_OP_TO_KIND = {
    ChangeOp.ADD: TaskEventKind.CREATED,
    ChangeOp.CHANGE: TaskEventKind.UPDATED,
}


class ChangeClassifier:
    """
    Map raw filesystem notifications to TaskEvents.

    - add/change: re-read the file; if it cannot be parsed (deleted in the
      meantime, half-written, malformed) the notification is dropped
    - unlink: always a deleted event, built from the path alone
    """

    def __init__(self, reader: TaskFileReader) -> None:
        self._reader = reader

    def classify(self, change: RawChange) -> TaskEvent | None:
        task_id = change.path.stem
        list_id = change.path.parent.name

        if change.op == ChangeOp.UNLINK:
            return TaskEvent.deleted(list_id, task_id)

        kind = _OP_TO_KIND[change.op]
        task = self._reader.load_task_file(change.path)
        if task is None:
            logger.warning(
                "Dropping %s for %s/%s: file missing or not a valid task",
                kind.value,
                list_id,
                task_id,
            )
            return None

        return TaskEvent(kind=kind, list_id=list_id, task_id=task_id, task=task)
