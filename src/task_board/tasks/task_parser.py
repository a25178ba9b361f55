# src/task_board/tasks/task_parser.py

"""
Task record parser.

Record files are written by external tools and are only loosely typed.
Everything except `subject` is normalized rather than rejected:

- id:          str kept, numbers stringified, anything else -> fallback id
- subject:     must be a str, otherwise the record is rejected
- status:      one of pending/in_progress/completed, default pending
- blocks:      list -> tuple of str, otherwise empty
- blockedBy:   same as blocks
- description: str or ""
- activeForm:  kept only when it is a str
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any

from .task_models import TaskRecord, TaskStatus

logger = logging.getLogger(__name__)


def _number_to_str(value: int | float) -> str:
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


def _coerce_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (int, float)):
        return _number_to_str(value)
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _coerce_id(value: Any, fallback_id: str) -> str:
    # bool is an int subclass but never a valid id.
    if isinstance(value, bool):
        return fallback_id
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return _number_to_str(value)
    return fallback_id


def _coerce_id_list(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(_coerce_str(v) for v in value)


def parse_task(raw: bytes | str, fallback_id: str) -> TaskRecord | None:
    """
    Turn raw record file content into a TaskRecord.

    Returns None for anything that is not a usable record; never raises.
    """
    try:
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        data = json.loads(text)
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        logger.error("Error parsing task file %s: %s", fallback_id, e)
        return None

    if not isinstance(data, dict):
        logger.warning("Task %s: record is not a JSON object", fallback_id)
        return None

    task_id = _coerce_id(data.get("id"), fallback_id)

    subject = data.get("subject")
    if not isinstance(subject, str):
        logger.warning("Task %s: missing subject", task_id)
        return None

    description = data.get("description")
    active_form = data.get("activeForm")

    return TaskRecord(
        id=task_id,
        subject=subject,
        description=description if isinstance(description, str) else "",
        status=TaskStatus.from_raw(data.get("status")),
        active_form=active_form if isinstance(active_form, str) else None,
        blocks=_coerce_id_list(data.get("blocks")),
        blocked_by=_coerce_id_list(data.get("blockedBy")),
    )
