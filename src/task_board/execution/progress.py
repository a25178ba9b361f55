# src/task_board/execution/progress.py

"""
Execution progress aggregator.

An execution session directory is written by external tooling and holds a
handful of well-known artifacts:

  progress.json / progress.md   current wave, active and completed tasks
  execution_context.md          \
  task_log.md                    |  free-form markdown shown to the user
  execution_plan.md              |
  session_summary.md            /

A task list points at its session through `<list>/execution_pointer.md`.

Everything here is read-only and re-read on every call. A missing or
unparsable artifact means "not executing", never an error.

progress.md format (header lines may be bold, bullets may use -, * or +):

  Status: Executing
  Wave: 2 of 4
  Max Parallel: 5
  Updated: 2026-01-01T10:00:00Z

  ## Active Tasks
  - [5] Create login endpoint — Phase 2

  ## Completed This Session
  - [1] Set up schema — PASS
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

from ..tasks.task_store import TaskStore
from .execution_models import (
    ActiveTask,
    CompletedTask,
    ExecutionArtifact,
    ExecutionContext,
    ExecutionProgress,
)

logger = logging.getLogger(__name__)

PROGRESS_JSON = "progress.json"
PROGRESS_MD = "progress.md"
EXECUTION_POINTER = "execution_pointer.md"
ARTIFACT_NAMES = ("execution_context", "task_log", "execution_plan", "session_summary")

_HEADER = re.compile(r"^\s*(?:[-*+]\s+)?(?P<key>[A-Za-z][A-Za-z ]*?)\s*:\s*(?P<value>.*?)\s*$")
_WAVE = re.compile(r"(?P<wave>\d+)\s*(?:/|of)\s*(?P<total>\d+)", re.IGNORECASE)
_HEADING = re.compile(r"^\s*#{1,6}\s+(?P<title>.+?)\s*$")
_BULLET = re.compile(r"^\s*[-*+]\s+\[#?(?P<id>[^\]]+)\]\s*(?P<rest>.*?)\s*$")
_SEPARATORS = (" — ", " – ", " -- ", " - ")


def _to_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        m = re.search(r"-?\d+", value)
        if m:
            return int(m.group(0))
    return default


def _split_detail(rest: str) -> tuple[str, str]:
    """'subject — detail' -> (subject, detail); splits on the last separator."""
    best = -1
    sep_len = 0
    for sep in _SEPARATORS:
        idx = rest.rfind(sep)
        if idx > best:
            best, sep_len = idx, len(sep)
    if best <= 0:
        return rest.strip(), ""
    return rest[:best].strip(), rest[best + sep_len :].strip()


# ---- progress.md ----


def parse_progress_markdown(text: str) -> ExecutionProgress | None:
    fields: dict[str, str] = {}
    active: list[ActiveTask] = []
    completed: list[CompletedTask] = []
    section: str | None = None

    for line in text.splitlines():
        heading = _HEADING.match(line)
        if heading:
            title = heading.group("title").lower()
            if "active" in title:
                section = "active"
            elif "complete" in title:
                section = "completed"
            else:
                section = None
            continue

        bullet = _BULLET.match(line)
        if bullet and section is not None:
            subject, detail = _split_detail(bullet.group("rest"))
            task_id = bullet.group("id").strip()
            if section == "active":
                active.append(ActiveTask(id=task_id, subject=subject, phase=detail))
            else:
                completed.append(CompletedTask(id=task_id, subject=subject, result=detail))
            continue

        header = _HEADER.match(line.replace("**", ""))
        if header:
            key = header.group("key").strip().lower()
            fields.setdefault(key, header.group("value").strip())

    status = fields.get("status")
    if not status:
        return None

    wave, total = 0, 0
    m = _WAVE.search(fields.get("wave", ""))
    if m:
        wave, total = int(m.group("wave")), int(m.group("total"))
    elif "wave" in fields:
        wave = _to_int(fields["wave"])
    if "total waves" in fields:
        total = _to_int(fields["total waves"], total)

    max_parallel = _to_int(fields["max parallel"], -1) if "max parallel" in fields else -1

    return ExecutionProgress(
        status=status,
        wave=wave,
        total_waves=total,
        updated=fields.get("updated", ""),
        max_parallel=max_parallel if max_parallel >= 0 else None,
        active_tasks=tuple(active),
        completed_tasks=tuple(completed),
    )


# ---- progress.json ----


def _task_entries(raw: Any) -> list[dict[str, Any]]:
    if not isinstance(raw, list):
        return []
    return [item for item in raw if isinstance(item, dict)]


def _str_field(item: dict[str, Any], key: str) -> str:
    value = item.get(key)
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value)


def parse_progress_json(text: str) -> ExecutionProgress | None:
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as e:
        logger.warning("Invalid progress JSON: %s", e)
        return None

    if not isinstance(data, dict) or not isinstance(data.get("status"), str):
        return None

    max_parallel = data.get("maxParallel")
    return ExecutionProgress(
        status=data["status"],
        wave=_to_int(data.get("wave")),
        total_waves=_to_int(data.get("totalWaves")),
        updated=_str_field(data, "updated"),
        max_parallel=_to_int(max_parallel) if max_parallel is not None else None,
        active_tasks=tuple(
            ActiveTask(id=_str_field(t, "id"), subject=_str_field(t, "subject"), phase=_str_field(t, "phase"))
            for t in _task_entries(data.get("activeTasks"))
        ),
        completed_tasks=tuple(
            CompletedTask(
                id=_str_field(t, "id"),
                subject=_str_field(t, "subject"),
                result=_str_field(t, "result"),
            )
            for t in _task_entries(data.get("completedTasks"))
        ),
    )


# ---- public API ----


def read_progress(session_dir: str | Path) -> ExecutionProgress | None:
    """Current progress of the session in session_dir, or None if not executing."""
    base = Path(session_dir).expanduser()

    text = TaskStore.read_text(base / PROGRESS_JSON)
    if text is not None:
        return parse_progress_json(text)

    text = TaskStore.read_text(base / PROGRESS_MD)
    if text is not None:
        return parse_progress_markdown(text)

    return None


def read_execution_context(session_dir: str | Path) -> ExecutionContext | None:
    base = Path(session_dir).expanduser()
    if not base.is_dir():
        return None

    artifacts: list[ExecutionArtifact] = []
    for name in ARTIFACT_NAMES:
        path = base / f"{name}.md"
        content = TaskStore.read_text(path)
        if content is None:
            continue
        try:
            mtime_ms = int(path.stat().st_mtime * 1000)
        except OSError:
            # Removed between read and stat.
            continue
        artifacts.append(ExecutionArtifact(name=name, content=content, last_modified=mtime_ms))

    progress = read_progress(base)
    if not artifacts and progress is None:
        return None

    return ExecutionContext(execution_dir=base, artifacts=tuple(artifacts), progress=progress)


def resolve_execution_dir(store: TaskStore, list_id: str) -> Path | None:
    """Session directory referenced by the list's execution pointer, if any."""
    list_dir = store.list_dir(list_id)
    if list_dir is None:
        return None

    text = store.read_text(list_dir / EXECUTION_POINTER)
    if text is None:
        return None

    target = next((line.strip() for line in text.splitlines() if line.strip()), "")
    if not target:
        return None

    path = Path(target).expanduser()
    if not path.is_absolute():
        path = Path.home() / path

    if not path.is_dir():
        logger.debug("Execution pointer for %s targets a missing directory: %s", list_id, path)
        return None
    return path
