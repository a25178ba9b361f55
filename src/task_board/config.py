# src/task_board/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- The tasks root is derived from the environment (home directory by default),
  never from user input at runtime.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKBOARD"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Task store ----
    claude_dir: Path
    tasks_dir: Path

    # ---- Live updates ----
    watch_interval_seconds: float
    watch_retry_seconds: float
    classifier_workers: int
    subscriber_queue_size: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "task-board") or "task-board"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/task-board"))

        claude_dir = _env_path(_k("CLAUDE_DIR"), Path.home() / ".claude")
        tasks_dir = _env_path(_k("TASKS_DIR"), claude_dir / "tasks")

        watch_interval_seconds = max(0.05, _env_float(_k("WATCH_INTERVAL_SECONDS"), 0.3))
        watch_retry_seconds = max(0.1, _env_float(_k("WATCH_RETRY_SECONDS"), 2.0))
        classifier_workers = max(1, _env_int(_k("CLASSIFIER_WORKERS"), 4))
        subscriber_queue_size = max(1, _env_int(_k("SUBSCRIBER_QUEUE_SIZE"), 256))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            claude_dir=claude_dir,
            tasks_dir=tasks_dir,
            watch_interval_seconds=watch_interval_seconds,
            watch_retry_seconds=watch_retry_seconds,
            classifier_workers=classifier_workers,
            subscriber_queue_size=subscriber_queue_size,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
