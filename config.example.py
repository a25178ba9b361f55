# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKBOARD_APP_NAME": "App display name (default: task-board).",
    "TASKBOARD_LOG_LEVEL": "Console logging level (default: INFO).",
    "TASKBOARD_DATA_DIR": "Local directory for the log file (default: .local/task-board).",
    # Task store
    "TASKBOARD_CLAUDE_DIR": "Base directory (default: ~/.claude).",
    "TASKBOARD_TASKS_DIR": "Tasks root, one subdirectory per list (default: <claude_dir>/tasks).",
    # Live updates
    "TASKBOARD_WATCH_INTERVAL_SECONDS": "Polling interval of the directory watcher (default: 0.3).",
    "TASKBOARD_WATCH_RETRY_SECONDS": "How often a lost/missing tasks root is re-checked (default: 2.0).",
    "TASKBOARD_CLASSIFIER_WORKERS": "Worker threads reading changed files (default: 4).",
    "TASKBOARD_SUBSCRIBER_QUEUE_SIZE": (
        "Events buffered per queue subscriber before it is dropped as too slow (default: 256)."
    ),
}
