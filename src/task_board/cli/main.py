# src/task_board/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs one command from the registry:
- read commands (lists/tasks/show/progress) print JSON and exit,
- `watch` starts the live-update service and streams events until interrupted.
"""

from __future__ import annotations

import logging
import signal
import sys

from ..cli.bootstrap import create_initial_state
from ..cli.commands import registry
from ..config import get_settings
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _handle_signal(signum, _frame) -> None:
    logger.info("Signal %s received, shutting down...", signum)
    raise KeyboardInterrupt


def main(argv: list[str] | None = None, *, settings=None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    if settings is None:
        settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/task-board")
    setup_logging(log_dir=log_dir, console_level=console_level)

    logger.debug("Starting %s...", getattr(settings, "app_name", "task-board"))

    state = create_initial_state(settings=settings)

    try:
        signal.signal(signal.SIGTERM, _handle_signal)
    except (ValueError, OSError, AttributeError):
        # Not on the main thread, or the platform has no SIGTERM.
        pass

    try:
        print(registry.handle(state, argv, emit=lambda line: print(line, flush=True)))
    except KeyboardInterrupt:
        pass
    finally:
        state.shutdown()

    return 0


if __name__ == "__main__":
    sys.exit(main())
