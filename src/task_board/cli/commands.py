# src/task_board/cli/commands.py

from __future__ import annotations

import inspect
import json
import logging
import threading
from collections.abc import Callable
from typing import Any, cast

from ..core.state import AppState
from ..execution.progress import read_execution_context, read_progress, resolve_execution_dir
from ..tasks.task_models import TaskEvent

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Command registry behind the `task-board <command> [args...]` CLI."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        argv: list[str],
        emit: CommandEmitter | None = None,
    ) -> str:
        """Run argv[0] with the remaining args; returns the text to print."""
        if not argv:
            return self.build_help()

        name = argv[0].lower()
        args = argv[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: {name}. Use `help` to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  {name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _dumps(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2)


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_lists(state: AppState, args: list[str]) -> str:
    return _dumps({"taskLists": [tl.to_dict() for tl in state.store.list_task_lists()]})


def cmd_tasks(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: tasks <list_id>"
    return _dumps({"tasks": [t.to_dict() for t in state.store.list_tasks(args[0])]})


def cmd_show(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: show <list_id> <task_id>"
    task = state.store.get_task(args[0], args[1])
    if task is None:
        return f"Task not found: {args[0]}/{args[1]}"
    return _dumps(task.to_dict())


def cmd_progress(state: AppState, args: list[str]) -> str:
    """
    progress <list_id>          -> progress of the list's execution session
    progress <list_id> --full   -> progress plus execution artifacts
    """
    if not args:
        return "Usage: progress <list_id> [--full]"

    session_dir = resolve_execution_dir(state.store, args[0])
    if session_dir is None:
        return f"No execution session for {args[0]}."

    if "--full" in args[1:]:
        ctx = read_execution_context(session_dir)
        return _dumps(ctx.to_dict() if ctx is not None else None)

    progress = read_progress(session_dir)
    if progress is None:
        return f"Not executing ({session_dir})."
    return _dumps(progress.to_dict())


def cmd_watch(
    state: AppState,
    args: list[str],
    emit: CommandEmitter | None = None,
    *,
    stop: threading.Event | None = None,
) -> str:
    """
    watch            -> print every task event as a JSON line until interrupted
    watch <list_id>  -> only events for one list
    """
    list_filter = args[0] if args else None
    out = emit or print
    stop = stop or threading.Event()

    def on_event(event: TaskEvent) -> None:
        if list_filter is not None and event.list_id != list_filter:
            return
        out(json.dumps(event.to_dict(), ensure_ascii=False))

    sub = state.broadcaster.subscribe(callback=on_event)
    state.live.start()
    logger.info("Watching %s%s", state.store.root, f" (list={list_filter})" if list_filter else "")
    try:
        stop.wait()
    except KeyboardInterrupt:
        pass
    finally:
        sub.close()
        state.live.stop()
    return "Stopped watching."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("lists", cmd_lists, help_text="List task lists (JSON).", aliases=["ls"])
registry.register("tasks", cmd_tasks, help_text="List tasks of a list: tasks <list_id>.")
registry.register("show", cmd_show, help_text="Show one task: show <list_id> <task_id>.")
registry.register(
    "progress",
    cmd_progress,
    help_text="Execution progress of a list: progress <list_id> [--full].",
)
registry.register("watch", cmd_watch, help_text="Stream task events as JSON lines: watch [list_id].")
