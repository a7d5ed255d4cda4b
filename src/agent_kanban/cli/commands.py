# src/agent_kanban/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import cast

from ..core.state import AppState
from ..tasks.task_models import (
    CreateTaskInput,
    TaskConflictError,
    TaskStatus,
    TaskStoreError,
    is_valid_order,
)
from ..tools.board_tools import describe_tasks
from ..view.board_view import render_board

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /board, ...)."""

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
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

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
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help() + "\n  /exit - Quit."


def cmd_board(state: AppState, args: list[str]) -> str:
    return render_board(state.task_store.get_tasks())


def cmd_tasks(state: AppState, args: list[str]) -> str:
    return describe_tasks(state.task_store.get_tasks())


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <order> <title...>   -> create one task in 'ready'
    """
    if len(args) < 2:
        return "Usage: /add <order> <title>"

    try:
        order: float = int(args[0])
    except ValueError:
        try:
            order = float(args[0])
        except ValueError:
            return f"Order must be a number, got {args[0]!r}."
    if not is_valid_order(order):
        return f"Order must be a finite number, got {args[0]!r}."

    title = " ".join(args[1:])
    (task,) = state.task_store.create_tasks([CreateTaskInput(title=title, order=order)])
    return f"Created task {task.id}: {task.title}"


def cmd_move(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /move <task-id> <status>  -> change the column of a task
    """
    if len(args) != 2:
        statuses = " | ".join(s.value for s in TaskStatus)
        return f"Usage: /move <task-id> <{statuses}>"

    task_id, raw_status = args
    try:
        status = TaskStatus.parse(raw_status)
    except ValueError as e:
        return str(e)

    try:
        task = state.task_store.set_task_status(task_id, status)
    except TaskStoreError as e:
        logger.debug("/move rejected: %s", e)
        if emit is not None and isinstance(e, TaskConflictError):
            emit(f"Hint: /move {e.blocking_task.id} in_review (or done) first.")
        return f"Error: {e}"

    return f'Task "{task.title}" moved to {task.status}.'


def cmd_reset(state: AppState, args: list[str]) -> str:
    count = len(state.task_store.get_tasks())
    state.task_store.reset_board()
    return f"Kanban board reset. Removed {count} task(s)."


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    models = ", ".join(list(getattr(settings, "llm_models", []) or []))
    return (
        "Status:\n"
        f"  Board file: {state.task_store.path}\n"
        f"  Tasks: {len(state.task_store.get_tasks())}\n"
        f"  LLM: {type(state.llm).__name__}\n"
        f"  Models (priority -> fallback): {models}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("board", cmd_board, help_text="Render the Kanban board.")
registry.register("tasks", cmd_tasks, help_text="List tasks with their IDs.")
registry.register("add", cmd_add, help_text="Create a task: /add <order> <title>.")
registry.register(
    "move", cmd_move, help_text="Change task status: /move <task-id> <status>.", aliases=["mv"]
)
registry.register("reset", cmd_reset, help_text="Remove all tasks from the board.")
registry.register("status", cmd_status, help_text="Show board file, task count and LLM setup.")
