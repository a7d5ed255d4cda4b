# src/agent_kanban/tools/board_tools.py

"""
Agent-facing board tools.

Each tool mirrors one store operation and exposes:
- a JSON-schema parameter definition (OpenAI "tools" format),
- prepare_invocation(): the message shown before running it (and an
  optional confirmation prompt),
- invoke(): runs the operation and returns a text result for the agent.

Tools only validate parameters; all board rules live in TaskStore.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..core.ports import TaskRepo, ToolSpec
from ..tasks.task_models import (
    CreateTaskInput,
    Task,
    TaskStatus,
    TaskStoreError,
    format_order,
    group_by_status,
    is_valid_order,
)

logger = logging.getLogger(__name__)

STATUS_VALUES = [s.value for s in TaskStatus]


class ToolError(Exception):
    """Tool failure; the message is meant to be shown to the agent."""


class ToolInputError(ToolError):
    """Invalid or missing tool parameters."""


@dataclass(slots=True, frozen=True)
class ToolInvocationPreview:
    invocation_message: str
    confirmation_title: str | None = None
    confirmation_message: str | None = None

    @property
    def needs_confirmation(self) -> bool:
        return self.confirmation_message is not None


class BoardTool:
    name: str = ""
    description: str = ""
    parameters: dict[str, Any] = {"type": "object", "properties": {}, "additionalProperties": False}

    def __init__(self, store: TaskRepo) -> None:
        self._store = store

    def spec(self) -> ToolSpec:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def prepare_invocation(self, args: Mapping[str, Any]) -> ToolInvocationPreview:
        raise NotImplementedError

    def invoke(self, args: Mapping[str, Any]) -> str:
        raise NotImplementedError


def _parse_task_inputs(args: Mapping[str, Any]) -> list[CreateTaskInput]:
    raw = args.get("tasks")
    if not isinstance(raw, list):
        raise ToolInputError("'tasks' must be a list of {title, order} objects.")

    out: list[CreateTaskInput] = []
    for i, item in enumerate(raw):
        if not isinstance(item, Mapping):
            raise ToolInputError(f"tasks[{i}] must be an object with 'title' and 'order'.")
        title = item.get("title")
        order = item.get("order")
        if not isinstance(title, str):
            raise ToolInputError(f"tasks[{i}].title must be a string.")
        if not is_valid_order(order):
            raise ToolInputError(f"tasks[{i}].order must be a finite number.")
        out.append(CreateTaskInput(title=title, order=order))
    return out


def _parse_status_args(args: Mapping[str, Any]) -> tuple[str, TaskStatus]:
    task_id = args.get("taskId")
    if not isinstance(task_id, str) or not task_id.strip():
        raise ToolInputError("'taskId' must be a non-empty string.")
    raw_status = args.get("status")
    if not isinstance(raw_status, str) or raw_status not in STATUS_VALUES:
        raise ToolInputError(f"'status' must be one of: {', '.join(STATUS_VALUES)}.")
    return task_id, TaskStatus(raw_status)


def _find_task(tasks: tuple[Task, ...], task_id: str) -> Task | None:
    return next((t for t in tasks if t.id == task_id), None)


def describe_tasks(tasks: tuple[Task, ...]) -> str:
    """Board summary used by the get-tasks tool and the /tasks command."""
    if not tasks:
        return "The Kanban board is empty. No tasks found."

    columns = group_by_status(tasks)
    lines = [
        f"Found {len(tasks)} task(s):",
        f"Ready: {len(columns[TaskStatus.READY])}, "
        f"In Progress: {len(columns[TaskStatus.IN_PROGRESS])}, "
        f"In Review: {len(columns[TaskStatus.IN_REVIEW])}, "
        f"Done: {len(columns[TaskStatus.DONE])}",
        "",
    ]
    for t in sorted(tasks, key=lambda t: t.order):
        lines.append(f"- [{t.status}] {t.title} (ID: {t.id}, order: {format_order(t.order)})")
    return "\n".join(lines)


class CreateTasksTool(BoardTool):
    name = "kanban_create_tasks"
    description = (
        "Create tasks on the Kanban board. Every new task starts in 'ready'. "
        "Use 'order' to define the execution sequence (lower runs first)."
    )
    parameters = {
        "type": "object",
        "properties": {
            "tasks": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "title": {"type": "string", "description": "Short task title."},
                        "order": {"type": "number", "description": "Sort key, lower first."},
                    },
                    "required": ["title", "order"],
                },
            }
        },
        "required": ["tasks"],
    }

    def prepare_invocation(self, args: Mapping[str, Any]) -> ToolInvocationPreview:
        inputs = _parse_task_inputs(args)
        task_list = "\n".join(f"- {t.title} (order: {format_order(t.order)})" for t in inputs)
        return ToolInvocationPreview(
            invocation_message=f"Creating {len(inputs)} task(s) on Kanban board",
            confirmation_title="Create Kanban Tasks",
            confirmation_message=f"Create the following tasks on the Kanban board?\n\n{task_list}",
        )

    def invoke(self, args: Mapping[str, Any]) -> str:
        inputs = _parse_task_inputs(args)
        self._store.create_tasks(inputs)
        titles = ", ".join(t.title for t in inputs)
        return (
            f"Created {len(inputs)} tasks on the Kanban board: {titles}. "
            "All tasks are in 'ready' status."
        )


class UpdateTaskStatusTool(BoardTool):
    name = "kanban_update_task"
    description = (
        "Move a task to another column. Only one task can be 'in_progress' at a time; "
        "move the current one to 'in_review' or 'done' first."
    )
    parameters = {
        "type": "object",
        "properties": {
            "taskId": {"type": "string", "description": "Task ID from kanban_get_tasks."},
            "status": {"type": "string", "enum": STATUS_VALUES},
        },
        "required": ["taskId", "status"],
    }

    def prepare_invocation(self, args: Mapping[str, Any]) -> ToolInvocationPreview:
        task_id, status = _parse_status_args(args)
        task = _find_task(self._store.get_tasks(), task_id)
        title = task.title if task else task_id
        return ToolInvocationPreview(
            invocation_message=f"Updating task status to {status}",
            confirmation_title="Update Task Status",
            confirmation_message=f"Update task **{title}** to status **{status}**?",
        )

    def invoke(self, args: Mapping[str, Any]) -> str:
        task_id, status = _parse_status_args(args)
        task = _find_task(self._store.get_tasks(), task_id)
        if task is None:
            raise ToolError(
                f'Task ID "{task_id}" not found. Use the kanban_get_tasks tool to get valid task IDs.'
            )

        try:
            self._store.set_task_status(task_id, status)
        except TaskStoreError as e:
            raise ToolError(f"Failed to update task status: {e}") from e

        return f'Task "{task.title}" status updated from "{task.status}" to "{status}".'


class GetTasksTool(BoardTool):
    name = "kanban_get_tasks"
    description = "List all tasks on the Kanban board with their IDs, statuses and order."

    def prepare_invocation(self, args: Mapping[str, Any]) -> ToolInvocationPreview:
        return ToolInvocationPreview(invocation_message="Getting tasks from Kanban board")

    def invoke(self, args: Mapping[str, Any]) -> str:
        return describe_tasks(self._store.get_tasks())


class ResetBoardTool(BoardTool):
    name = "kanban_reset_board"
    description = "Remove every task from the Kanban board. Use it when starting a new request."

    def prepare_invocation(self, args: Mapping[str, Any]) -> ToolInvocationPreview:
        count = len(self._store.get_tasks())
        return ToolInvocationPreview(
            invocation_message="Clearing Kanban board",
            confirmation_title="Reset Kanban Board",
            confirmation_message=f"Clear all {count} task(s) from the Kanban board?",
        )

    def invoke(self, args: Mapping[str, Any]) -> str:
        count = len(self._store.get_tasks())
        self._store.reset_board()
        return f"Kanban board cleared. Removed {count} task(s)."


class BoardToolkit:
    """Registry of the board tools, keyed by tool name."""

    def __init__(self, store: TaskRepo) -> None:
        tools: list[BoardTool] = [
            CreateTasksTool(store),
            UpdateTaskStatusTool(store),
            GetTasksTool(store),
            ResetBoardTool(store),
        ]
        self._tools: dict[str, BoardTool] = {t.name: t for t in tools}

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def specs(self) -> list[ToolSpec]:
        return [t.spec() for t in self._tools.values()]

    def get(self, name: str) -> BoardTool:
        tool = self._tools.get(name)
        if tool is None:
            raise ToolInputError(f"Unknown tool: {name}. Available: {', '.join(self._tools)}.")
        return tool

    @staticmethod
    def parse_arguments(arguments: str | Mapping[str, Any] | None) -> dict[str, Any]:
        if arguments is None or arguments == "":
            return {}
        if isinstance(arguments, Mapping):
            return dict(arguments)
        try:
            parsed = json.loads(arguments)
        except json.JSONDecodeError as e:
            raise ToolInputError(f"Tool arguments are not valid JSON: {e}") from e
        if not isinstance(parsed, dict):
            raise ToolInputError("Tool arguments must be a JSON object.")
        return parsed

    def prepare(self, name: str, arguments: str | Mapping[str, Any] | None) -> ToolInvocationPreview:
        return self.get(name).prepare_invocation(self.parse_arguments(arguments))

    def dispatch(self, name: str, arguments: str | Mapping[str, Any] | None) -> str:
        tool = self.get(name)
        args = self.parse_arguments(arguments)
        logger.debug("Invoking tool %s args=%s", name, args)
        return tool.invoke(args)
