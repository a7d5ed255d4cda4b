# src/agent_kanban/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The view, the tool adapter and the agent depend on Protocols instead of
concrete implementations. This keeps the LLM provider and the store
swappable and makes testing easier.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from ..tasks.task_models import CreateTaskInput, Task, TaskStatus

ChatMessage = dict[str, Any]
# OpenAI-style chat messages: {"role": "...", "content": "...", ...}.

ToolSpec = dict[str, Any]
# OpenAI-style tool definition: {"type": "function", "function": {...}}.


@dataclass(slots=True, frozen=True)
class ToolCall:
    id: str
    name: str
    arguments: str  # raw JSON, as produced by the model


@dataclass(slots=True)
class AssistantTurn:
    """One assistant reply: optional text plus the tool calls it requested."""

    content: str | None
    tool_calls: list[ToolCall] = field(default_factory=list)

    def to_message(self) -> ChatMessage:
        msg: ChatMessage = {"role": "assistant", "content": self.content or ""}
        if self.tool_calls:
            msg["tool_calls"] = [
                {
                    "id": c.id,
                    "type": "function",
                    "function": {"name": c.name, "arguments": c.arguments},
                }
                for c in self.tool_calls
            ]
        return msg


class LLMClient(Protocol):
    """Chat completion client with tool calling (OpenAI/OpenRouter-compatible)."""
    def complete(self, messages: list[ChatMessage], tools: list[ToolSpec]) -> AssistantTurn: ...


class TaskRepo(Protocol):
    def create_tasks(self, inputs: Iterable[CreateTaskInput | Mapping[str, Any]]) -> list[Task]: ...
    def set_task_status(self, task_id: str, status: TaskStatus | str) -> Task: ...
    def get_tasks(self) -> tuple[Task, ...]: ...
    def reset_board(self) -> None: ...

    # Change notifications (view)
    def subscribe(self, listener: Callable[[tuple[Task, ...]], None]) -> Callable[[], None]: ...
