# src/agent_kanban/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..tasks.task_store import TaskStore
from ..tools.board_tools import BoardToolkit
from .ports import ChatMessage, LLMClient


@dataclass
class AppState:
    """
    Everything a session owns, wired once in cli/bootstrap.py.

    The store is passed explicitly to whoever needs it (view, toolkit,
    commands); there is no module-level store instance.
    """

    # Settings object (config.Settings or a test SimpleNamespace).
    settings: Any

    task_store: TaskStore
    toolkit: BoardToolkit
    llm: LLMClient

    # Agent conversation so far (without the system prompt).
    conversation: list[ChatMessage] = field(default_factory=list)
