# src/agent_kanban/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- builds the one TaskStore of the session and hands it to the toolkit,
- picks the LLM client (OpenRouter, or offline when not configured).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import LLMClient
from ..core.state import AppState
from ..llm.client import OpenRouterLLMClient
from ..llm.offline import OfflineLLMClient
from ..tasks.task_store import TaskStore
from ..tools.board_tools import BoardToolkit

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, llm: LLMClient | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if llm is None:
        try:
            llm = OpenRouterLLMClient(settings)
        except RuntimeError as e:
            logger.info("LLM disabled (%s); using offline client.", e)
            llm = OfflineLLMClient()

    store = TaskStore(settings.workspace_root)
    return AppState(
        settings=settings,
        task_store=store,
        toolkit=BoardToolkit(store),
        llm=llm,
    )
