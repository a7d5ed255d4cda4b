# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from agent_kanban.core.state import AppState
from agent_kanban.tasks.task_store import TaskStore
from agent_kanban.tools.board_tools import BoardToolkit

from .fakes import FakeLLMClient


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and .env files.
    """
    return SimpleNamespace(
        app_name="agent-kanban-test",
        workspace_root=tmp_path / "workspace",
        data_dir=tmp_path / "data",
        llm_models=["fake/model"],
        agent_max_steps=8,
        auto_confirm_tools=True,
    )


@pytest.fixture()
def store(settings: SimpleNamespace) -> TaskStore:
    return TaskStore(settings.workspace_root)


@pytest.fixture()
def llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore, llm: FakeLLMClient) -> AppState:
    """
    AppState wired with a deterministic LLM fake.

    NOTE: the TaskStore is real (tmp dir) because its persistence is part
    of what we want to test.
    """
    return AppState(
        settings=settings,
        task_store=store,
        toolkit=BoardToolkit(store),
        llm=llm,
    )
