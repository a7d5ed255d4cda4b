# src/agent_kanban/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time.
- The board file location is derived from the workspace root only.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .tasks.task_store import board_file_path

ENV_PREFIX = "KANBAN"

DEFAULT_LLM_MODELS = [
    "openai/gpt-4o-mini",
    "qwen/qwen-2.5-72b-instruct:free",
    "deepseek/deepseek-chat-v3-0324:free",
]


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


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


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


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

    # ---- Board ----
    workspace_root: Path

    # ---- LLM / OpenRouter ----
    openrouter_api_key: str | None
    openrouter_base_url: str
    llm_models: list[str]
    extra_headers: dict[str, str]
    llm_timeout_seconds: float

    # ---- Agent ----
    agent_max_steps: int
    auto_confirm_tools: bool

    @property
    def board_path(self) -> Path:
        return board_file_path(self.workspace_root)

    @staticmethod
    def from_env() -> Settings:
        app_name = _env(_k("APP_NAME"), "agent-kanban").strip() or "agent-kanban"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/agent-kanban"))

        workspace_root = _env_path(_k("WORKSPACE_ROOT"), Path.cwd())

        openrouter_api_key = _first_env(_k("OPENROUTER_API_KEY"), "OPENROUTER_API_KEY", default=None)
        openrouter_base_url = _env(_k("OPENROUTER_BASE_URL"), "https://openrouter.ai/api/v1")

        # OpenRouter attribution headers; title falls back to app_name.
        extra_headers = {
            "HTTP-Referer": _env(_k("HTTP_REFERER"), "https://example.com"),
            "X-Title": _env(_k("APP_TITLE"), app_name),
        }

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            workspace_root=workspace_root,
            openrouter_api_key=openrouter_api_key,
            openrouter_base_url=openrouter_base_url,
            llm_models=_env_list(_k("LLM_MODELS"), DEFAULT_LLM_MODELS),
            extra_headers=extra_headers,
            llm_timeout_seconds=_env_float(_k("LLM_TIMEOUT_SECONDS"), 60.0),
            agent_max_steps=max(1, _env_int(_k("AGENT_MAX_STEPS"), 8)),
            auto_confirm_tools=_env_bool(_k("AUTO_CONFIRM_TOOLS"), False),
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings, read from the environment on first use."""
    global _SETTINGS
    if _SETTINGS is None:
        load_dotenv(override=False)
        _SETTINGS = Settings.from_env()
    return _SETTINGS
