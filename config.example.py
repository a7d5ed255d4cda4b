# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets. Use .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "KANBAN_APP_NAME": "App display name (default: agent-kanban).",
    "KANBAN_LOG_LEVEL": "Console logging level (default: INFO).",
    "KANBAN_DATA_DIR": "Local data directory for logs (default: .local/agent-kanban).",
    # Board
    "KANBAN_WORKSPACE_ROOT": (
        "Project whose board is tracked (default: current directory). "
        "Tasks are stored in <root>/.kanban/kanban-agent.json."
    ),
    # LLM / OpenRouter
    "KANBAN_OPENROUTER_API_KEY": "OpenRouter API key (OPENROUTER_API_KEY also accepted). Unset => offline mode.",
    "KANBAN_OPENROUTER_BASE_URL": "OpenAI-compatible base URL (default: https://openrouter.ai/api/v1).",
    "KANBAN_LLM_MODELS": "Comma/space separated list of models to try in order.",
    "KANBAN_LLM_TIMEOUT_SECONDS": "Per-request timeout (default: 60).",
    "KANBAN_HTTP_REFERER": "Optional OpenRouter metadata header.",
    "KANBAN_APP_TITLE": "Optional OpenRouter metadata header title.",
    # Agent
    "KANBAN_AGENT_MAX_STEPS": "Max model calls per prompt (default: 8).",
    "KANBAN_AUTO_CONFIRM_TOOLS": "Run board tools without asking (true/false, default: false).",
}
