# src/agent_kanban/llm/offline.py

from __future__ import annotations

from ..core.ports import AssistantTurn, ChatMessage, ToolSpec


class OfflineLLMClient:
    """
    Offline deterministic LLM client used when no external API is configured.

    Never requests tools; the board can still be driven with slash commands.
    """

    def complete(self, messages: list[ChatMessage], tools: list[ToolSpec]) -> AssistantTurn:
        user_text = ""
        for m in reversed(messages):
            if m.get("role") == "user":
                user_text = str(m.get("content") or "")
                break

        return AssistantTurn(
            content=(
                "Offline demo mode: no external LLM is configured.\n"
                "Set KANBAN_OPENROUTER_API_KEY (and KANBAN_LLM_MODELS) to let the agent plan tasks.\n"
                "Use /add, /move and /reset to edit the board by hand.\n\n"
                f"You said: {user_text}"
            )
        )
