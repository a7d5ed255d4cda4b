# src/agent_kanban/llm/client.py

from __future__ import annotations

import logging
import time
from typing import Any

import httpx
import openai
from openai import OpenAI

from ..core.ports import AssistantTurn, ChatMessage, ToolCall, ToolSpec

logger = logging.getLogger(__name__)

# A model answering 404 is skipped for this long.
BAD_MODEL_COOLDOWN_SECONDS = 3600.0


def _is_auth_error(exc: Exception) -> bool:
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return True
    return exc.__class__.__name__ in {"UnauthorizedError"}


def _is_rate_limit_error(exc: Exception) -> bool:
    if isinstance(exc, openai.RateLimitError):
        return True
    return exc.__class__.__name__ in {"TooManyRequestsError"}


def _is_connection_error(exc: Exception) -> bool:
    if isinstance(exc, (openai.APIConnectionError, httpx.TimeoutException)):
        return True
    return exc.__class__.__name__ in {"Timeout", "ConnectTimeout", "ReadTimeout", "WriteTimeout"}


def _is_not_found_error(exc: Exception) -> bool:
    return isinstance(exc, openai.NotFoundError)


def friendly_llm_error_message(err: Exception) -> str:
    msg = str(err).strip() or "LLM error."
    if "LLM API key is not set" in msg:
        return "LLM is not configured (missing API key). Set KANBAN_OPENROUTER_API_KEY in .env."
    if "LLM model list is empty" in msg:
        return "LLM is not configured (no models). Set KANBAN_LLM_MODELS in .env."
    if "LLM base URL is not set" in msg:
        return "LLM is not configured (missing base URL). Set KANBAN_OPENROUTER_BASE_URL in .env."
    return msg


def _turn_from_message(message: Any) -> AssistantTurn:
    calls: list[ToolCall] = []
    for raw in getattr(message, "tool_calls", None) or []:
        fn = getattr(raw, "function", None)
        if fn is None:
            continue
        calls.append(ToolCall(id=str(raw.id), name=str(fn.name), arguments=fn.arguments or "{}"))
    return AssistantTurn(content=getattr(message, "content", None), tool_calls=calls)


class OpenRouterLLMClient:
    """
    OpenAI-compatible chat client (OpenRouter by default) with tool calling.

    Behavior:
    - Tries models in the order from settings (KANBAN_LLM_MODELS).
    - 404 (model not available) -> skip the model for an hour, try next.
    - Rate limit / network issues -> try next.
    - Auth issues -> fail fast (no retries across models).
    """

    def __init__(self, settings: Any) -> None:
        api_key = getattr(settings, "openrouter_api_key", None)
        base_url = str(getattr(settings, "openrouter_base_url", "") or "")

        if not api_key or not str(api_key).strip():
            raise RuntimeError("LLM API key is not set. Set KANBAN_OPENROUTER_API_KEY in your .env.")
        if not base_url.strip():
            raise RuntimeError("LLM base URL is not set. Set KANBAN_OPENROUTER_BASE_URL in your .env.")

        timeout_s = float(getattr(settings, "llm_timeout_seconds", 60.0))
        # No automatic retries: we fall back across models instead.
        self._client = OpenAI(
            base_url=base_url,
            api_key=str(api_key),
            timeout=httpx.Timeout(timeout_s, connect=5.0),
            max_retries=0,
        )
        self._models: list[str] = [m.strip() for m in getattr(settings, "llm_models", []) or [] if m.strip()]
        self._headers: dict[str, str] = dict(getattr(settings, "extra_headers", {}) or {})
        self._bad_models: dict[str, float] = {}  # model -> retry_at (monotonic)

    def complete(self, messages: list[ChatMessage], tools: list[ToolSpec]) -> AssistantTurn:
        if not self._models:
            raise RuntimeError("LLM model list is empty. Set KANBAN_LLM_MODELS in your .env.")

        last_error: Exception | None = None
        now = time.monotonic()

        for model in self._models:
            retry_at = self._bad_models.get(model)
            if retry_at is not None and retry_at > now:
                continue

            logger.info("LLM: trying model=%s (tools=%d)", model, len(tools))
            t0 = time.monotonic()
            kwargs: dict[str, Any] = {
                "model": model,
                "messages": messages,
                "extra_headers": self._headers or None,
            }
            if tools:
                kwargs["tools"] = tools
            try:
                resp = self._client.chat.completions.create(**kwargs)
            except Exception as e:
                last_error = e

                if _is_auth_error(e):
                    raise RuntimeError(
                        "LLM authentication failed. Check your API key (KANBAN_OPENROUTER_API_KEY)."
                    ) from e

                if _is_not_found_error(e):
                    self._bad_models[model] = time.monotonic() + BAD_MODEL_COOLDOWN_SECONDS
                    logger.info("LLM: model not available (404): %s", model)
                    continue

                if _is_rate_limit_error(e):
                    logger.info("LLM: rate-limited on model=%s, trying next", model)
                    continue

                if _is_connection_error(e):
                    logger.info("LLM: network/timeout error on model=%s, trying next", model)
                    continue

                logger.info("LLM: error on model=%s (%s), trying next", model, e.__class__.__name__)
                continue

            if not resp.choices:
                last_error = RuntimeError(f"Model returned no choices: {model}")
                continue

            turn = _turn_from_message(resp.choices[0].message)
            logger.info(
                "LLM: model=%s answered in %.2fs (tool_calls=%d)",
                model,
                time.monotonic() - t0,
                len(turn.tool_calls),
            )
            return turn

        if last_error is not None:
            if _is_rate_limit_error(last_error):
                raise RuntimeError("LLM is rate-limited. Try again later.") from last_error
            if _is_connection_error(last_error):
                raise RuntimeError("LLM network/timeout error. Try again later or change models.") from last_error
            raise RuntimeError("All LLM models failed.") from last_error

        raise RuntimeError("All LLM models failed.")
