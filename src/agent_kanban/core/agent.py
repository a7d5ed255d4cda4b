# src/agent_kanban/core/agent.py

"""
Agent orchestration: one user prompt -> a tool-calling loop over the board.

This module is transport-agnostic:
- connectors provide the prompt and a confirm() callback,
- the core talks to the LLM and runs the board tools,
- connectors decide how to show previews and the final reply.

Key invariants:
- a tool with a confirmation preview runs only if confirm() returned True,
- tool failures go back to the model as tool results (the model may recover),
- the conversation history is extended only after the turn finishes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from ..tools.board_tools import BoardToolkit, ToolError, ToolInvocationPreview
from .ports import ChatMessage, LLMClient, ToolCall

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[ToolInvocationPreview], bool]
NotifyCallback = Callable[[str], None]

SYSTEM_PROMPT = """\
You are a coding agent that reports its work on a Kanban board.

Board rules:
- Columns: ready, in_progress, in_review, done.
- When the user gives you a new request, reset the board, then break the
  request into small tasks and create them with an explicit 'order'
  (lower runs first).
- Exactly one task may be in_progress at a time. Move the current task to
  in_review or done before starting the next one.
- Use kanban_get_tasks to look up task IDs; never invent them.

Keep your final answer short: what you planned and where the board stands.
"""


@dataclass(slots=True)
class ToolRun:
    call: ToolCall
    preview: ToolInvocationPreview | None
    approved: bool
    result: str
    failed: bool = False


@dataclass(slots=True)
class AgentResult:
    reply: str
    tool_runs: list[ToolRun] = field(default_factory=list)
    steps: int = 0
    exhausted: bool = False


def _always_approve(_preview: ToolInvocationPreview) -> bool:
    return True


def _run_tool_call(
    toolkit: BoardToolkit,
    call: ToolCall,
    confirm: ConfirmCallback,
    notify: NotifyCallback | None,
) -> ToolRun:
    try:
        preview = toolkit.prepare(call.name, call.arguments)
    except ToolError as e:
        logger.info("Tool %s rejected before invocation: %s", call.name, e)
        return ToolRun(call=call, preview=None, approved=False, result=str(e), failed=True)

    if notify is not None:
        notify(preview.invocation_message)

    if preview.needs_confirmation and not confirm(preview):
        logger.info("Tool %s declined by user", call.name)
        return ToolRun(
            call=call,
            preview=preview,
            approved=False,
            result=f"The user declined to run {call.name}. Do not retry it unless asked.",
        )

    try:
        result = toolkit.dispatch(call.name, call.arguments)
    except ToolError as e:
        logger.info("Tool %s failed: %s", call.name, e)
        return ToolRun(call=call, preview=preview, approved=True, result=str(e), failed=True)

    return ToolRun(call=call, preview=preview, approved=True, result=result)


def run_agent_turn(
    llm: LLMClient,
    toolkit: BoardToolkit,
    prompt: str,
    *,
    confirm: ConfirmCallback | None = None,
    notify: NotifyCallback | None = None,
    history: list[ChatMessage] | None = None,
    max_steps: int = 8,
) -> AgentResult:
    """
    Run one user prompt to completion.

    `history` (if given) is read as prior conversation and extended in
    place with this turn's messages once the turn ends.

    LLM RuntimeErrors propagate; the caller decides how to show them.
    """
    confirm = confirm or _always_approve
    prior = list(history or [])
    turn_messages: list[ChatMessage] = [{"role": "user", "content": prompt}]
    tools = toolkit.specs()
    result = AgentResult(reply="")

    while result.steps < max_steps:
        messages = [{"role": "system", "content": SYSTEM_PROMPT}, *prior, *turn_messages]
        assistant = llm.complete(messages, tools)
        result.steps += 1
        turn_messages.append(assistant.to_message())

        if not assistant.tool_calls:
            result.reply = (assistant.content or "").strip()
            break

        for call in assistant.tool_calls:
            run = _run_tool_call(toolkit, call, confirm, notify)
            result.tool_runs.append(run)
            turn_messages.append({"role": "tool", "tool_call_id": call.id, "content": run.result})
    else:
        result.exhausted = True
        result.reply = f"Stopped after {max_steps} model calls without a final answer."
        logger.warning("Agent turn exhausted max_steps=%d", max_steps)

    if history is not None:
        history.extend(turn_messages)

    logger.info(
        "Agent turn done steps=%d tool_runs=%d exhausted=%s",
        result.steps,
        len(result.tool_runs),
        result.exhausted,
    )
    return result
