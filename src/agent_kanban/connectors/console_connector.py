# src/agent_kanban/connectors/console_connector.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.agent import run_agent_turn
from ..core.state import AppState
from ..llm.client import friendly_llm_error_message
from ..tools.board_tools import ToolInvocationPreview
from ..view.board_view import ConsoleBoardView

logger = logging.getLogger(__name__)

InputFn = Callable[[str], str]


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def make_console_confirm(read: InputFn = input, *, auto_confirm: bool = False) -> Callable[[ToolInvocationPreview], bool]:
    """Build a confirm() callback that asks on the console ([y/N])."""

    def confirm(preview: ToolInvocationPreview) -> bool:
        title = preview.confirmation_title or "Confirm"
        _print_ts(f"[{title}] {preview.confirmation_message}")
        if auto_confirm:
            _print_ts("[auto-confirmed]")
            return True
        try:
            answer = read("Proceed? [y/N] ").strip().lower()
        except (EOFError, KeyboardInterrupt):
            print()
            return False
        return answer in ("y", "yes")

    return confirm


def handle_agent_prompt(state: AppState, prompt: str, read: InputFn = input) -> str:
    """Run one prompt through the agent and return the text to show."""
    settings = state.settings
    confirm = make_console_confirm(read, auto_confirm=bool(getattr(settings, "auto_confirm_tools", False)))

    try:
        result = run_agent_turn(
            state.llm,
            state.toolkit,
            prompt,
            confirm=confirm,
            notify=lambda msg: _print_ts(f"[tool] {msg}"),
            history=state.conversation,
            max_steps=int(getattr(settings, "agent_max_steps", 8)),
        )
    except RuntimeError as e:
        msg = friendly_llm_error_message(e)
        logger.info("LLM runtime error: %s", msg)
        return f"[LLM] {msg}"

    return result.reply or "[LLM] No output (model produced no content)."


def run_console_loop(state: AppState, read: InputFn = input) -> None:
    logger.info("Console connector started (board=%s).", state.task_store.path)
    _print_ts("[CONSOLE] Describe what to build, or use /help for commands. Use /exit to quit.")

    app_name = str(getattr(state.settings, "app_name", "agent-kanban"))
    view = ConsoleBoardView(state.task_store)
    view.ready()

    try:
        while True:
            try:
                user_input = read(">>> You: ").strip()
            except EOFError:
                logger.info("Console EOF received, exiting.")
                break
            except KeyboardInterrupt:
                logger.info("Console KeyboardInterrupt, exiting.")
                print()
                break

            if not user_input:
                continue

            if user_input.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            try:
                cmd_response = command_registry.handle(state, user_input, emit=_print_ts)
            except Exception:
                logger.exception("Command handler crashed.")
                cmd_response = "Internal error while handling a command."

            if cmd_response is not None:
                _print_ts(cmd_response)
                continue

            try:
                reply = handle_agent_prompt(state, user_input, read)
            except Exception:
                logger.exception("Agent turn crashed.")
                _print_ts("Internal error while running the agent.")
                continue

            _print_ts(f"<<< {app_name}: {reply}\n")
    finally:
        view.close()

    logger.info("Console connector finished.")
