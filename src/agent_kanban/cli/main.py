# src/agent_kanban/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then either:
- runs a single agent prompt given on the command line and prints the board, or
- starts the interactive console.
"""

from __future__ import annotations

import logging
import signal
import sys

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import handle_agent_prompt, run_console_loop
from ..logging_setup import setup_logging
from ..view.board_view import render_board

logger = logging.getLogger(__name__)


def _handle_sigterm(signum, _frame) -> None:
    logger.info("Signal %s received, shutting down...", signum)
    raise KeyboardInterrupt


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s (workspace=%s)...", settings.app_name, settings.workspace_root)

    state = create_initial_state(settings=settings)

    try:
        signal.signal(signal.SIGTERM, _handle_sigterm)
    except (ValueError, OSError):
        # Not in the main thread, or unsupported on this platform.
        pass

    try:
        if argv:
            print(handle_agent_prompt(state, " ".join(argv)))
            print()
            print(render_board(state.task_store.get_tasks()))
        else:
            run_console_loop(state)
    except KeyboardInterrupt:
        logger.info("Interrupted.")
        return 130

    logger.info("Bye.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
