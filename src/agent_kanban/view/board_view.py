# src/agent_kanban/view/board_view.py

"""Text rendering of the board: four fixed columns of cards.

The view only reads snapshots. It re-renders on every store notification
and on the "ready" signal; it never calls a store mutator.
"""

from __future__ import annotations

import logging
import shutil
import sys
import textwrap
from collections.abc import Iterable
from typing import TextIO

from ..core.ports import TaskRepo
from ..tasks.task_models import (
    BOARD_COLUMNS,
    COLUMN_TITLES,
    Task,
    TaskStatus,
    format_order,
    group_by_status,
)

logger = logging.getLogger(__name__)

MIN_COL_WIDTH = 18
SEP = " | "
EMPTY_LABEL = "(no tasks)"
IN_PROGRESS_MARK = ">> "


def _card_lines(task: Task, width: int) -> list[str]:
    mark = IN_PROGRESS_MARK if task.status == TaskStatus.IN_PROGRESS else ""
    prefix = f"{mark}#{format_order(task.order)} "
    body = task.title.strip() or "<untitled>"
    if len(prefix) >= width:
        # Prefix fills the column: split it and put the title below.
        head = prefix.rstrip()
        prefix_lines = [head[i : i + width] for i in range(0, len(head), width)]
        return prefix_lines + (
            textwrap.wrap(body, width=width, break_long_words=True, break_on_hyphens=False) or [""]
        )
    lines = textwrap.wrap(
        body,
        width=max(1, width - len(prefix)),
        break_long_words=True,
        break_on_hyphens=False,
    ) or [""]
    indent = " " * len(prefix)
    return [prefix + lines[0]] + [indent + line for line in lines[1:]]


def _column_width(term_width: int) -> int:
    sep_total = len(SEP) * (len(BOARD_COLUMNS) - 1)
    return max(MIN_COL_WIDTH, (term_width - sep_total) // len(BOARD_COLUMNS))


def render_board(tasks: Iterable[Task], width: int | None = None) -> str:
    """
    Render the board as text.

    Each column has a "<Title> (<count>)" header, a dashed separator and
    its cards sorted by order. Unknown statuses are not shown.
    """
    if width is None:
        width = shutil.get_terminal_size((120, 30)).columns
    col_width = _column_width(width)
    columns = group_by_status(tasks)

    cells: dict[TaskStatus, list[str]] = {}
    for status in BOARD_COLUMNS:
        col_tasks = columns[status]
        if not col_tasks:
            cells[status] = [EMPTY_LABEL]
            continue
        acc: list[str] = []
        for t in col_tasks:
            acc.extend(_card_lines(t, col_width))
        cells[status] = acc

    header = SEP.join(
        f"{COLUMN_TITLES[s]} ({len(columns[s])})".ljust(col_width) for s in BOARD_COLUMNS
    )
    rule = SEP.join("-" * col_width for _ in BOARD_COLUMNS)
    out = [header.rstrip(), rule]

    rows = max(len(c) for c in cells.values())
    for r in range(rows):
        row = SEP.join(
            (cells[s][r] if r < len(cells[s]) else "").ljust(col_width) for s in BOARD_COLUMNS
        )
        out.append(row.rstrip())
    return "\n".join(out)


class ConsoleBoardView:
    """
    Live board printed to a text stream.

    Subscribes to the store on construction; call close() to stop
    receiving updates.
    """

    def __init__(self, store: TaskRepo, out: TextIO | None = None, width: int | None = None) -> None:
        self._store = store
        self._out = out if out is not None else sys.stdout
        self._width = width
        self.renders = 0
        self._unsubscribe = store.subscribe(self._on_change)

    def ready(self) -> None:
        """The user is ready to look at the board: show the current state."""
        self._render(self._store.get_tasks())

    def close(self) -> None:
        self._unsubscribe()

    def _on_change(self, tasks: tuple[Task, ...]) -> None:
        self._render(tasks)

    def _render(self, tasks: Iterable[Task]) -> None:
        text = render_board(tasks, width=self._width)
        self._out.write("\n" + text + "\n\n")
        self._out.flush()
        self.renders += 1
        logger.debug("Board rendered (%d)", self.renders)
