# tests/test_board_view.py

from __future__ import annotations

import io

from agent_kanban.tasks.task_models import CreateTaskInput, Task, TaskStatus, group_by_status
from agent_kanban.tasks.task_store import TaskStore
from agent_kanban.view.board_view import ConsoleBoardView, render_board


def _task(tid: str, title: str, status, order: float) -> Task:
    return Task(id=tid, title=title, status=status, order=order)


def test_group_by_status_sorts_each_column_and_drops_unknown() -> None:
    tasks = [
        _task("1", "late", TaskStatus.READY, 5),
        _task("2", "early", TaskStatus.READY, 1),
        _task("3", "review", TaskStatus.IN_REVIEW, 0),
        _task("4", "mystery", "blocked", 0),
    ]

    columns = group_by_status(tasks)

    assert list(columns) == [
        TaskStatus.READY,
        TaskStatus.IN_PROGRESS,
        TaskStatus.IN_REVIEW,
        TaskStatus.DONE,
    ]
    assert [t.title for t in columns[TaskStatus.READY]] == ["early", "late"]
    assert columns[TaskStatus.IN_PROGRESS] == []
    assert [t.title for t in columns[TaskStatus.IN_REVIEW]] == ["review"]
    assert all(t.title != "mystery" for col in columns.values() for t in col)


def test_render_board_headers_counts_and_cards() -> None:
    tasks = [
        _task("1", "Write tests", TaskStatus.READY, 1),
        _task("2", "Fix bug", TaskStatus.IN_PROGRESS, 0),
        _task("3", "Ghost", "archived", 2),
    ]

    text = render_board(tasks, width=120)
    lines = text.splitlines()

    assert "Ready (1)" in lines[0]
    assert "In Progress (1)" in lines[0]
    assert "In Review (0)" in lines[0]
    assert "Done (0)" in lines[0]
    assert set(lines[1].replace(" | ", "")) == {"-"}
    assert "#1 Write tests" in text
    assert ">> #0 Fix bug" in text
    assert "(no tasks)" in text
    assert "Ghost" not in text


def test_render_board_wraps_long_titles_within_column() -> None:
    title = "Refactor the persistence layer so that saves are atomic everywhere"
    text = render_board([_task("1", title, TaskStatus.DONE, 3)], width=100)

    body = text.splitlines()[2:]
    assert len(body) > 1
    assert "#3 Refactor" in body[0]
    assert all(len(line) <= 100 for line in text.splitlines())


def test_console_view_renders_on_ready_and_on_change(tmp_path) -> None:
    store = TaskStore(tmp_path)
    out = io.StringIO()
    view = ConsoleBoardView(store, out=out, width=100)

    view.ready()
    assert view.renders == 1
    assert "Ready (0)" in out.getvalue()

    store.create_tasks([CreateTaskInput("Fix bug", 0)])
    assert view.renders == 2
    assert "Ready (1)" in out.getvalue()
    assert "#0 Fix bug" in out.getvalue()

    view.close()
    store.reset_board()
    assert view.renders == 2


def test_console_view_does_not_mutate_store(tmp_path) -> None:
    store = TaskStore(tmp_path)
    store.create_tasks([CreateTaskInput("a", 0)])
    before = store.get_tasks()

    view = ConsoleBoardView(store, out=io.StringIO())
    view.ready()
    view.close()

    assert store.get_tasks() == before


def test_render_board_keeps_columns_aligned_for_wide_order_prefix() -> None:
    tasks = [
        _task("1", "Huge order", TaskStatus.IN_PROGRESS, 1e20),
        _task("2", "Fraction", TaskStatus.READY, 0.123456789012345),
        _task("3", "Short", TaskStatus.DONE, 1),
    ]

    text = render_board(tasks, width=80)

    lines = text.splitlines()
    assert all(len(line) <= 4 * 18 + 3 * 3 for line in lines)
    for line in lines[2:]:
        assert line[18:21] == " | "
    assert "Huge order" in text and "Fraction" in text
