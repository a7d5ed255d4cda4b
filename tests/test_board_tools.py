# tests/test_board_tools.py

from __future__ import annotations

import json

import pytest

from agent_kanban.tasks.task_models import CreateTaskInput, TaskStatus
from agent_kanban.tasks.task_store import TaskStore
from agent_kanban.tools.board_tools import BoardToolkit, ToolError, ToolInputError


@pytest.fixture()
def toolkit(store: TaskStore) -> BoardToolkit:
    return BoardToolkit(store)


def test_specs_cover_the_four_tools(toolkit: BoardToolkit) -> None:
    specs = toolkit.specs()
    names = [s["function"]["name"] for s in specs]

    assert names == [
        "kanban_create_tasks",
        "kanban_update_task",
        "kanban_get_tasks",
        "kanban_reset_board",
    ]
    assert all(s["type"] == "function" for s in specs)
    update = specs[1]["function"]["parameters"]
    assert update["properties"]["status"]["enum"] == ["ready", "in_progress", "in_review", "done"]
    assert update["required"] == ["taskId", "status"]


def test_create_tool_preview_and_invoke(toolkit: BoardToolkit, store: TaskStore) -> None:
    args = {"tasks": [{"title": "Write tests", "order": 1}, {"title": "Fix bug", "order": 0}]}

    preview = toolkit.prepare("kanban_create_tasks", json.dumps(args))
    assert preview.invocation_message == "Creating 2 task(s) on Kanban board"
    assert preview.needs_confirmation
    assert "- Write tests (order: 1)" in (preview.confirmation_message or "")
    assert store.get_tasks() == ()

    result = toolkit.dispatch("kanban_create_tasks", args)

    assert result == (
        "Created 2 tasks on the Kanban board: Write tests, Fix bug. All tasks are in 'ready' status."
    )
    assert [t.title for t in store.get_tasks()] == ["Fix bug", "Write tests"]


@pytest.mark.parametrize(
    "args",
    [
        {},
        {"tasks": "nope"},
        {"tasks": [{"title": "x"}]},
        {"tasks": [{"title": 3, "order": 1}]},
        {"tasks": [{"title": "x", "order": True}]},
        {"tasks": [{"title": "x", "order": float("nan")}]},
        {"tasks": [{"title": "x", "order": float("inf")}]},
        {"tasks": ["x"]},
    ],
)
def test_create_tool_rejects_bad_input(toolkit: BoardToolkit, store: TaskStore, args) -> None:
    with pytest.raises(ToolInputError):
        toolkit.dispatch("kanban_create_tasks", args)
    assert store.get_tasks() == ()


def test_update_tool_moves_task(toolkit: BoardToolkit, store: TaskStore) -> None:
    (task,) = store.create_tasks([CreateTaskInput("Fix bug", 0)])

    preview = toolkit.prepare("kanban_update_task", {"taskId": task.id, "status": "in_progress"})
    assert preview.confirmation_message == "Update task **Fix bug** to status **in_progress**?"

    result = toolkit.dispatch("kanban_update_task", {"taskId": task.id, "status": "in_progress"})

    assert result == 'Task "Fix bug" status updated from "ready" to "in_progress".'
    assert store.get_tasks()[0].status is TaskStatus.IN_PROGRESS


def test_update_tool_short_circuits_unknown_id(toolkit: BoardToolkit, store: TaskStore) -> None:
    preview = toolkit.prepare("kanban_update_task", {"taskId": "task-404", "status": "done"})
    assert "**task-404**" in (preview.confirmation_message or "")

    with pytest.raises(ToolError) as exc:
        toolkit.dispatch("kanban_update_task", {"taskId": "task-404", "status": "done"})

    assert str(exc.value) == (
        'Task ID "task-404" not found. Use the kanban_get_tasks tool to get valid task IDs.'
    )


def test_update_tool_reports_conflict(toolkit: BoardToolkit, store: TaskStore) -> None:
    a, b = store.create_tasks([CreateTaskInput("Fix bug", 0), CreateTaskInput("Write tests", 1)])
    store.set_task_status(a.id, TaskStatus.IN_PROGRESS)

    with pytest.raises(ToolError) as exc:
        toolkit.dispatch("kanban_update_task", {"taskId": b.id, "status": "in_progress"})

    assert str(exc.value).startswith("Failed to update task status: ")
    assert "Fix bug" in str(exc.value)
    assert not isinstance(exc.value, ToolInputError)


@pytest.mark.parametrize(
    "args",
    [{"status": "done"}, {"taskId": "", "status": "done"}, {"taskId": "x", "status": "blocked"}],
)
def test_update_tool_rejects_bad_input(toolkit: BoardToolkit, args) -> None:
    with pytest.raises(ToolInputError):
        toolkit.prepare("kanban_update_task", args)


def test_get_tool_empty_and_summary(toolkit: BoardToolkit, store: TaskStore) -> None:
    preview = toolkit.prepare("kanban_get_tasks", None)
    assert not preview.needs_confirmation
    assert toolkit.dispatch("kanban_get_tasks", "") == "The Kanban board is empty. No tasks found."

    a, b, c = store.create_tasks(
        [CreateTaskInput("a", 0), CreateTaskInput("b", 1), CreateTaskInput("c", 2.5)]
    )
    store.set_task_status(a.id, TaskStatus.DONE)
    store.set_task_status(b.id, TaskStatus.IN_PROGRESS)

    text = toolkit.dispatch("kanban_get_tasks", "{}")

    assert text.splitlines()[0] == "Found 3 task(s):"
    assert "Ready: 1, In Progress: 1, In Review: 0, Done: 1" in text
    assert f"- [done] a (ID: {a.id}, order: 0)" in text
    assert f"- [ready] c (ID: {c.id}, order: 2.5)" in text


def test_reset_tool(toolkit: BoardToolkit, store: TaskStore) -> None:
    store.create_tasks([CreateTaskInput("a", 0), CreateTaskInput("b", 1)])

    preview = toolkit.prepare("kanban_reset_board", {})
    assert preview.confirmation_message == "Clear all 2 task(s) from the Kanban board?"

    assert toolkit.dispatch("kanban_reset_board", {}) == "Kanban board cleared. Removed 2 task(s)."
    assert store.get_tasks() == ()


def test_unknown_tool_and_bad_json(toolkit: BoardToolkit) -> None:
    with pytest.raises(ToolInputError, match="Unknown tool"):
        toolkit.dispatch("kanban_delete_task", {})
    with pytest.raises(ToolInputError, match="not valid JSON"):
        toolkit.dispatch("kanban_get_tasks", "{oops")
    with pytest.raises(ToolInputError, match="JSON object"):
        toolkit.dispatch("kanban_get_tasks", "[1, 2]")


def test_create_tool_rejects_nan_order_in_json_arguments(
    toolkit: BoardToolkit, store: TaskStore
) -> None:
    store.create_tasks([CreateTaskInput("kept", 1)])

    with pytest.raises(ToolInputError, match="finite number"):
        toolkit.dispatch("kanban_create_tasks", '{"tasks": [{"title": "bad", "order": NaN}]}')

    assert [t.title for t in store.get_tasks()] == ["kept"]
