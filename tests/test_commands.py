# tests/test_commands.py

from __future__ import annotations

from agent_kanban.cli.commands import CommandRegistry, registry
from agent_kanban.tasks.task_models import TaskStatus


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}
    notes: list[str] = []

    def h2(state, args):
        called["h2"] += 1
        return "h2:" + ",".join(args)

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a", aliases=["aa"])
    reg.register("b", h3, "b")

    assert reg.handle(state, "/a x y") == "h2:x,y"
    assert reg.handle(state, "/AA") == "h2:"
    assert reg.handle(state, "/b", emit=notes.append) == "h3"
    assert called == {"h2": 2, "h3": 1}
    assert notes == ["note"]
    assert "/a - a" in reg.build_help()


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_add_move_and_reset_commands(state) -> None:
    out = registry.handle(state, "/add 2 Write the docs")
    assert out is not None and out.startswith("Created task task-")

    registry.handle(state, "/add 0.5 Fix bug")
    fix, docs = state.task_store.get_tasks()
    assert (fix.title, fix.order) == ("Fix bug", 0.5)
    assert (docs.title, docs.order) == ("Write the docs", 2)

    assert registry.handle(state, f"/move {fix.id} in_progress") == 'Task "Fix bug" moved to in_progress.'

    hints: list[str] = []
    reply = registry.handle(state, f"/mv {docs.id} in_progress", emit=hints.append)
    assert reply is not None and reply.startswith("Error: Cannot move task to in_progress.")
    assert hints == [f"Hint: /move {fix.id} in_review (or done) first."]
    assert state.task_store.get_tasks()[1].status is TaskStatus.READY

    assert registry.handle(state, "/reset") == "Kanban board reset. Removed 2 task(s)."
    assert state.task_store.get_tasks() == ()


def test_command_input_errors(state) -> None:
    assert registry.handle(state, "/add") == "Usage: /add <order> <title>"
    assert registry.handle(state, "/add soon Fix bug") == "Order must be a number, got 'soon'."
    assert (registry.handle(state, "/move only-one") or "").startswith("Usage: /move")
    assert "Unknown task status" in (registry.handle(state, "/move task-1 blocked") or "")
    assert registry.handle(state, "/move task-1 done") == "Error: Task task-1 not found"


def test_board_tasks_and_status_commands(state) -> None:
    registry.handle(state, "/add 1 Ship it")

    assert "Ready (1)" in (registry.handle(state, "/board") or "")
    assert "- [ready] Ship it" in (registry.handle(state, "/tasks") or "")
    status = registry.handle(state, "/status") or ""
    assert "kanban-agent.json" in status
    assert "FakeLLMClient" in status
    assert "/move" in (registry.handle(state, "/help") or "")


def test_add_rejects_non_finite_order(state) -> None:
    for raw in ("nan", "inf", "-Infinity"):
        assert registry.handle(state, f"/add {raw} Broken") == f"Order must be a finite number, got {raw!r}."
    assert state.task_store.get_tasks() == ()
