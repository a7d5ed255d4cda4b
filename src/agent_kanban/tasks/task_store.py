# src/agent_kanban/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import os
import secrets
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from pathlib import Path
from typing import Any

from .task_models import (
    CREATED_BY_AGENT,
    CreateTaskInput,
    Task,
    TaskConflictError,
    TaskNotFoundError,
    TaskStatus,
)

logger = logging.getLogger(__name__)

BOARD_DIR_NAME = ".kanban"
BOARD_FILE_NAME = "kanban-agent.json"

TaskSnapshot = tuple[Task, ...]
ChangeListener = Callable[[TaskSnapshot], None]

_ID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def board_file_path(workspace_root: str | Path) -> Path:
    return Path(workspace_root) / BOARD_DIR_NAME / BOARD_FILE_NAME


class TaskStore:
    """
    JSON-file task store: the only place where board state changes.

    - every mutation rewrites the whole file, then notifies listeners
      with the full snapshot
    - load/save failures are logged and never raised
    - at most one task may be in_progress

    Not thread-safe: callers run one operation at a time.
    """

    def __init__(self, workspace_root: str | Path) -> None:
        self._path = board_file_path(workspace_root)
        self._tasks: list[Task] = []
        self._listeners: list[ChangeListener] = []
        self._load()
        logger.info("TaskStore ready path=%s total=%s", self._path, len(self._tasks))

    @property
    def path(self) -> Path:
        return self._path

    # ---- notifications ----

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """
        Register a change listener; returns a callable that removes it.

        Listeners run synchronously, in registration order, after every
        successful mutation.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.get_tasks()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Task change listener %r failed", listener)

    # ---- public API ----

    def get_tasks(self) -> TaskSnapshot:
        return tuple(self._tasks)

    def create_tasks(self, inputs: Iterable[CreateTaskInput | Mapping[str, Any]]) -> list[Task]:
        known = {t.id for t in self._tasks}
        created: list[Task] = []
        for item in inputs:
            spec = CreateTaskInput.coerce(item)
            task_id = self._generate_id(known)
            known.add(task_id)
            created.append(
                Task(
                    id=task_id,
                    title=spec.title,
                    status=TaskStatus.READY,
                    order=spec.order,
                    created_by=CREATED_BY_AGENT,
                )
            )

        self._tasks = sorted([*self._tasks, *created], key=lambda t: t.order)
        logger.debug("Created %d task(s), total=%d", len(created), len(self._tasks))
        self._commit()
        return created

    def set_task_status(self, task_id: str, status: TaskStatus | str) -> Task:
        new_status = TaskStatus.parse(status)

        idx = self._index_of(task_id)
        if idx is None:
            raise TaskNotFoundError(task_id)

        if new_status is TaskStatus.IN_PROGRESS:
            blocking = next(
                (
                    t
                    for t in self._tasks
                    if t.status is TaskStatus.IN_PROGRESS and t.id != task_id
                ),
                None,
            )
            if blocking is not None:
                logger.info(
                    "Rejected in_progress for task=%s: task=%s already in progress",
                    task_id,
                    blocking.id,
                )
                raise TaskConflictError(task_id, blocking)

        old = self._tasks[idx]
        updated = replace(old, status=new_status)
        self._tasks[idx] = updated
        logger.debug("Task %s status %s -> %s", task_id, old.status, new_status)
        self._commit()
        return updated

    def reset_board(self) -> None:
        removed = len(self._tasks)
        self._tasks = []
        logger.info("Board reset, removed %d task(s)", removed)
        self._commit()

    # ---- helpers ----

    def _index_of(self, task_id: str) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    @staticmethod
    def _generate_id(known: set[str]) -> str:
        while True:
            suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
            task_id = f"task-{int(time.time() * 1000)}-{suffix}"
            if task_id not in known:
                return task_id

    def _commit(self) -> None:
        self._save()
        self._notify()

    # ---- persistence ----

    def _save(self) -> None:
        tmp = self._path.with_suffix(".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            payload = json.dumps([t.to_record() for t in self._tasks], ensure_ascii=False, indent=2)
            tmp.write_text(payload, "utf-8")
            os.replace(tmp, self._path)
        except Exception:
            logger.exception("Failed to save tasks to %s", self._path)
            with contextlib.suppress(OSError):
                tmp.unlink()

    def _load(self) -> None:
        if not self._path.exists():
            return

        try:
            data = json.loads(self._path.read_text("utf-8"))
        except Exception:
            logger.exception("Failed to load tasks from %s", self._path)
            return

        if not isinstance(data, list):
            logger.warning("Ignoring %s: expected a JSON array, got %s", self._path, type(data).__name__)
            return

        tasks: list[Task] = []
        seen: set[str] = set()
        for raw in data:
            if not isinstance(raw, dict):
                logger.warning("Skipping non-object task record in %s", self._path)
                continue
            try:
                task = Task.from_record(raw)
            except ValueError as e:
                logger.warning("Skipping task record in %s: %s", self._path, e)
                continue
            if task.id in seen:
                logger.warning("Skipping duplicate task id=%s in %s", task.id, self._path)
                continue
            seen.add(task.id)
            tasks.append(task)

        in_progress = sum(1 for t in tasks if t.status is TaskStatus.IN_PROGRESS)
        if in_progress > 1:
            logger.warning("%s holds %d in_progress tasks; keeping them as-is", self._path, in_progress)

        self._tasks = tasks
