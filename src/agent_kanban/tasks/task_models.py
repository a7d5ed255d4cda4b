# src/agent_kanban/tasks/task_models.py

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

CREATED_BY_AGENT = "agent"


class TaskStatus(StrEnum):
    """
    Board column a task sits in.

    Notes:
    - values are the persisted strings and the column keys of the board.
    - only one task may be IN_PROGRESS at a time (enforced by TaskStore).
    """

    READY = "ready"
    IN_PROGRESS = "in_progress"
    IN_REVIEW = "in_review"
    DONE = "done"

    @classmethod
    def parse(cls, raw: str | TaskStatus) -> TaskStatus:
        try:
            return cls(raw)
        except ValueError:
            allowed = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown task status {raw!r} (expected one of: {allowed})") from None


# Column order of the board.
BOARD_COLUMNS: tuple[TaskStatus, ...] = (
    TaskStatus.READY,
    TaskStatus.IN_PROGRESS,
    TaskStatus.IN_REVIEW,
    TaskStatus.DONE,
)

COLUMN_TITLES: dict[TaskStatus, str] = {
    TaskStatus.READY: "Ready",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.IN_REVIEW: "In Review",
    TaskStatus.DONE: "Done",
}


def is_valid_order(value: Any) -> bool:
    """True for finite int/float values; bools, NaN and infinities are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    title: str
    status: TaskStatus
    order: float
    created_by: str = CREATED_BY_AGENT

    def to_record(self) -> dict[str, Any]:
        """JSON record as stored on disk (camelCase keys)."""
        return {
            "id": self.id,
            "title": self.title,
            "status": str(self.status),
            "order": self.order,
            "createdBy": self.created_by,
        }

    @classmethod
    def from_record(cls, raw: Mapping[str, Any]) -> Task:
        """
        Build a Task from a stored record.

        Raises ValueError for records that cannot be represented
        (missing keys, wrong types, unknown status).
        """
        task_id = raw.get("id")
        title = raw.get("title")
        order = raw.get("order")
        if not isinstance(task_id, str) or not task_id:
            raise ValueError("record has no string id")
        if not isinstance(title, str):
            raise ValueError(f"record {task_id} has no string title")
        if not is_valid_order(order):
            raise ValueError(f"record {task_id} has a non-numeric order")

        created_by = raw.get("createdBy", CREATED_BY_AGENT)
        return cls(
            id=task_id,
            title=title,
            status=TaskStatus.parse(raw.get("status", "")),
            order=order,
            created_by=str(created_by or CREATED_BY_AGENT),
        )


@dataclass(frozen=True, slots=True)
class CreateTaskInput:
    title: str
    order: float

    @classmethod
    def coerce(cls, item: CreateTaskInput | Mapping[str, Any]) -> CreateTaskInput:
        if isinstance(item, CreateTaskInput):
            title, order = item.title, item.order
        else:
            title, order = item["title"], item["order"]
        if not isinstance(title, str):
            raise ValueError(f"Task title must be a string, got {title!r}")
        if not is_valid_order(order):
            raise ValueError(f"Task order must be a finite number, got {order!r}")
        return cls(title=title, order=order)


class TaskStoreError(Exception):
    """Base class for task store failures surfaced to callers."""


class TaskNotFoundError(TaskStoreError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id


class TaskConflictError(TaskStoreError):
    """Raised when a second task would enter in_progress."""

    def __init__(self, task_id: str, blocking_task: Task) -> None:
        super().__init__(
            "Cannot move task to in_progress. "
            f'Task "{blocking_task.title}" is already in progress.'
        )
        self.task_id = task_id
        self.blocking_task = blocking_task


def group_by_status(tasks: Iterable[Task]) -> dict[TaskStatus, list[Task]]:
    """
    Split tasks into the four board columns, each sorted by order.

    Tasks whose status is not a board column are dropped.
    """
    buckets: dict[TaskStatus, list[Task]] = {status: [] for status in BOARD_COLUMNS}
    for task in tasks:
        bucket = buckets.get(task.status)
        if bucket is not None:
            bucket.append(task)
    for bucket in buckets.values():
        bucket.sort(key=lambda t: t.order)
    return buckets


def format_order(order: float) -> str:
    """Render an order value without a trailing '.0' for whole numbers."""
    if isinstance(order, float) and order.is_integer():
        return str(int(order))
    return str(order)
