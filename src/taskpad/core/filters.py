"""Completion-state filtering and text search."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from .tasks import Task


class TaskFilter(Enum):
    """Which tasks to show, by completion state."""

    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value: "TaskFilter | str") -> "TaskFilter":
        if isinstance(value, TaskFilter):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.ALL


@dataclass(frozen=True)
class TaskCounts:
    all: int
    active: int
    completed: int


def filter_by_state(tasks: Iterable[Task], state: TaskFilter | str) -> list[Task]:
    """
    Keep tasks matching a completion state, preserving input order.

    Pure function - no I/O.
    """
    state = TaskFilter.parse(state)
    match state:
        case TaskFilter.ACTIVE:
            return [t for t in tasks if not t.completed]
        case TaskFilter.COMPLETED:
            return [t for t in tasks if t.completed]
        case _:
            return list(tasks)


def search_tasks(tasks: Iterable[Task], query: str) -> list[Task]:
    """Case-insensitive substring match on title or description."""
    if not query.strip():
        return list(tasks)
    # Only blank queries are trimmed; a non-blank query matches as typed.
    needle = query.lower()
    return [
        t for t in tasks if needle in t.title.lower() or needle in t.description.lower()
    ]


def count_tasks(tasks: Iterable[Task]) -> TaskCounts:
    tasks = list(tasks)
    completed = sum(1 for t in tasks if t.completed)
    return TaskCounts(all=len(tasks), active=len(tasks) - completed, completed=completed)
