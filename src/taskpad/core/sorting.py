"""Task orderings.

Every mode puts open tasks before completed ones, then applies its own
tie-break chain. Built on sorted(), so remaining ties keep input order.
"""

import locale
from datetime import datetime
from enum import Enum
from typing import Callable, Iterable

from .tasks import Task

_EPOCH = datetime(1970, 1, 1)


class SortMode(Enum):
    """Display orderings."""

    SMART = "smart"
    PRIORITY = "priority"
    DUE_DATE = "due_date"
    ALPHABETICAL = "alphabetical"
    CREATED = "created"

    @classmethod
    def parse(cls, value: "SortMode | str") -> "SortMode":
        """Coerce a mode name; 'dueDate' is accepted, unknown names mean smart."""
        if isinstance(value, SortMode):
            return value
        name = str(value).strip()
        if name == "dueDate":
            return cls.DUE_DATE
        try:
            return cls(name.lower().replace("-", "_"))
        except ValueError:
            return cls.SMART


def _instant(value: datetime) -> float:
    return (value - _EPOCH).total_seconds()


def _due_key(task: Task) -> tuple[bool, float]:
    # Tasks with a deadline first, earliest deadline first
    if task.due_date is None:
        return (True, 0.0)
    return (False, _instant(task.due_date))


def sort_smart(tasks: Iterable[Task]) -> list[Task]:
    """Priority desc, then deadline presence and date, then newest first."""

    def sort_key(t: Task) -> tuple:
        return (t.completed, -t.priority.rank, *_due_key(t), -_instant(t.created_at))

    return sorted(tasks, key=sort_key)


def sort_by_priority(tasks: Iterable[Task]) -> list[Task]:
    def sort_key(t: Task) -> tuple:
        return (t.completed, -t.priority.rank, -_instant(t.created_at))

    return sorted(tasks, key=sort_key)


def sort_by_due_date(tasks: Iterable[Task]) -> list[Task]:
    def sort_key(t: Task) -> tuple:
        return (t.completed, *_due_key(t), -_instant(t.created_at))

    return sorted(tasks, key=sort_key)


def sort_alphabetically(tasks: Iterable[Task]) -> list[Task]:
    """Title order, case-insensitive, collated with the active locale."""

    def sort_key(t: Task) -> tuple:
        # strxfrm rejects embedded NUL characters
        return (t.completed, locale.strxfrm(t.title.lower().replace("\x00", "")))

    return sorted(tasks, key=sort_key)


def sort_by_created(tasks: Iterable[Task]) -> list[Task]:
    def sort_key(t: Task) -> tuple:
        return (t.completed, -_instant(t.created_at))

    return sorted(tasks, key=sort_key)


_STRATEGIES: dict[SortMode, Callable[[Iterable[Task]], list[Task]]] = {
    SortMode.SMART: sort_smart,
    SortMode.PRIORITY: sort_by_priority,
    SortMode.DUE_DATE: sort_by_due_date,
    SortMode.ALPHABETICAL: sort_alphabetically,
    SortMode.CREATED: sort_by_created,
}


def sort_tasks(tasks: Iterable[Task], mode: SortMode | str = SortMode.SMART) -> list[Task]:
    """
    Sort tasks under the given mode.

    Pure function - no I/O.
    """
    return _STRATEGIES[SortMode.parse(mode)](tasks)
