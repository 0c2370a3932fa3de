"""The task collection as an immutable, versioned value.

Each mutation returns a new collection with the version bumped; the
displayed list is a pure projection of (collection, filter, query, sort).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from .filters import TaskCounts, TaskFilter, count_tasks, filter_by_state, search_tasks
from .sorting import SortMode, sort_tasks
from .tasks import Task, TaskDraft, apply_draft, create_task


@dataclass(frozen=True)
class TaskCollection:
    """Tasks in storage order (newest-created first) plus a change counter."""

    tasks: tuple[Task, ...] = field(default_factory=tuple)
    version: int = 0

    @classmethod
    def of(cls, tasks: Iterable[Task], version: int = 0) -> "TaskCollection":
        return cls(tasks=tuple(tasks), version=version)

    def __len__(self) -> int:
        return len(self.tasks)

    def __iter__(self):
        return iter(self.tasks)

    def get(self, task_id: str) -> Task | None:
        return next((t for t in self.tasks if t.id == task_id), None)

    def _evolve(self, tasks: Iterable[Task]) -> "TaskCollection":
        return TaskCollection(tasks=tuple(tasks), version=self.version + 1)

    def add(self, draft: TaskDraft, now: datetime | None = None) -> tuple["TaskCollection", Task]:
        """Prepend a new task built from a validated draft."""
        draft = draft.normalized()
        task = create_task(
            draft.title,
            draft.description,
            draft.due_date,
            draft.priority,
            due_has_time=draft.due_has_time,
            now=now,
        )
        return self._evolve((task, *self.tasks)), task

    def replace(self, task_id: str, updated: Task) -> "TaskCollection":
        return self._evolve(updated if t.id == task_id else t for t in self.tasks)

    def edit(self, task_id: str, draft: TaskDraft) -> tuple["TaskCollection", Task | None]:
        task = self.get(task_id)
        if task is None:
            return self, None
        updated = apply_draft(task, draft)
        return self.replace(task_id, updated), updated

    def toggle(self, task_id: str, now: datetime | None = None) -> tuple["TaskCollection", Task | None]:
        task = self.get(task_id)
        if task is None:
            return self, None
        updated = task.toggled(now)
        return self.replace(task_id, updated), updated

    def remove(self, task_id: str) -> tuple["TaskCollection", bool]:
        if self.get(task_id) is None:
            return self, False
        return self._evolve(t for t in self.tasks if t.id != task_id), True

    def clear_completed(self) -> tuple["TaskCollection", int]:
        """Drop every completed task; an unchanged collection when there are none."""
        removed = sum(1 for t in self.tasks if t.completed)
        if removed == 0:
            return self, 0
        return self._evolve(t for t in self.tasks if not t.completed), removed

    def counts(self) -> TaskCounts:
        return count_tasks(self.tasks)


def project_view(
    tasks: Iterable[Task],
    state: TaskFilter | str = TaskFilter.ALL,
    query: str = "",
    mode: SortMode | str = SortMode.SMART,
) -> list[Task]:
    """Filter by state, then search, then sort."""
    filtered = filter_by_state(tasks, state)
    filtered = search_tasks(filtered, query)
    return sort_tasks(filtered, mode)
