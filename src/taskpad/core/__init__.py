"""Functional core - pure business logic with no I/O."""

from .tasks import Task, TaskDraft, Priority, ValidationError, create_task, generate_task_id
from .dates import has_explicit_time, is_overdue, is_due_today, is_due_soon, format_date, format_time
from .filters import TaskFilter, TaskCounts, filter_by_state, search_tasks, count_tasks
from .sorting import SortMode, sort_tasks
from .collection import TaskCollection, project_view

__all__ = [
    # Tasks
    "Task",
    "TaskDraft",
    "Priority",
    "ValidationError",
    "create_task",
    "generate_task_id",
    # Dates
    "has_explicit_time",
    "is_overdue",
    "is_due_today",
    "is_due_soon",
    "format_date",
    "format_time",
    # Filters
    "TaskFilter",
    "TaskCounts",
    "filter_by_state",
    "search_tasks",
    "count_tasks",
    # Sorting
    "SortMode",
    "sort_tasks",
    # Collection
    "TaskCollection",
    "project_view",
]
