"""Ports - interfaces/protocols for external dependencies."""

from .task_store import StorageError, TaskStore

__all__ = [
    "StorageError",
    "TaskStore",
]
