"""Task storage interface."""

from typing import Protocol, Sequence

from taskpad.core.tasks import Task


class StorageError(Exception):
    """Raised when stored tasks cannot be read."""

    pass


class TaskStore(Protocol):
    """Interface for persisting the whole task collection."""

    async def load_all(self) -> list[Task]:
        """Load every stored task. Returns [] when nothing is stored."""
        ...

    async def save_all(self, tasks: Sequence[Task]) -> bool:
        """Replace stored tasks with this collection. Returns False on failure."""
        ...
