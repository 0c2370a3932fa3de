"""In-memory storage adapter."""

from typing import Sequence

from taskpad.core.tasks import Task


class MemoryTaskStore:
    """
    In-process task storage.

    Implements TaskStore protocol. Keeps a copy of the last saved collection
    and counts writes.
    """

    def __init__(self, tasks: Sequence[Task] | None = None):
        self._tasks: list[Task] = list(tasks or [])
        self.save_count = 0

    async def load_all(self) -> list[Task]:
        return list(self._tasks)

    async def save_all(self, tasks: Sequence[Task]) -> bool:
        self._tasks = list(tasks)
        self.save_count += 1
        return True
