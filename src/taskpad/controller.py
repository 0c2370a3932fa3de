"""Task collection controller - the layer between storage and presentation.

Owns the in-memory collection and the view settings (filter, search, sort).
Mutations apply synchronously and schedule a save of the whole collection
without waiting for it. Saves are serialized and version-gated, so an older
snapshot never overwrites a newer one.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable

from .core.collection import TaskCollection, project_view
from .core.filters import TaskCounts, TaskFilter
from .core.sorting import SortMode
from .core.tasks import Task, TaskDraft, ValidationError
from .ports.task_store import TaskStore

logger = logging.getLogger(__name__)


class NoticeLevel(Enum):
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """A transient, dismissible message for the user."""

    level: NoticeLevel
    message: str

    @classmethod
    def info(cls, message: str) -> "Notice":
        return cls(NoticeLevel.INFO, message)

    @classmethod
    def error(cls, message: str) -> "Notice":
        return cls(NoticeLevel.ERROR, message)

    @property
    def is_error(self) -> bool:
        return self.level is NoticeLevel.ERROR


class TaskController:
    """
    Orchestrates load -> filter -> search -> sort, plus task mutations.

    Must be used from inside a running event loop: mutations hand their save
    to asyncio.create_task.
    """

    def __init__(
        self,
        store: TaskStore,
        task_filter: TaskFilter | str = TaskFilter.ALL,
        sort_mode: SortMode | str = SortMode.SMART,
        search: str = "",
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.collection = TaskCollection()
        self.task_filter = TaskFilter.parse(task_filter)
        self.sort_mode = SortMode.parse(sort_mode)
        self.search = search
        self.is_loading = False
        self._clock = clock
        self._notices: list[Notice] = []
        self._pending: set[asyncio.Task] = set()
        self._save_lock = asyncio.Lock()
        self._committed_version = -1

    # ============== Derived state ==============

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self.collection.tasks

    @property
    def displayed(self) -> list[Task]:
        """The list to show, projected from collection, filter, search and sort."""
        return project_view(self.collection, self.task_filter, self.search, self.sort_mode)

    @property
    def counts(self) -> TaskCounts:
        return self.collection.counts()

    def drain_notices(self) -> list[Notice]:
        """Return pending notices and clear them."""
        notices, self._notices = self._notices, []
        return notices

    def _notify(self, notice: Notice) -> None:
        self._notices.append(notice)

    # ============== View settings ==============

    def set_filter(self, task_filter: TaskFilter | str) -> None:
        self.task_filter = TaskFilter.parse(task_filter)

    def set_sort(self, sort_mode: SortMode | str) -> None:
        self.sort_mode = SortMode.parse(sort_mode)

    def set_search(self, text: str) -> None:
        self.search = text

    # ============== Loading ==============

    async def load(self) -> None:
        """Replace in-memory tasks with what storage holds."""
        self.is_loading = True
        try:
            tasks = await self.store.load_all()
        except Exception as e:
            logger.error(f"Error loading tasks: {e}")
            self._notify(Notice.error("Failed to load tasks"))
            tasks = []
        finally:
            self.is_loading = False

        self.collection = TaskCollection.of(tasks, version=self.collection.version + 1)
        # Storage already holds this state; older queued saves must not commit
        self._committed_version = self.collection.version
        logger.debug(f"Loaded {len(self.collection)} tasks")

    async def refresh(self) -> None:
        """Re-read storage. Storage wins; unsaved in-memory changes are dropped."""
        await self.load()

    # ============== Persistence ==============

    def _commit(self, collection: TaskCollection) -> None:
        self.collection = collection
        save = asyncio.create_task(self._persist(collection))
        self._pending.add(save)
        save.add_done_callback(self._pending.discard)

    async def _persist(self, snapshot: TaskCollection) -> None:
        async with self._save_lock:
            if snapshot.version <= self._committed_version:
                logger.debug(f"Skipping stale save of version {snapshot.version}")
                return
            try:
                saved = await self.store.save_all(snapshot.tasks)
            except Exception as e:
                logger.error(f"Error saving tasks: {e}")
                saved = False

            if saved:
                self._committed_version = snapshot.version
            else:
                self._notify(Notice.error("Failed to save tasks"))

    async def flush(self) -> None:
        """Wait for every scheduled save to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    # ============== Mutations ==============

    def _validated(self, draft: TaskDraft) -> bool:
        try:
            draft.validate()
        except ValidationError as e:
            self._notify(Notice.error(str(e)))
            return False
        return True

    def _missing(self, task_id: str) -> None:
        logger.warning(f"No task with id {task_id}")
        self._notify(Notice.error(f"No task with id {task_id}"))

    def add(self, draft: TaskDraft) -> Task | None:
        """Create a task from the draft and put it at the front of the collection."""
        if not self._validated(draft):
            return None
        collection, task = self.collection.add(draft, now=self._clock())
        self._commit(collection)
        logger.info(f"Added task {task.id}")
        return task

    def edit(self, task_id: str, draft: TaskDraft) -> Task | None:
        """Replace a task's editable fields; completion state carries over."""
        if not self._validated(draft):
            return None
        collection, task = self.collection.edit(task_id, draft)
        if task is None:
            self._missing(task_id)
            return None
        self._commit(collection)
        logger.info(f"Edited task {task_id}")
        return task

    def toggle_complete(self, task_id: str) -> Task | None:
        collection, task = self.collection.toggle(task_id, now=self._clock())
        if task is None:
            self._missing(task_id)
            return None
        self._commit(collection)
        logger.info(f"Task {task_id} completed={task.completed}")
        return task

    def delete(self, task_id: str) -> bool:
        collection, removed = self.collection.remove(task_id)
        if not removed:
            self._missing(task_id)
            return False
        self._commit(collection)
        logger.info(f"Deleted task {task_id}")
        return True

    def clear_completed(self) -> int:
        """Remove all completed tasks. Returns how many were removed."""
        collection, removed = self.collection.clear_completed()
        if removed == 0:
            self._notify(Notice.info("There are no completed tasks to clear."))
            return 0
        self._commit(collection)
        plural = "" if removed == 1 else "s"
        self._notify(Notice.info(f"Cleared {removed} completed task{plural}."))
        logger.info(f"Cleared {removed} completed tasks")
        return removed
