"""Tests for the task collection controller."""

import asyncio
from datetime import datetime, timedelta

import pytest

from taskpad.adapters.json_store import JsonFileTaskStore
from taskpad.adapters.memory_store import MemoryTaskStore
from taskpad.controller import NoticeLevel, TaskController
from taskpad.core.filters import TaskCounts, TaskFilter
from taskpad.core.sorting import SortMode
from taskpad.core.tasks import TaskDraft, create_task
from taskpad.ports.task_store import StorageError

NOW = datetime(2025, 1, 15, 9, 0)


class BrokenStore:
    """Store whose reads raise and whose writes fail."""

    def __init__(self):
        self.save_calls = 0

    async def load_all(self):
        raise StorageError("corrupt file")

    async def save_all(self, tasks):
        self.save_calls += 1
        return False


class SlowFirstStore(MemoryTaskStore):
    """The first save takes longer than later ones."""

    async def save_all(self, tasks):
        delay = 0.05 if self.save_count == 0 else 0
        self.save_count += 1
        await asyncio.sleep(delay)
        self._tasks = list(tasks)
        return True


@pytest.fixture
def store():
    return MemoryTaskStore()


@pytest.fixture
def clock():
    return lambda: NOW


async def loaded(store, clock):
    controller = TaskController(store, clock=clock)
    await controller.load()
    return controller


class TestLoad:
    @pytest.mark.asyncio
    async def test_loads_stored_tasks(self, clock):
        task = create_task("Stored", now=NOW)
        controller = await loaded(MemoryTaskStore([task]), clock)
        assert controller.tasks == (task,)
        assert controller.is_loading is False
        assert controller.drain_notices() == []

    @pytest.mark.asyncio
    async def test_load_failure_gives_empty_collection(self, clock):
        controller = await loaded(BrokenStore(), clock)
        assert controller.tasks == ()
        assert controller.is_loading is False
        notices = controller.drain_notices()
        assert len(notices) == 1
        assert notices[0].level is NoticeLevel.ERROR
        assert notices[0].message == "Failed to load tasks"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content",
        [b"\xff\xfe garbage", b"[1, 2]", b'["x"]', b'[{"id": "a", "title": null, "description": 3}]'],
    )
    async def test_bad_file_gives_empty_collection(self, tmp_path, clock, content):
        path = tmp_path / "tasks.json"
        path.write_bytes(content)
        controller = await loaded(JsonFileTaskStore(path), clock)

        assert controller.tasks == ()
        controller.set_search("x")
        assert controller.displayed == []
        assert [n.message for n in controller.drain_notices()] == ["Failed to load tasks"]

    @pytest.mark.asyncio
    async def test_unexpected_store_error_is_a_load_failure(self, clock):
        class ExplodingStore(MemoryTaskStore):
            async def load_all(self):
                raise AttributeError("boom")

        controller = await loaded(ExplodingStore(), clock)
        assert controller.tasks == ()
        assert controller.drain_notices()[0].is_error

    @pytest.mark.asyncio
    async def test_refresh_replaces_memory_with_storage(self, store, clock):
        controller = await loaded(store, clock)
        controller.add(TaskDraft(title="Unsaved"))
        await controller.refresh()
        await controller.flush()

        assert controller.tasks == ()
        assert await store.load_all() == []
        assert store.save_count == 0


class TestMutations:
    @pytest.mark.asyncio
    async def test_add_prepends_and_saves(self, store, clock):
        controller = await loaded(store, clock)
        first = controller.add(TaskDraft(title="First"))
        second = controller.add(TaskDraft(title="Second", priority="high"))
        await controller.flush()

        assert controller.tasks == (second, first)
        assert await store.load_all() == [second, first]
        assert first.created_at == NOW

    @pytest.mark.asyncio
    async def test_add_blank_title_rejected(self, store, clock):
        controller = await loaded(store, clock)
        result = controller.add(TaskDraft(title="   "))
        await controller.flush()

        assert result is None
        assert controller.tasks == ()
        assert store.save_count == 0
        notices = controller.drain_notices()
        assert [n.message for n in notices] == ["Please enter a task title"]

    @pytest.mark.asyncio
    async def test_toggle_sets_and_clears_completed_at(self, store):
        times = iter([NOW, NOW + timedelta(hours=1), NOW + timedelta(hours=2)])
        controller = await loaded(store, lambda: next(times))
        task = controller.add(TaskDraft(title="Laundry"))

        done = controller.toggle_complete(task.id)
        assert done.completed is True
        assert done.completed_at == NOW + timedelta(hours=1)

        reopened = controller.toggle_complete(task.id)
        assert reopened.completed is False
        assert reopened.completed_at is None
        await controller.flush()

    @pytest.mark.asyncio
    async def test_toggle_then_edit_keeps_completion(self, store, clock):
        controller = await loaded(store, clock)
        task = controller.add(TaskDraft(title="Draft report"))
        done = controller.toggle_complete(task.id)

        edited = controller.edit(task.id, TaskDraft(title="Final report"))
        await controller.flush()

        assert edited.title == "Final report"
        assert edited.completed is True
        assert edited.completed_at == done.completed_at
        assert (await store.load_all())[0] == edited

    @pytest.mark.asyncio
    async def test_edit_unknown_id(self, store, clock):
        controller = await loaded(store, clock)
        assert controller.edit("nope", TaskDraft(title="x")) is None
        assert controller.drain_notices()[0].is_error

    @pytest.mark.asyncio
    async def test_edit_validation_leaves_task_alone(self, store, clock):
        controller = await loaded(store, clock)
        task = controller.add(TaskDraft(title="Keep me"))
        assert controller.edit(task.id, TaskDraft(title="")) is None
        assert controller.tasks == (task,)
        await controller.flush()

    @pytest.mark.asyncio
    async def test_delete(self, store, clock):
        controller = await loaded(store, clock)
        task = controller.add(TaskDraft(title="Temp"))
        assert controller.delete(task.id) is True
        assert controller.delete(task.id) is False
        await controller.flush()
        assert await store.load_all() == []

    @pytest.mark.asyncio
    async def test_clear_completed(self, store, clock):
        controller = await loaded(store, clock)
        a = controller.add(TaskDraft(title="A"))
        controller.add(TaskDraft(title="B"))
        c = controller.add(TaskDraft(title="C"))
        controller.toggle_complete(a.id)
        controller.toggle_complete(c.id)

        assert controller.clear_completed() == 2
        await controller.flush()
        assert [t.title for t in controller.tasks] == ["B"]
        assert controller.drain_notices()[-1].message == "Cleared 2 completed tasks."

    @pytest.mark.asyncio
    async def test_clear_completed_with_none_is_reported_noop(self, store, clock):
        controller = await loaded(store, clock)
        controller.add(TaskDraft(title="Open"))
        await controller.flush()
        saves_before = store.save_count
        before = controller.collection

        assert controller.clear_completed() == 0
        await controller.flush()

        assert controller.collection is before
        assert store.save_count == saves_before
        notices = controller.drain_notices()
        assert notices[-1].level is NoticeLevel.INFO
        assert notices[-1].message == "There are no completed tasks to clear."


class TestPersistence:
    @pytest.mark.asyncio
    async def test_save_failure_keeps_memory(self, clock):
        store = BrokenStore()
        controller = await loaded(store, clock)
        controller.drain_notices()

        task = controller.add(TaskDraft(title="Survives"))
        await controller.flush()

        assert controller.tasks == (task,)
        assert store.save_calls == 1
        assert [n.message for n in controller.drain_notices()] == ["Failed to save tasks"]

    @pytest.mark.asyncio
    async def test_newest_snapshot_wins(self, clock):
        store = SlowFirstStore()
        controller = await loaded(store, clock)

        controller.add(TaskDraft(title="One"))
        controller.add(TaskDraft(title="Two"))
        controller.add(TaskDraft(title="Three"))
        await controller.flush()

        assert await store.load_all() == list(controller.tasks)
        assert [t.title for t in await store.load_all()] == ["Three", "Two", "One"]


class TestView:
    @pytest.mark.asyncio
    async def test_displayed_follows_settings(self, store, clock):
        controller = await loaded(store, clock)
        milk = controller.add(TaskDraft(title="Buy milk", priority="low"))
        rent = controller.add(TaskDraft(title="Pay rent", priority="high"))
        dog = controller.add(TaskDraft(title="Walk dog", description="after dinner"))
        controller.toggle_complete(rent.id)
        await controller.flush()

        assert controller.displayed == [dog, milk, controller.collection.get(rent.id)]

        controller.set_filter(TaskFilter.ACTIVE)
        assert controller.displayed == [dog, milk]

        controller.set_search("DINNER")
        assert controller.displayed == [dog]

        controller.set_search("")
        controller.set_sort(SortMode.ALPHABETICAL)
        assert controller.displayed == [milk, dog]

    @pytest.mark.asyncio
    async def test_counts(self, store, clock):
        controller = await loaded(store, clock)
        task = controller.add(TaskDraft(title="A"))
        controller.add(TaskDraft(title="B"))
        controller.toggle_complete(task.id)
        await controller.flush()
        assert controller.counts == TaskCounts(all=2, active=1, completed=1)

    def test_accepts_string_settings(self, store):
        controller = TaskController(store, task_filter="completed", sort_mode="dueDate")
        assert controller.task_filter is TaskFilter.COMPLETED
        assert controller.sort_mode is SortMode.DUE_DATE
