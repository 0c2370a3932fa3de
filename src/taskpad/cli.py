"""Taskpad CLI - personal task list."""

import asyncio
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

import click

from .adapters.json_store import JsonFileTaskStore
from .config import Config, configure_logging, load_config
from .controller import TaskController
from .core.dates import (
    format_due,
    has_explicit_time,
    is_due_soon,
    is_due_today,
    is_overdue,
    time_until_due,
)
from .core.filters import TaskFilter
from .core.sorting import SortMode
from .core.tasks import Priority, Task, TaskDraft

FILTER_CHOICES = [f.value for f in TaskFilter]
SORT_CHOICES = [m.value for m in SortMode]
PRIORITY_CHOICES = [p.value for p in Priority]


class DueDate(click.ParamType):
    """YYYY-MM-DD for a date-only deadline, YYYY-MM-DD HH:MM for a timed one."""

    name = "due"
    _formats = [("%Y-%m-%d", False), ("%Y-%m-%dT%H:%M", True), ("%Y-%m-%d %H:%M", True)]

    def convert(self, value, param, ctx):
        if isinstance(value, tuple):
            return value
        for fmt, has_time in self._formats:
            try:
                return datetime.strptime(value.strip(), fmt), has_time
            except ValueError:
                continue
        self.fail(f"{value!r} is not YYYY-MM-DD or YYYY-MM-DD HH:MM", param, ctx)


def _run(ctx: click.Context, action: Callable[[TaskController], Any]) -> tuple[TaskController, Any]:
    """Load tasks, apply an action, wait for saves, and echo notices."""
    config: Config = ctx.obj["config"]

    async def runner():
        controller = TaskController(
            JsonFileTaskStore(config.data_file),
            task_filter=config.default_filter,
            sort_mode=config.default_sort,
        )
        await controller.load()
        result = action(controller)
        await controller.flush()
        return controller, result

    controller, result = asyncio.run(runner())
    for notice in controller.drain_notices():
        if notice.is_error:
            click.echo(f"Error: {notice.message}", err=True)
        else:
            click.echo(notice.message)
    return controller, result


def _status(task: Task, now: datetime, soon_days: int) -> str:
    if is_overdue(task, now):
        return "overdue"
    if is_due_today(task, now):
        return "due today"
    if is_due_soon(task, now, soon_days):
        return "due soon"
    return ""


def _format_task(task: Task, now: datetime, soon_days: int) -> str:
    check = "x" if task.completed else " "
    priority_marker = "!" * task.priority.rank
    due = f" (due {format_due(task, now)})" if task.due_date else ""
    status = _status(task, now, soon_days)
    tag = f" [{status}]" if status else ""
    return f"[{check}] [{priority_marker:3}] {task.title}{due}{tag}  ({task.id})"


def _empty_message(task_filter: TaskFilter, search: str) -> str:
    if search.strip():
        return f'No tasks match "{search}"'
    match task_filter:
        case TaskFilter.ACTIVE:
            return "No active tasks. All caught up! Great job."
        case TaskFilter.COMPLETED:
            return "No completed tasks. Complete some tasks to see them here."
        case _:
            return "No tasks yet. Run 'taskpad add' to create your first task."


@click.group()
@click.version_option()
@click.option(
    "--data-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Task file (overrides DATA_FILE in taskpad.conf)",
)
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
@click.pass_context
def main(ctx, data_file: Path | None, verbose: bool):
    """Taskpad - personal task list."""
    config = load_config()
    if data_file is not None:
        config.data_file = data_file
    configure_logging("DEBUG" if verbose else config.log_level)
    ctx.obj = {"config": config}


@main.command("list")
@click.option("--filter", "task_filter", type=click.Choice(FILTER_CHOICES), default=None)
@click.option("--sort", "sort_mode", type=click.Choice(SORT_CHOICES), default=None)
@click.option("--search", default="", help="Match title or description")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def list_tasks(ctx, task_filter: str | None, sort_mode: str | None, search: str, as_json: bool):
    """List tasks."""
    config: Config = ctx.obj["config"]

    def view(controller: TaskController) -> list[Task]:
        if task_filter:
            controller.set_filter(task_filter)
        if sort_mode:
            controller.set_sort(sort_mode)
        controller.set_search(search)
        return controller.displayed

    controller, shown = _run(ctx, view)
    now = datetime.now()

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        **t.to_dict(),
                        "hasTime": has_explicit_time(t),
                        "overdue": is_overdue(t, now),
                        "dueToday": is_due_today(t, now),
                        "dueSoon": is_due_soon(t, now, config.due_soon_days),
                        "timeUntilDue": time_until_due(t, now),
                    }
                    for t in shown
                ],
                indent=2,
            )
        )
        return

    counts = controller.counts
    click.echo(f"{counts.active} active, {counts.completed} completed")
    if not shown:
        click.echo(_empty_message(controller.task_filter, controller.search))
        return

    for task in shown:
        click.echo(_format_task(task, now, config.due_soon_days))


@main.command()
@click.argument("title")
@click.option("-d", "--description", default="", help="Longer description")
@click.option("--due", type=DueDate(), default=None, help="YYYY-MM-DD or YYYY-MM-DD HH:MM")
@click.option("-p", "--priority", type=click.Choice(PRIORITY_CHOICES), default="medium")
@click.pass_context
def add(ctx, title: str, description: str, due: tuple[datetime, bool] | None, priority: str):
    """Add a task."""
    due_date, has_time = due if due else (None, None)
    draft = TaskDraft(
        title=title,
        description=description,
        due_date=due_date,
        priority=priority,
        due_has_time=has_time,
    )
    _, task = _run(ctx, lambda controller: controller.add(draft))
    if task is None:
        sys.exit(1)
    click.echo(f"Added: {task.title} ({task.id})")


@main.command()
@click.argument("task_id")
@click.option("--title", default=None)
@click.option("-d", "--description", default=None)
@click.option("--due", type=DueDate(), default=None, help="YYYY-MM-DD or YYYY-MM-DD HH:MM")
@click.option("--no-due", is_flag=True, help="Remove the due date")
@click.option("-p", "--priority", type=click.Choice(PRIORITY_CHOICES), default=None)
@click.pass_context
def edit(
    ctx,
    task_id: str,
    title: str | None,
    description: str | None,
    due: tuple[datetime, bool] | None,
    no_due: bool,
    priority: str | None,
):
    """Edit a task. Unspecified fields keep their current values."""

    def apply(controller: TaskController) -> Task | None:
        current = controller.collection.get(task_id)
        if current is None:
            raise click.ClickException(f"No task with id {task_id}")

        due_date, has_time = current.due_date, has_explicit_time(current)
        if no_due:
            due_date, has_time = None, None
        elif due:
            due_date, has_time = due

        draft = TaskDraft(
            title=title if title is not None else current.title,
            description=description if description is not None else current.description,
            due_date=due_date,
            priority=priority or current.priority,
            due_has_time=has_time,
        )
        return controller.edit(task_id, draft)

    _, task = _run(ctx, apply)
    if task is None:
        sys.exit(1)
    click.echo(f"Updated: {task.title}")


@main.command()
@click.argument("task_id")
@click.pass_context
def done(ctx, task_id: str):
    """Toggle a task between open and completed."""
    _, task = _run(ctx, lambda controller: controller.toggle_complete(task_id))
    if task is None:
        sys.exit(1)
    state = "Completed" if task.completed else "Reopened"
    click.echo(f"{state}: {task.title}")


@main.command("rm")
@click.argument("task_id")
@click.option("-y", "--yes", is_flag=True, help="Don't ask for confirmation")
@click.pass_context
def remove(ctx, task_id: str, yes: bool):
    """Delete a task."""

    def apply(controller: TaskController) -> bool | None:
        task = controller.collection.get(task_id)
        if task is not None and not yes:
            if not click.confirm(f'Delete "{task.title}"?'):
                return None
        return controller.delete(task_id)

    _, removed = _run(ctx, apply)
    if removed is None:
        return
    if not removed:
        sys.exit(1)
    click.echo("Deleted.")


@main.command()
@click.option("-y", "--yes", is_flag=True, help="Don't ask for confirmation")
@click.pass_context
def clear(ctx, yes: bool):
    """Delete all completed tasks."""

    def apply(controller: TaskController) -> int:
        completed = controller.counts.completed
        if completed and not yes:
            plural = "" if completed == 1 else "s"
            if not click.confirm(f"Delete {completed} completed task{plural}?"):
                return 0
        return controller.clear_completed()

    _run(ctx, apply)
