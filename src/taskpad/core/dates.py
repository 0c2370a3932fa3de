"""Date semantics for tasks: overdue, due today, due soon, and display helpers.

Pure functions - no I/O. Everything compares naive local datetimes.
"""

import math
from datetime import datetime, time, timedelta

from .tasks import Task

DUE_SOON_DAYS = 3


def _has_time_of_day(value: datetime) -> bool:
    return value.hour != 0 or value.minute != 0


def has_explicit_time(task: Task) -> bool:
    """
    Whether the deadline carries a time of day.

    Uses the stored flag when present. Older records without it fall back to
    the clock value, so a deadline set to exactly midnight reads as date-only.
    """
    if task.due_date is None:
        return False
    if task.due_has_time is not None:
        return task.due_has_time
    return _has_time_of_day(task.due_date)


def end_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.max)


def is_overdue(task: Task, now: datetime | None = None) -> bool:
    """Past the deadline; date-only deadlines last until the end of their day."""
    if task.completed or task.due_date is None:
        return False
    now = now or datetime.now()
    if has_explicit_time(task):
        return task.due_date < now
    return end_of_day(task.due_date) < now


def is_due_today(task: Task, now: datetime | None = None) -> bool:
    if task.completed or task.due_date is None:
        return False
    now = now or datetime.now()
    return task.due_date.date() == now.date()


def is_due_soon(task: Task, now: datetime | None = None, days: int = DUE_SOON_DAYS) -> bool:
    """Due within [now, now + days], comparing raw instants."""
    if task.completed or task.due_date is None:
        return False
    now = now or datetime.now()
    return now <= task.due_date <= now + timedelta(days=days)


def format_time(value: datetime | None, has_time: bool | None = None) -> str:
    """'3:30 PM', or empty when there is no time of day."""
    if value is None:
        return ""
    if has_time is None:
        has_time = _has_time_of_day(value)
    if not has_time:
        return ""
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def format_date(
    value: datetime | None,
    now: datetime | None = None,
    include_time: bool = False,
    has_time: bool | None = None,
) -> str:
    """
    Human-friendly date label.

    "Today", "Tomorrow" and "Yesterday" for near dates, otherwise
    "Mon, Jan 5" with the year appended outside the current year.
    """
    if value is None:
        return ""
    now = now or datetime.now()
    today = now.date()
    day = value.date()

    if day == today:
        label = "Today"
    elif day == today + timedelta(days=1):
        label = "Tomorrow"
    elif day == today - timedelta(days=1):
        label = "Yesterday"
    else:
        label = f"{value.strftime('%a, %b')} {value.day}"
        if value.year != today.year:
            label = f"{label}, {value.year}"

    if include_time:
        time_label = format_time(value, has_time)
        if time_label:
            return f"{label} at {time_label}"
    return label


def format_due(task: Task, now: datetime | None = None) -> str:
    """Due date label for a task, with its time when one was chosen."""
    return format_date(task.due_date, now, include_time=True, has_time=has_explicit_time(task))


def time_until_due(task: Task, now: datetime | None = None) -> str:
    """Relative phrase such as 'Due in 3 days' or '2 days overdue'."""
    if task.due_date is None:
        return ""
    now = now or datetime.now()
    diff_days = math.ceil((task.due_date - now) / timedelta(days=1))

    if diff_days < 0:
        overdue_days = abs(diff_days)
        plural = "" if overdue_days == 1 else "s"
        return f"{overdue_days} day{plural} overdue"
    elif diff_days == 0:
        return "Due today"
    elif diff_days == 1:
        return "Due tomorrow"
    else:
        return f"Due in {diff_days} days"
