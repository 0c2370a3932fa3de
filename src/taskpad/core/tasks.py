"""Pure task domain logic - no I/O dependencies."""

import random
import string
import time
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500

_ID_ALPHABET = string.digits + string.ascii_lowercase


class ValidationError(Exception):
    """Raised when task data is rejected before construction."""

    pass


class Priority(Enum):
    """Task priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        """Numeric weight: high=3, medium=2, low=1."""
        return _PRIORITY_RANK[self]

    @classmethod
    def parse(cls, value: "Priority | str | None") -> "Priority":
        """Coerce a stored or user-supplied value, defaulting to medium."""
        if isinstance(value, Priority):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.MEDIUM


_PRIORITY_RANK = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}


def _is_midnight(value: datetime) -> bool:
    return value.hour == 0 and value.minute == 0


def _parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO timestamp into naive local time."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _text(data: dict, key: str) -> str:
    """A stored text field; missing or null reads as empty."""
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Task:
    """A single to-do item."""

    id: str
    title: str
    created_at: datetime
    description: str = ""
    completed: bool = False
    priority: Priority = Priority.MEDIUM
    due_date: datetime | None = None
    due_has_time: bool | None = None
    completed_at: datetime | None = None

    @property
    def has_due_date(self) -> bool:
        return self.due_date is not None

    def toggled(self, now: datetime | None = None) -> "Task":
        """Flip completion, stamping or clearing completed_at."""
        if self.completed:
            return replace(self, completed=False, completed_at=None)
        return replace(self, completed=True, completed_at=now or datetime.now())

    def to_dict(self) -> dict:
        """Serialize to the stored JSON shape."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "completed": self.completed,
            "priority": self.priority.value,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "dueHasTime": self.due_has_time,
            "createdAt": self.created_at.isoformat(),
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create Task from a stored record.

        Repairs records whose completed flag and completedAt disagree.
        """
        created_at = _parse_timestamp(data.get("createdAt")) or datetime.now()
        completed = bool(data.get("completed", False))
        completed_at = _parse_timestamp(data.get("completedAt"))
        if completed and completed_at is None:
            completed_at = created_at
        elif not completed:
            completed_at = None

        due_has_time = data.get("dueHasTime")
        return cls(
            id=str(data["id"]),
            title=_text(data, "title"),
            description=_text(data, "description"),
            completed=completed,
            priority=Priority.parse(data.get("priority")),
            due_date=_parse_timestamp(data.get("dueDate")),
            due_has_time=bool(due_has_time) if due_has_time is not None else None,
            created_at=created_at,
            completed_at=completed_at,
        )


@dataclass(frozen=True)
class TaskDraft:
    """User-entered task fields, as submitted by a form or command."""

    title: str
    description: str = ""
    due_date: datetime | None = None
    priority: Priority | str = Priority.MEDIUM
    due_has_time: bool | None = None

    def validate(self) -> None:
        """Raise ValidationError if the draft cannot become a task."""
        title = self.title.strip()
        if not title:
            raise ValidationError("Please enter a task title")
        if len(title) > TITLE_MAX_LENGTH:
            raise ValidationError(f"Title must be at most {TITLE_MAX_LENGTH} characters")
        if len(self.description.strip()) > DESCRIPTION_MAX_LENGTH:
            raise ValidationError(
                f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters"
            )

    def normalized(self) -> "TaskDraft":
        """Trimmed copy; date-only deadlines are pinned to midnight."""
        due = self.due_date
        has_time = self.due_has_time
        if due is None:
            has_time = None
        elif has_time is False:
            due = due.replace(hour=0, minute=0, second=0, microsecond=0)
        elif has_time is None:
            has_time = not _is_midnight(due)
        return TaskDraft(
            title=self.title.strip(),
            description=self.description.strip(),
            due_date=due,
            priority=Priority.parse(self.priority),
            due_has_time=has_time,
        )


def generate_task_id() -> str:
    """Millisecond timestamp plus a random base-36 suffix."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{time.time_ns() // 1_000_000}{suffix}"


def create_task(
    title: str,
    description: str = "",
    due_date: datetime | None = None,
    priority: Priority | str = Priority.MEDIUM,
    due_has_time: bool | None = None,
    now: datetime | None = None,
) -> Task:
    """
    Build a new, open task.

    Trims text but does not reject an empty title; callers validate first.
    """
    if due_date is not None and due_has_time is None:
        due_has_time = not _is_midnight(due_date)
    if due_date is None:
        due_has_time = None
    return Task(
        id=generate_task_id(),
        title=title.strip(),
        description=(description or "").strip(),
        completed=False,
        priority=Priority.parse(priority),
        due_date=due_date,
        due_has_time=due_has_time,
        created_at=now or datetime.now(),
        completed_at=None,
    )


def apply_draft(task: Task, draft: TaskDraft) -> Task:
    """Merge edited fields into a task, keeping identity and completion state."""
    draft = draft.normalized()
    return replace(
        task,
        title=draft.title,
        description=draft.description,
        due_date=draft.due_date,
        due_has_time=draft.due_has_time,
        priority=draft.priority,
        completed_at=task.completed_at if task.completed else None,
    )
