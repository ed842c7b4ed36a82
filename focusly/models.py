"""
Focusly Models
Purpose: Data structures for tasks, focus sessions and derived statistics

Tasks and sessions arrive as plain dicts (database rows or JSON exports)
and are turned into dataclasses with ``from_dict``. Instants are always
timezone-aware; stored rows carry them either as ISO strings or as
epoch milliseconds, and naive values are read as UTC.

Usage:
    from focusly.models import (
        Session,
        Task,
        TaskStatus,
        RecurrenceRule,
        StreakData,
        TaskStats,
        CategorizedTasks,
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any


class TaskStatus(str, Enum):
    """Task lifecycle status. ``DONE`` is the canonical completion flag."""

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"
    POSTPONED = "postponed"
    CANCELLED = "cancelled"


OPEN_STATUSES = (TaskStatus.TODO, TaskStatus.IN_PROGRESS)


class RecurrencePattern(str, Enum):
    """How a recurring task repeats."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_instant(value: Any) -> datetime | None:
    """
    Parse a stored instant into a timezone-aware datetime.

    Accepts ``datetime``/``date`` objects, ISO-8601 strings (a trailing
    ``Z`` is allowed) and epoch milliseconds. Naive values are read as UTC.

    Raises:
        TypeError: for unsupported value types
        ValueError: for strings that are not ISO-8601
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, bool):
        raise TypeError(f"Unsupported instant: {value!r}")
    elif isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    else:
        raise TypeError(f"Unsupported instant: {value!r}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_instant(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


# ─────────────────────────────────────────────────────────────────────────────
# Sessions
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Session:
    """A finished (or abandoned) Pomodoro session. Never mutated."""

    id: str
    user_id: str
    completed_at: datetime
    duration: int = 0  # seconds
    type: str | None = None  # 'work', 'break'
    completed: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "completed_at": format_instant(self.completed_at),
            "duration": self.duration,
            "type": self.type,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Session:
        return cls(
            id=str(data.get("id", "")),
            user_id=str(data.get("user_id", "")),
            completed_at=parse_instant(data.get("completed_at")),
            duration=int(data.get("duration") or 0),
            type=data.get("type"),
            completed=bool(data.get("completed", True)),
        )


# ─────────────────────────────────────────────────────────────────────────────
# Tasks
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class RecurrenceRule:
    """
    Recurrence descriptor of a task.

    ``days_of_week`` uses the stored convention 0=Sunday ... 6=Saturday and
    only matters for the ``custom`` pattern.
    """

    pattern: RecurrencePattern = RecurrencePattern.DAILY
    interval: int = 1
    days_of_week: list[int] = field(default_factory=list)
    end_date: datetime | None = None

    def __post_init__(self) -> None:
        self.pattern = RecurrencePattern(self.pattern)
        if self.interval < 1:
            raise ValueError(f"Recurrence interval must be >= 1, got {self.interval}")
        invalid = [d for d in self.days_of_week if not 0 <= d <= 6]
        if invalid:
            raise ValueError(f"Invalid days of week: {invalid}. Must be 0 (Sunday) to 6 (Saturday)")

    def to_dict(self) -> dict[str, Any]:
        return {
            "pattern": self.pattern.value,
            "interval": self.interval,
            "days_of_week": list(self.days_of_week),
            "end_date": format_instant(self.end_date),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], default_interval: int = 1) -> RecurrenceRule:
        return cls(
            pattern=data.get("pattern") or RecurrencePattern.DAILY,
            interval=int(data.get("interval") or default_interval),
            days_of_week=[int(d) for d in data.get("days_of_week") or []],
            end_date=parse_instant(data.get("end_date")),
        )


@dataclass
class Task:
    """
    A task, optionally part of a parent/child forest.

    ``status`` is the single source of truth for completion; ``completed``
    is a read/write alias kept for records written by older clients.
    """

    id: str | None
    title: str
    status: TaskStatus = TaskStatus.TODO
    created_at: datetime = field(default_factory=utcnow)
    completed_at: datetime | None = None
    failed_at: datetime | None = None  # set when the due date passed uncompleted

    # Scheduling
    due_date: datetime | None = None
    start_date: datetime | None = None
    start_time: str | None = None  # "HH:MM"
    end_time: str | None = None  # "HH:MM"
    estimated_duration: int | None = None  # minutes

    # Hierarchy
    parent_id: str | None = None
    progress: int = 0  # 0-100
    order: int = 0

    # Recurrence
    recurrence: RecurrenceRule | None = None
    parent_recurring_task_id: str | None = None

    # Optimistic locking
    version: int = 1

    priority: str | None = None  # 'low', 'medium', 'high'
    tags: list[str] = field(default_factory=list)
    notes: str | None = None
    pomodoro_count: int = 0

    # Display fields, filled by focusly.tasks.hierarchy
    children: list[Task] = field(default_factory=list, repr=False, compare=False)
    depth: int = field(default=0, compare=False)
    has_children: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        self.status = TaskStatus(self.status)

    @property
    def completed(self) -> bool:
        return self.status is TaskStatus.DONE

    @completed.setter
    def completed(self, value: bool) -> None:
        if value:
            self.status = TaskStatus.DONE
        elif self.status is TaskStatus.DONE:
            self.status = TaskStatus.TODO

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not None

    def copy(self, **changes: Any) -> Task:
        """
        Copy with *changes* applied.

        ``tags``, ``children`` and the recurrence rule are duplicated, so
        editing the copy never reaches back into this task.
        """
        changes.setdefault("tags", list(self.tags))
        changes.setdefault("children", list(self.children))
        if "recurrence" not in changes and self.recurrence is not None:
            changes["recurrence"] = replace(
                self.recurrence, days_of_week=list(self.recurrence.days_of_week)
            )
        return replace(self, **changes)

    def to_dict(self, include_children: bool = False) -> dict[str, Any]:
        """Convert to dict for storage or JSON output."""
        data = {
            "id": self.id,
            "title": self.title,
            "status": self.status.value,
            "completed": self.completed,
            "created_at": format_instant(self.created_at),
            "completed_at": format_instant(self.completed_at),
            "failed_at": format_instant(self.failed_at),
            "due_date": format_instant(self.due_date),
            "start_date": format_instant(self.start_date),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "estimated_duration": self.estimated_duration,
            "parent_id": self.parent_id,
            "progress": self.progress,
            "order": self.order,
            "recurrence": self.recurrence.to_dict() if self.recurrence else None,
            "parent_recurring_task_id": self.parent_recurring_task_id,
            "version": self.version,
            "priority": self.priority,
            "tags": list(self.tags),
            "notes": self.notes,
            "pomodoro_count": self.pomodoro_count,
        }
        if include_children:
            data["depth"] = self.depth
            data["has_children"] = self.has_children
            data["children"] = [child.to_dict(include_children=True) for child in self.children]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any], default_interval: int = 1) -> Task:
        """
        Create from a dict, ignoring keys that are not task fields.

        Understands the legacy ``completed`` flag and the flat recurrence
        columns (``is_recurring``, ``recurrence_pattern``, ...) used by
        database rows.
        """
        kwargs = {k: v for k, v in data.items() if k in _TASK_FIELDS}
        kwargs.setdefault("id", None)
        kwargs["title"] = kwargs.get("title") or ""

        for name in _TASK_INSTANT_FIELDS:
            if name in kwargs:
                kwargs[name] = parse_instant(kwargs[name])
        if kwargs.get("created_at") is None:
            kwargs.pop("created_at", None)

        if kwargs.get("status") is None:
            kwargs.pop("status", None)
        for name in ("progress", "order", "version", "pomodoro_count"):
            if kwargs.get(name) is None:
                kwargs.pop(name, None)
        if kwargs.get("tags") is None:
            kwargs.pop("tags", None)

        recurrence = kwargs.pop("recurrence", None)
        if isinstance(recurrence, dict):
            kwargs["recurrence"] = RecurrenceRule.from_dict(recurrence, default_interval)
        elif isinstance(recurrence, RecurrenceRule):
            kwargs["recurrence"] = recurrence
        elif data.get("is_recurring") or data.get("recurrence_pattern"):
            kwargs["recurrence"] = RecurrenceRule.from_dict(
                {
                    "pattern": data.get("recurrence_pattern"),
                    "interval": data.get("recurrence_interval"),
                    "days_of_week": data.get("recurrence_days_of_week"),
                    "end_date": data.get("recurrence_end_date"),
                },
                default_interval,
            )

        children = kwargs.pop("children", None) or []
        kwargs.pop("depth", None)
        kwargs.pop("has_children", None)

        task = cls(**kwargs)
        if data.get("completed"):
            task.completed = True
        if children:
            task.children = [
                c if isinstance(c, Task) else cls.from_dict(c, default_interval) for c in children
            ]
            task.has_children = True
        return task


_TASK_FIELDS = frozenset(f.name for f in fields(Task))
_TASK_INSTANT_FIELDS = ("created_at", "completed_at", "failed_at", "due_date", "start_date")


# ─────────────────────────────────────────────────────────────────────────────
# Derived values
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class StreakData:
    """Current and longest run of active calendar days."""

    current: int = 0
    longest: int = 0
    last_active_date: date | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "current": self.current,
            "longest": self.longest,
            "last_active_date": self.last_active_date.isoformat() if self.last_active_date else None,
        }


@dataclass
class CategorizedTasks:
    """Status buckets over one task collection. Buckets may overlap."""

    active: list[Task] = field(default_factory=list)
    in_progress: list[Task] = field(default_factory=list)
    upcoming: list[Task] = field(default_factory=list)
    completed: list[Task] = field(default_factory=list)
    failed: list[Task] = field(default_factory=list)
    overdue: list[Task] = field(default_factory=list)
    postponed: list[Task] = field(default_factory=list)
    cancelled: list[Task] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[str | None]]:
        """Bucket name -> task ids."""
        return {
            f.name: [task.id for task in getattr(self, f.name)]
            for f in fields(self)
        }


@dataclass
class TaskStats:
    """Counts and unrounded percentage rates for a task collection."""

    total: int = 0
    completed: int = 0
    failed: int = 0
    overdue: int = 0
    postponed: int = 0
    cancelled: int = 0
    completion_rate: float = 0.0
    failure_rate: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


__all__ = [
    "CategorizedTasks",
    "OPEN_STATUSES",
    "RecurrencePattern",
    "RecurrenceRule",
    "Session",
    "StreakData",
    "Task",
    "TaskStats",
    "TaskStatus",
    "format_instant",
    "parse_instant",
    "utcnow",
]
