"""
Tool: Recurring Tasks
Purpose: Derive the next instance of a recurring task

When a recurring task is completed, the caller asks for the next occurrence
and stores it as a new task. The new instance points back at the task it
was generated from through ``parent_recurring_task_id``.

Date arithmetic:
    daily    base + interval days
    weekly   base + 7 * interval days
    monthly  base + interval months, day clamped to the month's last day
    custom   next day (within a week) whose weekday is in days_of_week,
             or base + interval days when no weekdays are set

The base date is the task's due date, else its start date, else now.
Stored instants are UTC, so the base is first moved into the user's
timezone: weekdays are the user's weekdays and a daily task keeps its
wall-clock time across a DST change. Results are returned in the zone the
base date was stored in.

Usage:
    from focusly.tasks.recurrence import should_generate_next, generate_next_occurrence

    if should_generate_next(task):
        new_task = generate_next_occurrence(task, timezone="Europe/Paris")
"""

from __future__ import annotations

import calendar
from datetime import datetime, timedelta, timezone as dt_timezone, tzinfo

from focusly.models import RecurrencePattern, RecurrenceRule, Task, TaskStatus, utcnow
from focusly.stats.streaks import get_user_timezone, resolve_timezone

ONE_DAY = timedelta(days=1)


def _add_months(value: datetime, months: int) -> datetime:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def _stored_weekday(value: datetime) -> int:
    """Weekday in the stored convention: 0=Sunday ... 6=Saturday."""
    return value.isoweekday() % 7


def next_occurrence_date(rule: RecurrenceRule, base: datetime) -> datetime:
    """
    Date of the occurrence following *base* under *rule*.

    Arithmetic is wall-clock in the zone *base* carries; convert *base*
    into the user's timezone first.
    """
    if rule.pattern is RecurrencePattern.DAILY:
        return base + timedelta(days=rule.interval)
    if rule.pattern is RecurrencePattern.WEEKLY:
        return base + timedelta(weeks=rule.interval)
    if rule.pattern is RecurrencePattern.MONTHLY:
        return _add_months(base, rule.interval)

    if not rule.days_of_week:
        return base + timedelta(days=rule.interval)

    candidate = base + ONE_DAY
    for _ in range(7):
        if _stored_weekday(candidate) in rule.days_of_week:
            break
        candidate += ONE_DAY
    return candidate


def generate_next_occurrence(
    task: Task,
    now: datetime | None = None,
    timezone: str | tzinfo | None = None,
) -> Task | None:
    """
    Build the next instance of a recurring task.

    Args:
        task: The (usually just completed) recurring task
        now: Reference instant; used as base date for undated tasks
        timezone: IANA name or tzinfo the schedule is kept in; defaults to
            the user's preference

    Returns:
        A new, unsaved Task (``id`` is None), or None when the task does not
        recur or the next date falls after the recurrence end date
    """
    rule = task.recurrence
    if rule is None:
        return None

    if now is None:
        now = utcnow()
    tz = resolve_timezone(timezone) if timezone is not None else get_user_timezone()

    base = task.due_date or task.start_date or now
    stored_tz = base.tzinfo or dt_timezone.utc
    local_base = base.replace(tzinfo=stored_tz).astimezone(tz)
    next_date = next_occurrence_date(rule, local_base).astimezone(stored_tz)

    if rule.end_date is not None and next_date > rule.end_date:
        return None

    return task.copy(
        id=None,
        parent_recurring_task_id=task.id,
        status=TaskStatus.TODO,
        created_at=now,
        completed_at=None,
        failed_at=None,
        due_date=next_date if task.due_date else None,
        start_date=next_date if task.start_date else None,
        progress=0,
        pomodoro_count=0,
        version=1,
        children=[],
        depth=0,
        has_children=False,
    )


def should_generate_next(task: Task, now: datetime | None = None) -> bool:
    """True for a completed recurring task whose recurrence has not ended."""
    if task.recurrence is None or not task.completed:
        return False

    end_date = task.recurrence.end_date
    if end_date is not None:
        if now is None:
            now = utcnow()
        if now > end_date:
            return False

    return True


def recurrence_label(task: Task) -> str | None:
    """Human-readable recurrence, e.g. "Weekly" or "Every 3 days"."""
    rule = task.recurrence
    if rule is None:
        return None

    interval = rule.interval
    labels = {
        RecurrencePattern.DAILY: "Daily" if interval == 1 else f"Every {interval} days",
        RecurrencePattern.WEEKLY: "Weekly" if interval == 1 else f"Every {interval} weeks",
        RecurrencePattern.MONTHLY: "Monthly" if interval == 1 else f"Every {interval} months",
        RecurrencePattern.CUSTOM: "Custom schedule",
    }
    return labels.get(rule.pattern)


__all__ = [
    "generate_next_occurrence",
    "next_occurrence_date",
    "recurrence_label",
    "should_generate_next",
]
