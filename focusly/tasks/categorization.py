"""
Tool: Task Categorizer
Purpose: Sort tasks into status buckets and derive completion/failure rates

Buckets are independent views, not a partition: an overdue task that has
also been marked failed shows up in both ``overdue`` and ``failed``.

Cancelled tasks are removed from the rate denominator, so cancelling a task
never lowers the completion rate.

Usage:
    from focusly.tasks.categorization import categorize_tasks, calculate_stats

    buckets = categorize_tasks(tasks)
    stats = calculate_stats(tasks)
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from focusly.models import OPEN_STATUSES, CategorizedTasks, Task, TaskStats, TaskStatus, utcnow


def categorize_tasks(tasks: Iterable[Task], now: datetime | None = None) -> CategorizedTasks:
    """
    Split *tasks* into status buckets.

    Args:
        tasks: Flat task list (use hierarchy.flatten for a tree)
        now: Reference instant for due-date checks; defaults to now (UTC)

    Returns:
        CategorizedTasks holding references to the input tasks
    """
    if now is None:
        now = utcnow()

    result = CategorizedTasks()
    for task in tasks:
        is_open = task.status in OPEN_STATUSES
        is_failed = task.failed_at is not None

        if is_open:
            result.active.append(task)
        if task.status is TaskStatus.IN_PROGRESS and not task.completed and not is_failed:
            result.in_progress.append(task)
        if task.due_date is not None and task.due_date > now and not task.completed and not is_failed:
            result.upcoming.append(task)
        if task.completed:
            result.completed.append(task)
        if is_failed:
            result.failed.append(task)
        if is_open and not task.completed and task.due_date is not None and task.due_date < now:
            result.overdue.append(task)
        if task.status is TaskStatus.POSTPONED:
            result.postponed.append(task)
        if task.status is TaskStatus.CANCELLED:
            result.cancelled.append(task)

    return result


def calculate_stats(tasks: Iterable[Task], now: datetime | None = None) -> TaskStats:
    """
    Count tasks per bucket and compute rates as unrounded percentages.

    Rates are 0.0 when every task is cancelled (or there are none).
    """
    tasks = list(tasks)
    buckets = categorize_tasks(tasks, now=now)

    total = len(tasks)
    cancelled = len(buckets.cancelled)
    active_tasks = total - cancelled

    completion_rate = len(buckets.completed) / active_tasks * 100 if active_tasks > 0 else 0.0
    failure_rate = len(buckets.failed) / active_tasks * 100 if active_tasks > 0 else 0.0

    return TaskStats(
        total=total,
        completed=len(buckets.completed),
        failed=len(buckets.failed),
        overdue=len(buckets.overdue),
        postponed=len(buckets.postponed),
        cancelled=cancelled,
        completion_rate=completion_rate,
        failure_rate=failure_rate,
    )


__all__ = ["calculate_stats", "categorize_tasks"]
