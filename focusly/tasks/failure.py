"""
Tool: Overdue Sweep
Purpose: Mark tasks whose due date passed without completion as failed

Meant to run periodically (e.g. hourly). A task is marked when:
    1. it has a due date
    2. the due date has passed
    3. it is not completed
    4. it is not already marked as failed

Usage:
    from focusly.tasks.failure import mark_overdue_tasks_as_failed

    newly_failed = mark_overdue_tasks_as_failed(tasks)
    store.save_all(newly_failed)
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from focusly.logging_config import get_logger
from focusly.models import Task, utcnow

logger = get_logger(__name__)


def is_overdue_unfailed(task: Task, now: datetime) -> bool:
    return (
        task.due_date is not None
        and task.due_date < now
        and not task.completed
        and task.failed_at is None
    )


def mark_overdue_tasks_as_failed(tasks: Iterable[Task], now: datetime | None = None) -> list[Task]:
    """
    Return copies of the tasks that become failed, with ``failed_at = now``.

    Tasks that do not qualify are not returned; inputs are not mutated.
    """
    if now is None:
        now = utcnow()

    marked = [task.copy(failed_at=now) for task in tasks if is_overdue_unfailed(task, now)]

    logger.info("overdue_tasks_marked_failed", count=len(marked), at=now)
    return marked


__all__ = ["is_overdue_unfailed", "mark_overdue_tasks_as_failed"]
