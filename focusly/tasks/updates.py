"""
Tool: Task Updates
Purpose: Apply field changes to a task with optimistic locking

Each successful update returns a copy with ``version`` bumped by one. A
caller that read the task at version N passes ``expected_version=N``; if
someone else saved in between, VersionConflictError is raised and the
caller should re-fetch and retry.

Completion bookkeeping:
    - becoming done stamps ``completed_at`` and clears ``failed_at``
    - leaving done clears ``completed_at``
    Explicit values for those fields in the same update win.

Usage:
    from focusly.tasks.updates import apply_update

    task = apply_update(task, {"completed": True}, expected_version=task.version)
"""

from __future__ import annotations

from dataclasses import fields
from datetime import datetime
from typing import Any

from focusly.exceptions import InvalidUpdateError, VersionConflictError
from focusly.logging_config import get_logger
from focusly.models import RecurrenceRule, Task, TaskStatus, parse_instant, utcnow
from focusly.tasks import DISPLAY_FIELDS

logger = get_logger(__name__)

READ_ONLY_FIELDS = frozenset({"id", "version", "created_at", *DISPLAY_FIELDS})
WRITABLE_FIELDS = frozenset({f.name for f in fields(Task)} | {"completed"}) - READ_ONLY_FIELDS

_INSTANT_FIELDS = ("completed_at", "failed_at", "due_date", "start_date")


def apply_update(
    task: Task,
    changes: dict[str, Any],
    expected_version: int | None = None,
    now: datetime | None = None,
) -> Task:
    """
    Return an updated copy of *task*.

    Args:
        task: Current stored task
        changes: Field name -> new value (``completed`` is accepted as an
            alias for the done status)
        expected_version: Version the caller last read; None skips the check
        now: Timestamp used for ``completed_at``; defaults to now (UTC)

    Raises:
        VersionConflictError: *expected_version* differs from ``task.version``
        InvalidUpdateError: a field is unknown or read-only, or a value
            (status, instant, recurrence) cannot be parsed
    """
    if expected_version is not None and expected_version != task.version:
        logger.warning(
            "task_version_conflict",
            task_id=task.id,
            expected=expected_version,
            actual=task.version,
        )
        raise VersionConflictError(task.id, expected_version, task.version)

    unknown = sorted(set(changes) - WRITABLE_FIELDS)
    if unknown:
        raise InvalidUpdateError(f"Cannot update field(s): {', '.join(unknown)}")

    if now is None:
        now = utcnow()

    values = dict(changes)
    completed = values.pop("completed", None)
    try:
        for name in _INSTANT_FIELDS:
            if name in values:
                values[name] = parse_instant(values[name])
        if "status" in values:
            values["status"] = TaskStatus(values["status"])
        if isinstance(values.get("recurrence"), dict):
            values["recurrence"] = RecurrenceRule.from_dict(values["recurrence"])
    except (TypeError, ValueError) as e:
        raise InvalidUpdateError(f"Invalid value for task {task.id}: {e}") from e
    if values.get("tags") is not None:
        values["tags"] = list(values["tags"])

    was_completed = task.completed
    updated = task.copy(**values, version=task.version + 1)
    if completed is not None:
        updated.completed = bool(completed)

    if updated.completed and not was_completed:
        if "completed_at" not in values:
            updated.completed_at = now
        if "failed_at" not in values:
            updated.failed_at = None
    elif was_completed and not updated.completed and "completed_at" not in values:
        updated.completed_at = None

    return updated


__all__ = ["READ_ONLY_FIELDS", "WRITABLE_FIELDS", "apply_update"]
