"""Exceptions raised by focusly's task operations."""

from __future__ import annotations


class FocuslyError(Exception):
    """Base class for focusly errors."""


class InvalidUpdateError(FocuslyError, ValueError):
    """An update names a field that does not exist or cannot be written."""


class VersionConflictError(FocuslyError):
    """The task was modified since the caller last read it."""

    def __init__(self, task_id: str | None, expected: int, actual: int):
        self.task_id = task_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Task {task_id} was modified by another session "
            f"(expected version {expected}, found {actual})"
        )


__all__ = ["FocuslyError", "InvalidUpdateError", "VersionConflictError"]
