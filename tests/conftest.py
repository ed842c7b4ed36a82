"""Shared test fixtures for Focusly tests.

This module provides common fixtures used across all test modules:
- A fixed reference instant so due-date checks are deterministic
- Factories for tasks and sessions
- Temporary config files

Usage:
    def test_something(make_task, now):
        task = make_task("t1", due_date=now - timedelta(days=1))
        ...
"""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from focusly.models import Session, Task


# ─────────────────────────────────────────────────────────────────────────────
# Path Constants
# ─────────────────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).parent.parent
PACKAGE_DIR = PROJECT_ROOT / "focusly"


# ─────────────────────────────────────────────────────────────────────────────
# Time Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def now() -> datetime:
    """Fixed reference instant: 2025-06-15 12:00 UTC (a Sunday)."""
    return datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


# ─────────────────────────────────────────────────────────────────────────────
# User Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def mock_user_id() -> str:
    """Standard test user ID."""
    return "test_user_123"


# ─────────────────────────────────────────────────────────────────────────────
# Task Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def make_task(now: datetime) -> Callable[..., Task]:
    """Factory for tasks created an hour before ``now``.

    Usage:
        make_task("a", parent_id="root", order=2)
    """

    def _make(task_id: str, title: str | None = None, **fields) -> Task:
        fields.setdefault("created_at", now - timedelta(hours=1))
        return Task(id=task_id, title=title or f"Task {task_id}", **fields)

    return _make


@pytest.fixture
def sample_task_rows() -> list[dict]:
    """Database-style task rows, as exported by the app.

    Returns:
        list of dicts with snake_case columns and ISO timestamps
    """
    return [
        {
            "id": "t1",
            "title": "Write report",
            "status": "in-progress",
            "created_at": "2025-06-10T09:00:00Z",
            "due_date": "2025-06-20T17:00:00Z",
            "order": 1,
        },
        {
            "id": "t2",
            "title": "Outline",
            "completed": True,
            "created_at": "2025-06-10T09:05:00Z",
            "completed_at": "2025-06-11T10:00:00Z",
            "parent_id": "t1",
            "order": 0,
        },
        {
            "id": "t3",
            "title": "Pay invoice",
            "status": "todo",
            "created_at": 1749546000000,
            "due_date": "2025-06-14T12:00:00+00:00",
            "order": 0,
        },
        {
            "id": "t4",
            "title": "Old idea",
            "status": "cancelled",
            "created_at": "2025-06-01T08:00:00Z",
            "order": 2,
        },
    ]


# ─────────────────────────────────────────────────────────────────────────────
# Session Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def make_session(mock_user_id: str) -> Callable[..., Session]:
    """Factory for 25-minute work sessions completed at a given instant."""
    counter = {"n": 0}

    def _make(completed_at: datetime, completed: bool = True) -> Session:
        counter["n"] += 1
        return Session(
            id=f"s{counter['n']}",
            user_id=mock_user_id,
            completed_at=completed_at,
            duration=25 * 60,
            type="work",
            completed=completed,
        )

    return _make


# ─────────────────────────────────────────────────────────────────────────────
# Config Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def config_file(tmp_path: Path) -> Callable[[str], Path]:
    """Write a focusly.yaml with the given content into a temp directory."""

    def _write(content: str) -> Path:
        path = tmp_path / "focusly.yaml"
        path.write_text(content)
        return path

    return _write
