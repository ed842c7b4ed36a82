"""Tests for focusly/tasks/categorization.py

The categorizer builds overlapping status buckets and the completion and
failure rates shown on the stats page. Cancelled tasks never count against
the user.
"""

from datetime import timedelta

import pytest

from focusly.models import TaskStatus
from focusly.tasks.categorization import calculate_stats, categorize_tasks


def ids(tasks):
    return [task.id for task in tasks]


# ─────────────────────────────────────────────────────────────────────────────
# Bucket Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestCategorizeTasks:
    """Tests for bucket membership."""

    def test_active_includes_todo_and_in_progress(self, make_task, now):
        tasks = [
            make_task("a", status=TaskStatus.TODO),
            make_task("b", status=TaskStatus.IN_PROGRESS),
            make_task("c", status=TaskStatus.DONE),
            make_task("d", status=TaskStatus.POSTPONED),
        ]

        result = categorize_tasks(tasks, now=now)

        assert ids(result.active) == ["a", "b"]

    def test_in_progress_excludes_failed(self, make_task, now):
        tasks = [
            make_task("a", status=TaskStatus.IN_PROGRESS),
            make_task("b", status=TaskStatus.IN_PROGRESS, failed_at=now),
        ]

        result = categorize_tasks(tasks, now=now)

        assert ids(result.in_progress) == ["a"]

    def test_upcoming_requires_future_due_date(self, make_task, now):
        tasks = [
            make_task("future", due_date=now + timedelta(days=1)),
            make_task("past", due_date=now - timedelta(days=1)),
            make_task("undated"),
            make_task("done", due_date=now + timedelta(days=1), status=TaskStatus.DONE),
            make_task("failed", due_date=now + timedelta(days=1), failed_at=now),
        ]

        result = categorize_tasks(tasks, now=now)

        assert ids(result.upcoming) == ["future"]

    def test_due_exactly_now_is_neither_upcoming_nor_overdue(self, make_task, now):
        """Both comparisons are strict."""
        tasks = [make_task("a", due_date=now)]

        result = categorize_tasks(tasks, now=now)

        assert result.upcoming == []
        assert result.overdue == []

    def test_completed_uses_status(self, make_task, now):
        tasks = [make_task("a", status=TaskStatus.DONE), make_task("b")]

        result = categorize_tasks(tasks, now=now)

        assert ids(result.completed) == ["a"]

    def test_legacy_completed_flag_counts_as_completed(self, make_task, now):
        """Setting the legacy flag moves the task to done."""
        task = make_task("a")
        task.completed = True

        result = categorize_tasks([task], now=now)

        assert task.status is TaskStatus.DONE
        assert ids(result.completed) == ["a"]
        assert result.active == []

    def test_failed_regardless_of_status(self, make_task, now):
        tasks = [
            make_task("a", failed_at=now, status=TaskStatus.POSTPONED),
            make_task("b", failed_at=now, status=TaskStatus.TODO),
        ]

        result = categorize_tasks(tasks, now=now)

        assert ids(result.failed) == ["a", "b"]

    def test_overdue_and_failed_are_independent(self, make_task, now):
        """Marking an overdue task failed adds it to failed without removing it from overdue."""
        task = make_task("a", status=TaskStatus.TODO, due_date=now - timedelta(hours=2))

        before = categorize_tasks([task], now=now)
        assert ids(before.overdue) == ["a"]
        assert before.failed == []

        task.failed_at = now
        after = categorize_tasks([task], now=now)
        assert ids(after.overdue) == ["a"]
        assert ids(after.failed) == ["a"]

    def test_overdue_skips_postponed(self, make_task, now):
        tasks = [make_task("a", status=TaskStatus.POSTPONED, due_date=now - timedelta(days=1))]

        result = categorize_tasks(tasks, now=now)

        assert result.overdue == []
        assert ids(result.postponed) == ["a"]

    def test_cancelled_bucket(self, make_task, now):
        tasks = [make_task("a", status=TaskStatus.CANCELLED), make_task("b")]

        result = categorize_tasks(tasks, now=now)

        assert ids(result.cancelled) == ["a"]

    def test_buckets_reference_input_tasks(self, make_task, now):
        """Buckets are views: the same objects, not copies."""
        task = make_task("a")

        result = categorize_tasks([task], now=now)

        assert result.active[0] is task

    def test_to_dict_lists_ids(self, make_task, now):
        result = categorize_tasks([make_task("a", status=TaskStatus.CANCELLED)], now=now)

        data = result.to_dict()

        assert data["cancelled"] == ["a"]
        assert set(data) == {
            "active", "in_progress", "upcoming", "completed",
            "failed", "overdue", "postponed", "cancelled",
        }


# ─────────────────────────────────────────────────────────────────────────────
# Stats Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestCalculateStats:
    """Tests for counts and rates."""

    def test_cancelled_excluded_from_denominator(self, make_task, now):
        """10 tasks, 2 cancelled, 4 completed -> 4 / 8 = 50%."""
        tasks = (
            [make_task(f"done{i}", status=TaskStatus.DONE) for i in range(4)]
            + [make_task(f"cancel{i}", status=TaskStatus.CANCELLED) for i in range(2)]
            + [make_task(f"todo{i}") for i in range(4)]
        )

        stats = calculate_stats(tasks, now=now)

        assert stats.total == 10
        assert stats.completed == 4
        assert stats.cancelled == 2
        assert stats.completion_rate == 50.0

    def test_failure_rate(self, make_task, now):
        tasks = [make_task("a", failed_at=now), make_task("b"), make_task("c")]

        stats = calculate_stats(tasks, now=now)

        assert stats.failed == 1
        assert stats.failure_rate == pytest.approx(100 / 3)

    def test_rates_are_not_rounded(self, make_task, now):
        tasks = [make_task("a", status=TaskStatus.DONE), make_task("b"), make_task("c")]

        stats = calculate_stats(tasks, now=now)

        assert stats.completion_rate == pytest.approx(33.333333, rel=1e-6)
        assert stats.completion_rate != 33.33

    def test_empty_list(self, now):
        stats = calculate_stats([], now=now)

        assert stats.total == 0
        assert stats.completion_rate == 0.0
        assert stats.failure_rate == 0.0

    def test_all_cancelled(self, make_task, now):
        """No active tasks means 0%, not a division error."""
        tasks = [make_task("a", status=TaskStatus.CANCELLED)]

        stats = calculate_stats(tasks, now=now)

        assert stats.completion_rate == 0.0
        assert stats.failure_rate == 0.0

    def test_accepts_generator(self, make_task, now):
        """Tasks are consumed once even if passed as a generator."""
        stats = calculate_stats((make_task(str(i)) for i in range(3)), now=now)

        assert stats.total == 3

    def test_overdue_and_postponed_counts(self, make_task, now):
        tasks = [
            make_task("a", due_date=now - timedelta(days=1)),
            make_task("b", status=TaskStatus.POSTPONED),
        ]

        stats = calculate_stats(tasks, now=now)

        assert stats.overdue == 1
        assert stats.postponed == 1
