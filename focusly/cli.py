#!/usr/bin/env python3
"""
Focusly Command Line Interface

Main entry point for the `focusly` command. Every command reads a JSON
array of records (a file path, or '-' for stdin) and prints a JSON result:

    {"success": true, "data": {...}}
    {"success": false, "error": "..."}

Usage:
    focusly streak sessions.json --timezone Europe/Paris
    focusly stats tasks.json
    focusly categorize tasks.json --now 2025-01-15T12:00:00Z
    focusly tree tasks.json --progress
    focusly next-occurrence tasks.json --task-id abc123
    focusly mark-failed tasks.json
    focusly --version
"""

import argparse
import json
import sys
from datetime import date
from typing import Any

from focusly import __version__
from focusly.config_models import FocuslyConfig, load_config
from focusly.exceptions import FocuslyError
from focusly.logging_config import get_logger, setup_logging
from focusly.models import Session, Task, parse_instant

logger = get_logger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Input / output helpers
# ─────────────────────────────────────────────────────────────────────────────


def _read_records(source: str) -> list[dict[str, Any]]:
    """Read a JSON array from *source* ('-' for stdin)."""
    if source == "-":
        data = json.load(sys.stdin)
    else:
        with open(source, encoding="utf-8") as f:
            data = json.load(f)

    if not isinstance(data, list):
        raise ValueError("Input must be a JSON array of records")
    return data


def _load_tasks(args, config: FocuslyConfig) -> list[Task]:
    interval = config.tasks.default_recurrence_interval
    return [Task.from_dict(record, default_interval=interval) for record in _read_records(args.input)]


def _emit(result: dict[str, Any]) -> int:
    print(json.dumps(result, indent=2, default=str))
    return 0 if result.get("success") else 1


def _ok(data: Any) -> int:
    return _emit({"success": True, "data": data})


# ─────────────────────────────────────────────────────────────────────────────
# Commands
# ─────────────────────────────────────────────────────────────────────────────


def cmd_streak(args) -> int:
    """Current/longest streak from a sessions export."""
    from focusly.stats.streaks import (
        calculate_streak,
        resolve_timezone,
        streak_needs_reset,
        today_in_timezone,
    )

    config = load_config(args.config)
    tz = resolve_timezone(args.timezone or config.user.timezone)
    today = date.fromisoformat(args.today) if args.today else today_in_timezone(tz)

    sessions = [Session.from_dict(record) for record in _read_records(args.input)]
    streak = calculate_streak(
        sessions,
        timezone=tz,
        today=today,
        include_incomplete=config.streaks.include_incomplete,
    )

    data = streak.to_dict()
    data["timezone"] = getattr(tz, "key", None) or str(tz)
    data["needs_reset"] = streak.current == 0 and streak_needs_reset(
        streak.last_active_date, today, grace_days=config.streaks.grace_days
    )
    return _ok(data)


def cmd_stats(args) -> int:
    """Completion and failure rates."""
    from focusly.tasks.categorization import calculate_stats

    tasks = _load_tasks(args, load_config(args.config))
    return _ok(calculate_stats(tasks, now=parse_instant(args.now)).to_dict())


def cmd_categorize(args) -> int:
    """Task ids per status bucket."""
    from focusly.tasks.categorization import categorize_tasks

    tasks = _load_tasks(args, load_config(args.config))
    return _ok(categorize_tasks(tasks, now=parse_instant(args.now)).to_dict())


def cmd_tree(args) -> int:
    """Nested task forest."""
    from focusly.tasks.hierarchy import build_hierarchy_report, roll_up_progress

    tasks = _load_tasks(args, load_config(args.config))
    report = build_hierarchy_report(tasks)
    if args.progress:
        roll_up_progress(report.roots)

    return _ok(
        {
            "roots": [root.to_dict(include_children=True) for root in report.roots],
            "orphan_ids": report.orphan_ids,
            "cycle_ids": report.cycle_ids,
            "duplicate_ids": report.duplicate_ids,
        }
    )


def cmd_next_occurrence(args) -> int:
    """Next instance of one recurring task."""
    from focusly.stats.streaks import resolve_timezone
    from focusly.tasks.recurrence import generate_next_occurrence, recurrence_label

    config = load_config(args.config)
    tasks = _load_tasks(args, config)
    task = next((t for t in tasks if t.id == args.task_id), None)
    if task is None:
        return _emit({"success": False, "error": f"Task {args.task_id} not found"})

    next_task = generate_next_occurrence(
        task,
        now=parse_instant(args.now),
        timezone=resolve_timezone(args.timezone or config.user.timezone),
    )
    return _ok(
        {
            "label": recurrence_label(task),
            "task": next_task.to_dict() if next_task else None,
        }
    )


def cmd_mark_failed(args) -> int:
    """Tasks the overdue sweep would mark as failed."""
    from focusly.tasks.failure import mark_overdue_tasks_as_failed

    tasks = _load_tasks(args, load_config(args.config))
    marked = mark_overdue_tasks_as_failed(tasks, now=parse_instant(args.now))
    return _ok(
        {
            "marked_count": len(marked),
            "tasks": [task.to_dict() for task in marked],
        }
    )


def cmd_version(args) -> int:
    print(f"focusly {__version__}")
    return 0


# ─────────────────────────────────────────────────────────────────────────────
# Entry point
# ─────────────────────────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="focusly",
        description="Focusly - streaks, task buckets and task trees from JSON exports",
    )
    parser.add_argument(
        "--version", "-V", action="store_true", help="Show version and exit"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Debug logging on stderr"
    )

    # Options shared by every subcommand
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("input", help="JSON file with an array of records, or '-' for stdin")
    common.add_argument(
        "--config", default=None, help="Path to focusly.yaml (default: args/focusly.yaml)"
    )

    now_option = argparse.ArgumentParser(add_help=False)
    now_option.add_argument(
        "--now", default=None, help="Reference instant, ISO-8601 (default: current time)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    streak_parser = subparsers.add_parser(
        "streak", parents=[common], help="Current and longest streak from sessions"
    )
    streak_parser.add_argument(
        "--timezone", default=None, help="IANA timezone (default: configured or system)"
    )
    streak_parser.add_argument(
        "--today", default=None, help="Day the current streak ends on, YYYY-MM-DD"
    )
    streak_parser.set_defaults(func=cmd_streak)

    stats_parser = subparsers.add_parser(
        "stats", parents=[common, now_option], help="Completion and failure rates"
    )
    stats_parser.set_defaults(func=cmd_stats)

    categorize_parser = subparsers.add_parser(
        "categorize", parents=[common, now_option], help="Task ids per status bucket"
    )
    categorize_parser.set_defaults(func=cmd_categorize)

    tree_parser = subparsers.add_parser(
        "tree", parents=[common], help="Nested task forest with orphan/cycle report"
    )
    tree_parser.add_argument(
        "--progress", action="store_true", help="Roll child completion up into parent progress"
    )
    tree_parser.set_defaults(func=cmd_tree)

    next_parser = subparsers.add_parser(
        "next-occurrence", parents=[common, now_option], help="Next instance of a recurring task"
    )
    next_parser.add_argument("--task-id", required=True, help="Recurring task ID")
    next_parser.add_argument(
        "--timezone", default=None, help="IANA timezone of the schedule (default: configured or system)"
    )
    next_parser.set_defaults(func=cmd_next_occurrence)

    failed_parser = subparsers.add_parser(
        "mark-failed", parents=[common, now_option], help="Overdue tasks to mark as failed"
    )
    failed_parser.set_defaults(func=cmd_mark_failed)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(verbose=args.verbose)

    if args.version:
        return cmd_version(args)

    if not args.command:
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except (OSError, ValueError, TypeError, FocuslyError) as e:
        logger.error("command_failed", command=args.command, error=str(e))
        return _emit({"success": False, "error": str(e)})


if __name__ == "__main__":
    sys.exit(main())
