"""Focusly - task, focus-session and streak logic

Philosophy:
    Streaks and task buckets are derived data. They are recomputed from the
    raw sessions and tasks every time instead of being stored and patched.

Components:
    models.py: Task, Session and derived value objects
    stats/streaks.py: Timezone-aware streak calculation
    tasks/categorization.py: Status buckets and completion/failure rates
    tasks/hierarchy.py: Parent/child task forest reconstruction
    tasks/recurrence.py: Next occurrence of recurring tasks
    tasks/failure.py: Overdue-to-failed sweep
    tasks/updates.py: Versioned task updates

Usage:
    from focusly.stats.streaks import calculate_streak
    from focusly.tasks.categorization import calculate_stats
    from focusly.tasks.hierarchy import build_hierarchy, flatten

    streak = calculate_streak(sessions, timezone="Europe/Paris")
    print(streak.current, streak.longest)
"""

from pathlib import Path

__version__ = "0.1.0"

# Path constants
PROJECT_ROOT = Path(__file__).parent.parent
ARGS_DIR = PROJECT_ROOT / "args"

__all__ = [
    "__version__",
    "PROJECT_ROOT",
    "ARGS_DIR",
]
