"""Task Engine - derived views over a user's task list

Every function here is a pure transformation: tasks come in already
fetched, results go out as new objects, and nothing is written back.
Persisting the results (and retrying on a version conflict) is the
caller's job.

Components:
    categorization.py: Status buckets and completion/failure rates
    hierarchy.py: Rebuild the parent/child forest from a flat list
    recurrence.py: Next occurrence of a recurring task
    failure.py: Mark overdue tasks as failed
    updates.py: Apply field changes with optimistic locking

Usage:
    from focusly.tasks.hierarchy import build_hierarchy, flatten
    from focusly.tasks.categorization import calculate_stats

    roots = build_hierarchy(tasks)
    stats = calculate_stats(flatten(roots))
    print(f"{stats.completion_rate:.0f}% done")
"""

# Fields only the hierarchy builder may set
DISPLAY_FIELDS = ("children", "depth", "has_children")

__all__ = ["DISPLAY_FIELDS"]
