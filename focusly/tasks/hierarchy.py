"""
Tool: Task Hierarchy Builder
Purpose: Rebuild the parent/child task forest from a flat task list

Tasks are stored flat with an optional ``parent_id``. This module turns
that list into trees for display and back again.

Rules:
    - Inputs are never mutated; every node in the result is a copy
    - A task whose parent is not in the list (orphan) becomes a root
    - A parent link that would close a cycle (including a task naming
      itself as parent) is dropped and the task becomes a root
    - Siblings and roots are ordered by ``order`` (stable sort)
    - ``depth`` is computed from the roots down, so input order is irrelevant

Every walk is iterative, so deep or malformed inputs cannot exhaust the
stack.

Usage:
    from focusly.tasks.hierarchy import build_hierarchy, flatten

    roots = build_hierarchy(tasks)
    for task in flatten(roots):
        print("  " * task.depth + task.title)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from focusly.logging_config import get_logger
from focusly.models import Task

logger = get_logger(__name__)


@dataclass
class HierarchyReport:
    """Forest plus the ids that needed special handling while building it."""

    roots: list[Task] = field(default_factory=list)
    orphan_ids: list[str] = field(default_factory=list)
    cycle_ids: list[str] = field(default_factory=list)
    duplicate_ids: list[str] = field(default_factory=list)


def _order_key(task: Task) -> int:
    return task.order or 0


def _closes_cycle(task_id: str, parent_id: str, parent_of: dict[str, str]) -> bool:
    """True if *task_id* is *parent_id* or one of its accepted ancestors."""
    seen: set[str] = set()
    current: str | None = parent_id
    while current is not None:
        if current == task_id or current in seen:
            return True
        seen.add(current)
        current = parent_of.get(current)
    return False


def build_hierarchy_report(tasks: Iterable[Task]) -> HierarchyReport:
    """
    Build the task forest and report orphans, cycles and duplicate ids.

    Parent links are accepted in input order; a link is rejected only when
    it would make a task its own ancestor. When an id appears twice, the
    last occurrence wins.
    """
    report = HierarchyReport()

    arena: dict[str, Task] = {}
    for task in tasks:
        if task.id in arena:
            report.duplicate_ids.append(task.id)
            logger.warning("duplicate_task_id", task_id=task.id)
        arena[task.id] = task.copy(children=[], depth=0, has_children=False)

    parent_of: dict[str, str] = {}
    for task_id, node in arena.items():
        parent_id = node.parent_id
        if not parent_id:
            report.roots.append(node)
        elif parent_id not in arena:
            report.orphan_ids.append(task_id)
            logger.info("orphan_task_promoted", task_id=task_id, parent_id=parent_id)
            report.roots.append(node)
        elif _closes_cycle(task_id, parent_id, parent_of):
            report.cycle_ids.append(task_id)
            logger.warning("task_cycle_detected", task_id=task_id, parent_id=parent_id)
            report.roots.append(node)
        else:
            parent_of[task_id] = parent_id

    for task_id, parent_id in parent_of.items():
        parent = arena[parent_id]
        parent.children.append(arena[task_id])
        parent.has_children = True

    report.roots.sort(key=_order_key)
    stack = list(report.roots)
    while stack:
        node = stack.pop()
        node.children.sort(key=_order_key)
        for child in node.children:
            child.depth = node.depth + 1
            stack.append(child)

    return report


def build_hierarchy(tasks: Iterable[Task]) -> list[Task]:
    """Return the root tasks, each with ``children``, ``depth`` and ``has_children`` filled."""
    return build_hierarchy_report(tasks).roots


def flatten(roots: Iterable[Task]) -> list[Task]:
    """Pre-order walk: every node once, parents before their children."""
    result: list[Task] = []
    seen: set[int] = set()
    stack = list(reversed(list(roots)))
    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        result.append(node)
        stack.extend(reversed(node.children))
    return result


def find_task(roots: Iterable[Task], task_id: str) -> Task | None:
    return next((task for task in flatten(roots) if task.id == task_id), None)


# ─────────────────────────────────────────────────────────────────────────────
# Tree operations
# ─────────────────────────────────────────────────────────────────────────────


def calculate_progress(task: Task) -> int:
    """
    Percentage of direct children that are done (integer division).

    A task without children keeps its stored progress.
    """
    if not task.children:
        return task.progress
    done = sum(1 for child in task.children if child.completed)
    return done * 100 // len(task.children)


def roll_up_progress(roots: list[Task]) -> list[Task]:
    """Write ``calculate_progress`` into every parent, children first. Mutates *roots*."""
    for node in reversed(flatten(roots)):
        if node.children:
            node.progress = calculate_progress(node)
    return roots


def remove_subtree(roots: Iterable[Task], task_id: str) -> list[Task]:
    """
    Return a copy of the forest without *task_id* and all of its descendants.

    The input trees are left untouched.
    """
    visited: set[int] = set()

    def _copy(node: Task) -> Task:
        visited.add(id(node))
        return node.copy()

    new_roots = [_copy(root) for root in roots if root.id != task_id]
    stack = list(new_roots)
    while stack:
        node = stack.pop()
        kept = []
        for child in node.children:
            if child.id == task_id or id(child) in visited:
                continue
            child_copy = _copy(child)
            kept.append(child_copy)
            stack.append(child_copy)
        node.children = kept
        node.has_children = bool(kept)

    return new_roots


def reorder_tasks(tasks: Iterable[Task], start_index: int, end_index: int) -> list[Task]:
    """
    Move one task within the ``order``-sorted list and renumber 0..n-1.

    Returns copies; rebuild the hierarchy from the result to display it.

    Raises:
        IndexError: if *start_index* is out of range
    """
    ordered = sorted(tasks, key=_order_key)
    if not 0 <= start_index < len(ordered):
        raise IndexError(f"start_index {start_index} out of range for {len(ordered)} tasks")

    moved = ordered.pop(start_index)
    ordered.insert(end_index, moved)
    return [task.copy(order=index) for index, task in enumerate(ordered)]


__all__ = [
    "HierarchyReport",
    "build_hierarchy",
    "build_hierarchy_report",
    "calculate_progress",
    "find_task",
    "flatten",
    "remove_subtree",
    "reorder_tasks",
    "roll_up_progress",
]
