"""Graph Builder: depth, roots, leaves, orphans and the text tree view."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from teamtasks.tasks.model import Task, TaskStatus, TaskSummary
from teamtasks.tasks.queries import enrich_task, get_task_summary, index_tasks, is_blocked, sort_tasks_by_id

ICON_RESOLVED = "✓"
ICON_OPEN = "○"
ICON_BLOCKED = "●"

SUBJECT_WIDTH = 50


@dataclass
class TaskGraph:
    """Presentation-ready dependency view of one task set."""

    nodes: list[dict[str, Any]] = field(default_factory=list)
    roots: list[str] = field(default_factory=list)
    leaves: list[str] = field(default_factory=list)
    orphans: list[str] = field(default_factory=list)
    summary: TaskSummary = field(default_factory=TaskSummary)

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": self.nodes,
            "roots": self.roots,
            "leaves": self.leaves,
            "orphans": self.orphans,
            "summary": self.summary.to_dict(),
        }


# ── depth ────────────────────────────────────────────────────────────

def calculate_depth(task: Task, all_tasks: Sequence[Task]) -> int:
    """Longest chain of resolvable blockers above *task*.

    A branch that revisits an ID already on its own path stops there and
    contributes 0. The path set is copied per branch, so a task shared by
    two independent chains is counted on both.
    """
    return _depth(task, index_tasks(all_tasks), frozenset())


def _depth(task: Task, by_id: dict[str, Task], path: frozenset[str]) -> int:
    if not task.blocked_by:
        return 0
    if task.id in path:
        return 0
    path = path | {task.id}
    best = 0
    for bid in task.blocked_by:
        blocker = by_id.get(bid)
        if blocker is None:
            continue
        best = max(best, _depth(blocker, by_id, path) + 1)
    return best


# ── classification ───────────────────────────────────────────────────

def find_roots(tasks: Sequence[Task]) -> list[str]:
    """IDs of tasks with no ``blocked_by`` entries."""
    return [t.id for t in tasks if not t.blocked_by]


def find_leaves(tasks: Sequence[Task]) -> list[str]:
    """IDs of tasks that block nothing."""
    return [t.id for t in tasks if not t.blocks]


def find_orphans(tasks: Sequence[Task]) -> list[str]:
    """IDs of tasks with at least one ``blocked_by`` ID missing from the set."""
    by_id = index_tasks(tasks)
    return [
        t.id for t in tasks
        if t.blocked_by and any(bid not in by_id for bid in t.blocked_by)
    ]


def build_graph(tasks: Sequence[Task]) -> TaskGraph:
    ordered = sort_tasks_by_id(tasks)
    by_id = index_tasks(ordered)
    nodes = []
    for task in ordered:
        node = enrich_task(task, ordered)
        node["depth"] = _depth(task, by_id, frozenset())
        nodes.append(node)
    return TaskGraph(
        nodes=nodes,
        roots=find_roots(ordered),
        leaves=find_leaves(ordered),
        orphans=find_orphans(ordered),
        summary=get_task_summary(ordered),
    )


# ── text tree ────────────────────────────────────────────────────────

def status_icon(task: Task, all_tasks: Sequence[Task]) -> str:
    if task.status == TaskStatus.RESOLVED:
        return ICON_RESOLVED
    return ICON_BLOCKED if is_blocked(task, all_tasks) else ICON_OPEN


def _tree_lines(
    task: Task,
    all_tasks: Sequence[Task],
    by_id: dict[str, Task],
    depth: int,
    path: frozenset[str],
    reached: set[str],
) -> list[str]:
    indent = "  " * depth
    prefix = "" if depth == 0 else "└─ "
    if task.id in path:
        return [f"{indent}{prefix}#{task.id} (circular ref)"]

    reached.add(task.id)
    path = path | {task.id}
    icon = status_icon(task, all_tasks)
    lines = [f"{indent}{prefix}[{icon}] #{task.id}: {task.subject[:SUBJECT_WIDTH]}"]
    for child_id in task.blocks:
        child = by_id.get(child_id)
        if child is None:
            continue
        lines.extend(_tree_lines(child, all_tasks, by_id, depth + 1, path, reached))
    return lines


def render_tree(tasks: Sequence[Task]) -> tuple[list[list[str]], list[str]]:
    """Expand every root along ``blocks`` edges.

    Returns one block of lines per root and the IDs no root reached.
    A task reachable from two roots is drawn under both.
    """
    ordered = sort_tasks_by_id(tasks)
    by_id = index_tasks(ordered)
    reached: set[str] = set()
    trees = [
        _tree_lines(by_id[root_id], ordered, by_id, 0, frozenset(), reached)
        for root_id in find_roots(ordered)
    ]
    unreached = [t.id for t in ordered if t.id not in reached]
    return trees, unreached
