"""Query Engine: pure predicates, filters, summaries and orderings over tasks.

Nothing here touches the filesystem. Every function takes the task set it
should resolve blocker IDs against; an ID that does not resolve in that set
never blocks.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from teamtasks.errors import InvalidInputError
from teamtasks.tasks.model import STATUS_FILTERS, Task, TaskFilter, TaskStatus, TaskSummary


def index_tasks(tasks: Iterable[Task]) -> dict[str, Task]:
    """Map task ID to task. Later duplicates win."""
    return {t.id: t for t in tasks}


# ── predicates ───────────────────────────────────────────────────────

def get_open_blockers(task: Task, all_tasks: Iterable[Task]) -> list[str]:
    """Return the ``blocked_by`` IDs that resolve to an open task, in order."""
    if not task.blocked_by:
        return []
    by_id = index_tasks(all_tasks)
    return [bid for bid in task.blocked_by if bid in by_id and by_id[bid].is_open]


def is_blocked(task: Task, all_tasks: Iterable[Task]) -> bool:
    """``True`` if at least one blocker resolves to an open task.

    A self-edge counts: an open task listing itself is blocked.
    """
    return bool(get_open_blockers(task, all_tasks))


def is_blocking(task: Task) -> bool:
    return bool(task.blocks)


def is_ready(task: Task, all_tasks: Iterable[Task]) -> bool:
    return task.is_open and not is_blocked(task, all_tasks)


# ── filtering ────────────────────────────────────────────────────────

def filter_tasks(
    tasks: Sequence[Task],
    task_filter: TaskFilter,
    all_tasks: Sequence[Task] | None = None,
) -> list[Task]:
    """Apply the filters set on *task_filter*, in a fixed order.

    Order: status, blocked, blocking, ready, owner, then limit. Blocked and
    ready are evaluated against *all_tasks* (default: *tasks*), never
    against the output of earlier filters.
    """
    context = list(all_tasks if all_tasks is not None else tasks)
    filtered = list(tasks)

    status = task_filter.status
    if status is not None and status not in STATUS_FILTERS:
        raise InvalidInputError(
            f"Invalid status filter {status!r}. Use one of: {', '.join(STATUS_FILTERS)}."
        )
    if status and status != "all":
        filtered = [t for t in filtered if t.status.value == status]

    if task_filter.blocked is not None:
        filtered = [t for t in filtered if is_blocked(t, context) == task_filter.blocked]

    if task_filter.blocking is not None:
        filtered = [t for t in filtered if is_blocking(t) == task_filter.blocking]

    if task_filter.ready is not None:
        if task_filter.ready:
            filtered = [t for t in filtered if is_ready(t, context)]
        else:
            filtered = [
                t for t in filtered
                if t.status == TaskStatus.RESOLVED or is_blocked(t, context)
            ]

    if task_filter.owner:
        filtered = [t for t in filtered if t.owner == task_filter.owner]

    if task_filter.limit is not None and task_filter.limit > 0:
        filtered = filtered[: task_filter.limit]

    return filtered


# ── summaries ────────────────────────────────────────────────────────

def get_task_summary(tasks: Sequence[Task]) -> TaskSummary:
    """Count tasks by status; blocked/ready use *tasks* itself as context."""
    open_tasks = [t for t in tasks if t.is_open]
    blocked = sum(1 for t in open_tasks if is_blocked(t, tasks))
    return TaskSummary(
        total=len(tasks),
        open=len(open_tasks),
        resolved=sum(1 for t in tasks if t.status == TaskStatus.RESOLVED),
        ready=len(open_tasks) - blocked,
        blocked=blocked,
    )


def enrich_task(task: Task, all_tasks: Sequence[Task]) -> dict[str, Any]:
    """Task fields plus ``blocked``, status-annotated ``blockedBy`` and ``openBlockers``."""
    by_id = index_tasks(all_tasks)
    data = task.to_dict()
    data["blocked"] = is_blocked(task, all_tasks)
    data["blockedBy"] = [
        {"id": bid, "status": by_id[bid].status.value if bid in by_id else "unknown"}
        for bid in task.blocked_by
    ]
    data["openBlockers"] = get_open_blockers(task, all_tasks)
    return data


# ── ordering ─────────────────────────────────────────────────────────

def _id_key(task: Task) -> tuple[int, int, str]:
    if task.id.isdigit():
        return (0, int(task.id), "")
    return (1, 0, task.id)


def sort_tasks_by_id(tasks: Iterable[Task]) -> list[Task]:
    """Return a new list ordered by numeric ID (stable; input untouched)."""
    return sorted(tasks, key=_id_key)


def _cycle_groups(ids: Sequence[str], edges: dict[str, list[str]]) -> dict[str, int]:
    """Map each ID to its strongly connected component (iterative Tarjan)."""
    index: dict[str, int] = {}
    low: dict[str, int] = {}
    group: dict[str, int] = {}
    stack: list[str] = []
    on_stack: set[str] = set()

    def visit(node: str) -> None:
        index[node] = low[node] = len(index)
        stack.append(node)
        on_stack.add(node)

    for start in ids:
        if start in index:
            continue
        visit(start)
        work = [(start, iter(edges[start]))]
        while work:
            node, children = work[-1]
            for child in children:
                if child not in index:
                    visit(child)
                    work.append((child, iter(edges[child])))
                    break
                if child in on_stack:
                    low[node] = min(low[node], index[child])
            else:
                work.pop()
                if work:
                    parent = work[-1][0]
                    low[parent] = min(low[parent], low[node])
                if low[node] == index[node]:
                    number = len(set(group.values()))
                    while True:
                        member = stack.pop()
                        on_stack.discard(member)
                        group[member] = number
                        if member == node:
                            break
    return group


def sort_by_dependency(tasks: Sequence[Task]) -> list[Task]:
    """Order tasks so each comes after all of its blockers.

    Blocker IDs missing from *tasks* count as satisfied. Tasks without
    blockers come first, in input order. Each following pass emits the tasks
    whose blockers have all been emitted. What is left sits in or behind a
    cycle: whole cycles are then emitted in residual order, each one only
    after every blocker outside it.
    """
    known = {t.id for t in tasks}
    blockers = {t.id: [bid for bid in t.blocked_by if bid in known] for t in tasks}

    emitted: list[Task] = []
    done: set[str] = set()
    remaining: list[Task] = []

    for task in tasks:
        if blockers[task.id]:
            remaining.append(task)
        else:
            emitted.append(task)
            done.add(task.id)

    for _ in range(len(tasks)):
        if not remaining:
            break
        progressed = False
        still_waiting: list[Task] = []
        for task in remaining:
            if all(bid in done for bid in blockers[task.id]):
                emitted.append(task)
                done.add(task.id)
                progressed = True
            else:
                still_waiting.append(task)
        remaining = still_waiting
        if not progressed:
            break

    if not remaining:
        return emitted

    pending = {t.id for t in remaining}
    group = _cycle_groups(
        [t.id for t in remaining],
        {t.id: [bid for bid in blockers[t.id] if bid in pending] for t in remaining},
    )
    while remaining:
        waiting = {
            group[t.id]
            for t in remaining
            if any(bid not in done and group[bid] != group[t.id] for bid in blockers[t.id])
        }
        still_waiting = []
        for task in remaining:
            if group[task.id] in waiting:
                still_waiting.append(task)
            else:
                emitted.append(task)
                done.add(task.id)
        remaining = still_waiting
    return emitted
