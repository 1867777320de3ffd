"""Task output formatters — tables, detail views and JSON.

Every formatter returns a string; the CLI decides where it is written.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from teamtasks.io_utils import dump_json
from teamtasks.tasks.graph import (
    ICON_BLOCKED,
    ICON_OPEN,
    ICON_RESOLVED,
    build_graph,
    find_orphans,
    render_tree,
    status_icon,
)
from teamtasks.tasks.model import Task, TaskLocation, TaskSummary
from teamtasks.tasks.queries import enrich_task, get_task_summary, index_tasks, is_blocked, sort_tasks_by_id

RULE = "─"
DOUBLE_RULE = "═"
DESCRIPTION_PREVIEW_LINES = 10


@dataclass
class LocationTasks:
    """Tasks selected for one location plus the context they were computed in."""

    location: TaskLocation
    tasks: list[Task]
    all_tasks: list[Task] = field(default_factory=list)
    summary: TaskSummary = field(default_factory=TaskSummary)


def truncate(text: str, max_len: int) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


# ── tables ───────────────────────────────────────────────────────────

def format_task_table(
    tasks: Sequence[Task],
    location: TaskLocation,
    summary: TaskSummary,
    all_tasks: Sequence[Task] | None = None,
) -> str:
    context = all_tasks if all_tasks is not None else tasks
    lines = [
        f"TASKS ({location.variant} / {location.team}) - "
        f"{summary.open} open, {summary.resolved} resolved",
        RULE * 70,
        f"{'ID':<5} {'STATUS':<10} {'SUBJECT':<45} BLOCKED",
        RULE * 70,
    ]
    for task in tasks:
        mark = ICON_BLOCKED if is_blocked(task, context) else ""
        lines.append(
            f"{task.id:<5} {task.status.value:<10} {truncate(task.subject, 45):<45} {mark}".rstrip()
        )
    lines.append(RULE * 70)
    if summary.blocked > 0:
        lines.append(f"{ICON_BLOCKED} = blocked by unresolved tasks")
    return "\n".join(lines)


def format_multi_location_task_table(groups: Sequence[LocationTasks]) -> str:
    sections: list[str] = []
    for group in groups:
        sections.append(format_task_table(group.tasks, group.location, group.summary, group.all_tasks))
        sections.append("")
    return "\n".join(sections)


def format_task_detail(task: Task, location: TaskLocation, all_tasks: Sequence[Task]) -> str:
    lines = [
        f"TASK #{task.id} ({location.variant} / {location.team})",
        DOUBLE_RULE * 60,
        "",
        f"Subject:     {task.subject}",
        f"Status:      {task.status.value}",
        f"Owner:       {task.owner or '(unassigned)'}",
        "",
    ]

    if task.description:
        lines.append("Description:")
        desc_lines = task.description.split("\n")
        lines.extend(f"  {line}" for line in desc_lines[:DESCRIPTION_PREVIEW_LINES])
        if len(desc_lines) > DESCRIPTION_PREVIEW_LINES:
            lines.append(f"  ... ({len(desc_lines) - DESCRIPTION_PREVIEW_LINES} more lines)")
        lines.append("")

    if task.blocked_by or task.blocks:
        by_id = index_tasks(all_tasks)
        lines.append("Dependencies:")
        if task.blocked_by:
            parts = [
                f"#{bid} ({by_id[bid].status.value})" if bid in by_id else f"#{bid} (?)"
                for bid in task.blocked_by
            ]
            lines.append(f"  Blocked by: {', '.join(parts)}")
        if task.blocks:
            lines.append(f"  Blocks:     {', '.join(f'#{bid}' for bid in task.blocks)}")
        lines.append("")

    if task.references:
        lines.append(f"References:  {', '.join(f'#{rid}' for rid in task.references)}")
        lines.append("")

    if task.comments:
        lines.append(f"Comments ({len(task.comments)}):")
        for comment in task.comments:
            lines.append(f"  ┌─ {comment.author} {RULE * max(0, 50 - len(comment.author))}")
            lines.extend(f"  │ {line}" for line in comment.content.split("\n"))
            lines.append("  └" + RULE * 55)

    return "\n".join(lines).rstrip("\n")


# ── JSON ─────────────────────────────────────────────────────────────

def _location_fields(location: TaskLocation) -> dict[str, Any]:
    return {"variant": location.variant, "team": location.team}


def format_tasks_json(
    tasks: Sequence[Task],
    location: TaskLocation,
    summary: TaskSummary,
    all_tasks: Sequence[Task],
) -> str:
    return dump_json({
        **_location_fields(location),
        "tasks": [enrich_task(t, all_tasks) for t in tasks],
        "summary": summary.to_dict(),
    })


def format_task_json(task: Task, location: TaskLocation, all_tasks: Sequence[Task]) -> str:
    return dump_json({**_location_fields(location), "task": enrich_task(task, all_tasks)})


def format_multi_location_json(groups: Sequence[LocationTasks]) -> str:
    return dump_json({
        "locations": [
            {
                **_location_fields(group.location),
                "tasks": [enrich_task(t, group.all_tasks) for t in group.tasks],
                "summary": group.summary.to_dict(),
            }
            for group in groups
        ]
    })


# ── clean ────────────────────────────────────────────────────────────

@dataclass
class CleanResult:
    location: TaskLocation
    deleted: list[str]
    dry_run: bool = False


def format_clean_results(results: Sequence[CleanResult]) -> str:
    lines: list[str] = []
    for result in results:
        action = "Would delete" if result.dry_run else "Deleted"
        lines.append(
            f"{result.location.variant} / {result.location.team}: "
            f"{action} {len(result.deleted)} tasks"
        )
        if 0 < len(result.deleted) <= 10:
            lines.append(f"  IDs: {', '.join(result.deleted)}")
    return "\n".join(lines)


def format_clean_results_json(results: Sequence[CleanResult]) -> str:
    return dump_json({
        "results": [
            {**_location_fields(r.location), "deleted": r.deleted, "dryRun": r.dry_run}
            for r in results
        ]
    })


# ── graph ────────────────────────────────────────────────────────────

def format_task_graph(tasks: Sequence[Task], location: TaskLocation) -> str:
    """Text dependency tree: roots expanded along ``blocks``, then orphans."""
    lines = [
        f"TASK DEPENDENCY GRAPH ({location.variant} / {location.team})",
        DOUBLE_RULE * 60,
        "",
        f"Legend: [{ICON_RESOLVED}] resolved  [{ICON_OPEN}] open  [{ICON_BLOCKED}] blocked",
        "",
    ]

    trees, unreached = render_tree(tasks)
    for tree in trees:
        lines.extend(tree)
        lines.append("")

    by_id = index_tasks(tasks)
    orphan_ids = find_orphans(sort_tasks_by_id(tasks))
    if orphan_ids:
        lines.append(RULE * 40)
        lines.append("Orphan tasks (blockedBy non-existent tasks):")
        for tid in orphan_ids:
            task = by_id[tid]
            missing = [bid for bid in task.blocked_by if bid not in by_id]
            lines.append(f"  [{status_icon(task, tasks)}] #{task.id}: {task.subject[:50]}")
            lines.append(f"      blockedBy: {', '.join(task.blocked_by)} (missing: {', '.join(missing)})")

    cyclic = [tid for tid in unreached if tid not in orphan_ids]
    if cyclic:
        lines.append(RULE * 40)
        lines.append("Unreachable tasks (no root leads here, e.g. dependency cycles):")
        for tid in cyclic:
            task = by_id[tid]
            lines.append(f"  [{status_icon(task, tasks)}] #{task.id}: {task.subject[:50]}")
            lines.append(f"      blockedBy: {', '.join(task.blocked_by)}")

    summary = get_task_summary(tasks)
    lines.append("")
    lines.append(RULE * 60)
    lines.append(
        f"Total: {summary.total} | Open: {summary.open} | "
        f"Ready: {summary.ready} | Blocked: {summary.blocked}"
    )
    return "\n".join(lines)


def format_task_graph_json(tasks: Sequence[Task], location: TaskLocation) -> str:
    return dump_json({**_location_fields(location), **build_graph(tasks).to_dict()})
