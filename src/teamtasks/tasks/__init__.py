"""Task core: store, context resolution, queries and dependency graph."""

from teamtasks.tasks.graph import (
    TaskGraph,
    build_graph,
    calculate_depth,
    find_leaves,
    find_orphans,
    find_roots,
    render_tree,
)
from teamtasks.tasks.model import Task, TaskComment, TaskFilter, TaskLocation, TaskStatus, TaskSummary
from teamtasks.tasks.queries import (
    enrich_task,
    filter_tasks,
    get_open_blockers,
    get_task_summary,
    is_blocked,
    is_blocking,
    is_ready,
    sort_by_dependency,
    sort_tasks_by_id,
)
from teamtasks.tasks.resolve import list_variants_with_tasks, resolve_context
from teamtasks.tasks.store import (
    create_task,
    delete_task,
    get_next_task_id,
    get_tasks_dir,
    list_task_ids,
    list_teams,
    load_all_tasks,
    load_task,
    save_task,
)

__all__ = [
    "Task",
    "TaskComment",
    "TaskFilter",
    "TaskGraph",
    "TaskLocation",
    "TaskStatus",
    "TaskSummary",
    "build_graph",
    "calculate_depth",
    "create_task",
    "delete_task",
    "enrich_task",
    "filter_tasks",
    "find_leaves",
    "find_orphans",
    "find_roots",
    "get_next_task_id",
    "get_open_blockers",
    "get_task_summary",
    "get_tasks_dir",
    "is_blocked",
    "is_blocking",
    "is_ready",
    "list_task_ids",
    "list_teams",
    "list_variants_with_tasks",
    "load_all_tasks",
    "load_task",
    "render_tree",
    "resolve_context",
    "save_task",
    "sort_by_dependency",
    "sort_tasks_by_id",
]
