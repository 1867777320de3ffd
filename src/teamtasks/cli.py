"""teamtasks CLI — list, inspect and edit tasks across variants and teams.

Installed as ``teamtasks`` console_script via pipx / pip.
"""

from __future__ import annotations

import sys
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from teamtasks import __version__
from teamtasks import log as tlog
from teamtasks.config import Config
from teamtasks.errors import InvalidInputError
from teamtasks.output import (
    CleanResult,
    LocationTasks,
    format_clean_results,
    format_clean_results_json,
    format_multi_location_json,
    format_multi_location_task_table,
    format_task_detail,
    format_task_graph,
    format_task_graph_json,
    format_task_json,
    format_task_table,
    format_tasks_json,
)
from teamtasks.tasks.model import Task, TaskComment, TaskFilter, TaskLocation, TaskStatus
from teamtasks.tasks.queries import filter_tasks, get_task_summary, sort_tasks_by_id
from teamtasks.tasks.resolve import resolve_context
from teamtasks.tasks.store import (
    create_task,
    delete_task,
    get_task_mtime,
    load_all_tasks,
    load_task,
    save_task,
    validate_task_ids,
)


# ── Custom Click group that handles short aliases ────────────────────

class TasksGroup(click.Group):
    """Resolve ``ls``/``rm``/``new``/``edit`` to their canonical commands."""

    _ALIASES: dict[str, str] = {
        "ls": "list",
        "rm": "delete",
        "new": "create",
        "edit": "update",
        "tree": "graph",
    }

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        return super().get_command(ctx, self._ALIASES.get(cmd_name, cmd_name))


CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


def _location_options(multi: bool = False) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Attach ``--variant``/``--team`` (and the ``--all-*`` flags when *multi*)."""

    def decorate(f: Callable[..., Any]) -> Callable[..., Any]:
        if multi:
            f = click.option("--all-teams", is_flag=True, help="Every team of each variant")(f)
            f = click.option("--all-variants", is_flag=True, help="Every variant with task storage")(f)
        f = click.option("--team", "-t", default="", help="Team name (default: detected)")(f)
        f = click.option("--variant", "-V", default="", help="Variant name")(f)
        return f

    return decorate


def _config(ctx: click.Context, variant: str, team: str) -> Config:
    base: Config = ctx.obj
    return Config(
        root_dir=base.root_dir,
        variant=variant or base.variant,
        team=team or base.team,
        verbose=base.verbose,
    )


def _resolve(
    cfg: Config, *, all_variants: bool = False, all_teams: bool = False
) -> list[TaskLocation]:
    try:
        return resolve_context(
            cfg.root_dir,
            variant=cfg.variant or None,
            team=cfg.team or None,
            all_variants=all_variants,
            all_teams=all_teams,
        )
    except InvalidInputError as exc:
        raise click.UsageError(str(exc)) from None


def _tri_state(on: bool, off: bool, name: str) -> bool | None:
    if on and off:
        raise click.UsageError(f"--{name} and --not-{name} are mutually exclusive.")
    if on:
        return True
    if off:
        return False
    return None


def _load(location: TaskLocation) -> list[Task]:
    skipped: list[Path] = []
    tasks = load_all_tasks(location.tasks_dir, skipped=skipped)
    if skipped:
        tlog.warn(
            f"Skipped {len(skipped)} malformed task record(s) in "
            f"{location.variant} / {location.team}"
        )
        for path in skipped:
            tlog.debug(f"  {path}")
    return tasks


def _find_task(locations: list[TaskLocation], task_id: str) -> tuple[TaskLocation, Task] | None:
    for location in locations:
        task = load_task(location.tasks_dir, task_id)
        if task is not None:
            return location, task
    return None


def _save_or_exit(location: TaskLocation, task: Task) -> None:
    try:
        save_task(location.tasks_dir, task)
    except OSError as exc:
        tlog.error(f"Could not write task #{task.id}: {tlog.escape(str(exc))}")
        sys.exit(1)


def _no_locations(json_output: bool = False) -> None:
    msg = "No task locations found. Check variant and team settings."
    if json_output:
        tlog.error(msg)
    else:
        click.echo(msg)


@click.group(cls=TasksGroup, context_settings=CONTEXT_SETTINGS)
@click.option("--root", "root_dir", default="", envvar="TEAMTASKS_ROOT", help="Root directory holding the variants")
@click.option("--variant", "-V", default="", help="Default variant for every command")
@click.option("--team", "-t", default="", help="Default team for every command")
@click.option("-v", "--verbose", is_flag=True, help="Show debug output")
@click.version_option(__version__, prog_name="teamtasks")
@click.pass_context
def main(ctx: click.Context, root_dir: str, variant: str, team: str, verbose: bool) -> None:
    """teamtasks — Task dependency tracker for variants and teams.

    Tasks live as one JSON file per task under
    <root>/<variant>/config/tasks/<team>/.

    \b
    EXAMPLES:
      teamtasks list -V work                       # Open tasks of the current team
      teamtasks list --all-variants --all-teams    # Everything, everywhere
      teamtasks create -V work "Wire up auth" --blocked-by 3
      teamtasks update -V work 4 --status resolved
      teamtasks graph -V work --json
    """
    tlog.set_verbose(verbose or tlog.is_verbose())
    ctx.obj = Config(root_dir=root_dir, variant=variant, team=team, verbose=verbose)


# ── list ─────────────────────────────────────────────────────────────


@main.command("list")
@_location_options(multi=True)
@click.option("--status", type=click.Choice(["open", "resolved", "all"]), default="open", show_default=True)
@click.option("--blocked", is_flag=True, help="Only tasks with an open blocker")
@click.option("--not-blocked", is_flag=True, help="Only tasks without an open blocker")
@click.option("--blocking", is_flag=True, help="Only tasks that block others")
@click.option("--not-blocking", is_flag=True, help="Only tasks that block nothing")
@click.option("--ready", is_flag=True, help="Only open, unblocked tasks")
@click.option("--not-ready", is_flag=True, help="Only resolved or blocked tasks")
@click.option("--owner", default="", help="Only tasks owned by this owner")
@click.option("--limit", type=click.IntRange(min=0), default=0, help="Max tasks per location (0=unlimited)")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON")
@click.pass_context
def list_cmd(
    ctx: click.Context,
    variant: str,
    team: str,
    all_variants: bool,
    all_teams: bool,
    status: str,
    blocked: bool,
    not_blocked: bool,
    blocking: bool,
    not_blocking: bool,
    ready: bool,
    not_ready: bool,
    owner: str,
    limit: int,
    json_output: bool,
) -> None:
    """List tasks with filtering."""
    task_filter = TaskFilter(
        status=status,
        blocked=_tri_state(blocked, not_blocked, "blocked"),
        blocking=_tri_state(blocking, not_blocking, "blocking"),
        ready=_tri_state(ready, not_ready, "ready"),
        owner=owner or None,
        limit=limit or None,
    )

    cfg = _config(ctx, variant, team)
    locations = _resolve(cfg, all_variants=all_variants, all_teams=all_teams)
    if not locations:
        _no_locations(json_output)
        return

    groups: list[LocationTasks] = []
    for location in locations:
        all_tasks = sort_tasks_by_id(_load(location))
        selected = filter_tasks(all_tasks, task_filter, all_tasks)
        groups.append(
            LocationTasks(
                location=location,
                tasks=selected,
                all_tasks=all_tasks,
                summary=get_task_summary(all_tasks),
            )
        )

    if len(groups) == 1:
        g = groups[0]
        if json_output:
            click.echo(format_tasks_json(g.tasks, g.location, g.summary, g.all_tasks))
        else:
            click.echo(format_task_table(g.tasks, g.location, g.summary, g.all_tasks))
    elif json_output:
        click.echo(format_multi_location_json(groups))
    else:
        click.echo(format_multi_location_task_table(groups))


# ── show ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("task_id")
@_location_options()
@click.option("--json", "json_output", is_flag=True, help="Emit JSON")
@click.pass_context
def show(ctx: click.Context, task_id: str, variant: str, team: str, json_output: bool) -> None:
    """Show one task with its dependencies and comments."""
    locations = _resolve(_config(ctx, variant, team))
    if not locations:
        tlog.error("No task locations found. Check variant and team settings.")
        sys.exit(1)

    found = _find_task(locations, task_id.lstrip("#"))
    if found is None:
        tlog.error(f"Task #{tlog.escape(task_id)} not found.")
        sys.exit(1)

    location, task = found
    all_tasks = _load(location)
    if json_output:
        click.echo(format_task_json(task, location, all_tasks))
    else:
        click.echo(format_task_detail(task, location, all_tasks))


# ── create ───────────────────────────────────────────────────────────


@main.command()
@click.argument("subject")
@_location_options()
@click.option("--description", "-d", default="", help="Task description")
@click.option("--owner", default="", help="Owner of the task")
@click.option("--blocks", multiple=True, help="ID of a task this one blocks (repeatable)")
@click.option("--blocked-by", multiple=True, help="ID of a task blocking this one (repeatable)")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON")
@click.pass_context
def create(
    ctx: click.Context,
    subject: str,
    variant: str,
    team: str,
    description: str,
    owner: str,
    blocks: tuple[str, ...],
    blocked_by: tuple[str, ...],
    json_output: bool,
) -> None:
    """Create a new task in the current location."""
    locations = _resolve(_config(ctx, variant, team))
    if not locations:
        tlog.error("No variant specified. Use --variant to specify a variant.")
        sys.exit(1)

    location = locations[0]
    try:
        task = create_task(
            location.tasks_dir,
            subject,
            description,
            owner=owner or None,
            blocks=list(blocks),
            blocked_by=list(blocked_by),
        )
    except InvalidInputError as exc:
        raise click.UsageError(str(exc)) from None
    except OSError as exc:
        tlog.error(f"Could not create task: {tlog.escape(str(exc))}")
        sys.exit(1)

    if json_output:
        click.echo(format_task_json(task, location, _load(location)))
    else:
        tlog.success(f"Created task #{task.id}: {tlog.escape(task.subject)}")
        tlog.info(f"Location: {location.variant} / {location.team}")


# ── update ───────────────────────────────────────────────────────────


def _add_ids(current: list[str], ids: list[str]) -> list[str]:
    return current + [i for i in ids if i not in current]


@main.command()
@click.argument("task_id")
@_location_options()
@click.option("--subject", default=None, help="New subject")
@click.option("--description", "-d", default=None, help="New description")
@click.option("--status", type=click.Choice(["open", "resolved"]), default=None)
@click.option("--owner", default=None, help='New owner ("" clears it)')
@click.option("--add-blocks", multiple=True, help="Add a blocked task ID (repeatable)")
@click.option("--remove-blocks", multiple=True, help="Remove a blocked task ID (repeatable)")
@click.option("--add-blocked-by", multiple=True, help="Add a blocker ID (repeatable)")
@click.option("--remove-blocked-by", multiple=True, help="Remove a blocker ID (repeatable)")
@click.option("--comment", default="", help="Append a comment")
@click.option("--author", default="cli", show_default=True, help="Comment author")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON")
@click.pass_context
def update(
    ctx: click.Context,
    task_id: str,
    variant: str,
    team: str,
    subject: str | None,
    description: str | None,
    status: str | None,
    owner: str | None,
    add_blocks: tuple[str, ...],
    remove_blocks: tuple[str, ...],
    add_blocked_by: tuple[str, ...],
    remove_blocked_by: tuple[str, ...],
    comment: str,
    author: str,
    json_output: bool,
) -> None:
    """Update fields, dependency edges or comments of a task."""
    if subject is not None and not subject.strip():
        raise click.BadParameter("Task subject must not be empty.", param_hint="--subject")
    try:
        edges = {
            "add_blocks": validate_task_ids(add_blocks, "--add-blocks"),
            "remove_blocks": validate_task_ids(remove_blocks, "--remove-blocks"),
            "add_blocked_by": validate_task_ids(add_blocked_by, "--add-blocked-by"),
            "remove_blocked_by": validate_task_ids(remove_blocked_by, "--remove-blocked-by"),
        }
    except InvalidInputError as exc:
        raise click.UsageError(str(exc)) from None

    locations = _resolve(_config(ctx, variant, team))
    if not locations:
        tlog.error("No task locations found. Check variant and team settings.")
        sys.exit(1)

    found = _find_task(locations, task_id.lstrip("#"))
    if found is None:
        tlog.error(f"Task #{tlog.escape(task_id)} not found.")
        sys.exit(1)
    location, task = found

    if subject is not None:
        task.subject = subject.strip()
    if description is not None:
        task.description = description
    if status is not None:
        task.status = TaskStatus(status)
    if owner is not None:
        task.owner = owner or None
    task.blocks = _add_ids(task.blocks, edges["add_blocks"])
    task.blocks = [i for i in task.blocks if i not in edges["remove_blocks"]]
    task.blocked_by = _add_ids(task.blocked_by, edges["add_blocked_by"])
    task.blocked_by = [i for i in task.blocked_by if i not in edges["remove_blocked_by"]]
    if comment:
        task.comments.append(TaskComment(author=author or "cli", content=comment))

    _save_or_exit(location, task)

    if json_output:
        click.echo(format_task_json(task, location, _load(location)))
    else:
        tlog.success(f"Updated task #{task.id}: {tlog.escape(task.subject)}")


# ── delete ───────────────────────────────────────────────────────────


@main.command()
@click.argument("task_id")
@_location_options()
@click.option("--force", "-f", is_flag=True, help="Do not ask for confirmation")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON")
@click.pass_context
def delete(ctx: click.Context, task_id: str, variant: str, team: str, force: bool, json_output: bool) -> None:
    """Delete a task. References to it in other tasks are kept."""
    locations = _resolve(_config(ctx, variant, team))
    if not locations:
        tlog.error("No task locations found. Check variant and team settings.")
        sys.exit(1)

    found = _find_task(locations, task_id.lstrip("#"))
    if found is None:
        tlog.error(f"Task #{tlog.escape(task_id)} not found.")
        sys.exit(1)
    location, task = found

    if not force:
        click.confirm(f"Delete task #{task.id}: {task.subject}?", abort=True)

    try:
        delete_task(location.tasks_dir, task.id)
    except OSError as exc:
        tlog.error(f"Could not delete task #{task.id}: {tlog.escape(str(exc))}")
        sys.exit(1)

    if json_output:
        click.echo(format_clean_results_json([CleanResult(location=location, deleted=[task.id])]))
    else:
        tlog.success(f"Deleted task #{task.id}: {tlog.escape(task.subject)}")


# ── clean ────────────────────────────────────────────────────────────


def _clean_candidates(location: TaskLocation, resolved_only: bool, older_than: float) -> list[str]:
    cutoff = time.time() - older_than * 86400 if older_than > 0 else None
    ids: list[str] = []
    for task in sort_tasks_by_id(_load(location)):
        if resolved_only and task.status != TaskStatus.RESOLVED:
            continue
        if cutoff is not None:
            mtime = get_task_mtime(location.tasks_dir, task.id)
            if mtime is None or mtime > cutoff:
                continue
        ids.append(task.id)
    return ids


@main.command()
@_location_options(multi=True)
@click.option("--resolved", "resolved_only", is_flag=True, help="Only delete resolved tasks")
@click.option("--older-than", type=click.FloatRange(min=0), default=0, help="Only tasks untouched for N days")
@click.option("--dry-run", is_flag=True, help="Show what would be deleted")
@click.option("--force", "-f", is_flag=True, help="Do not ask for confirmation")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON")
@click.pass_context
def clean(
    ctx: click.Context,
    variant: str,
    team: str,
    all_variants: bool,
    all_teams: bool,
    resolved_only: bool,
    older_than: float,
    dry_run: bool,
    force: bool,
    json_output: bool,
) -> None:
    """Bulk-delete tasks, optionally only resolved or stale ones."""
    locations = _resolve(_config(ctx, variant, team), all_variants=all_variants, all_teams=all_teams)
    if not locations:
        _no_locations(json_output)
        return

    plan = [(loc, _clean_candidates(loc, resolved_only, older_than)) for loc in locations]
    total = sum(len(ids) for _, ids in plan)

    if total and not dry_run and not force:
        click.confirm(f"Delete {total} task(s) across {len(plan)} location(s)?", abort=True)

    results: list[CleanResult] = []
    for location, ids in plan:
        if not dry_run:
            try:
                for tid in ids:
                    delete_task(location.tasks_dir, tid)
            except OSError as exc:
                tlog.error(f"Could not clean {location.tasks_dir}: {tlog.escape(str(exc))}")
                sys.exit(1)
        results.append(CleanResult(location=location, deleted=ids, dry_run=dry_run))

    if json_output:
        click.echo(format_clean_results_json(results))
    else:
        click.echo(format_clean_results(results))


# ── graph ────────────────────────────────────────────────────────────


@main.command()
@_location_options()
@click.option("--json", "json_output", is_flag=True, help="Emit JSON")
@click.pass_context
def graph(ctx: click.Context, variant: str, team: str, json_output: bool) -> None:
    """Show the dependency graph of the first resolved location."""
    locations = _resolve(_config(ctx, variant, team))
    if not locations:
        _no_locations(json_output)
        return

    location = locations[0]
    tasks = _load(location)

    if not tasks and not json_output:
        click.echo(f"No tasks found in {location.variant} / {location.team}")
        return

    if json_output:
        click.echo(format_task_graph_json(tasks, location))
    else:
        click.echo(format_task_graph(tasks, location))
