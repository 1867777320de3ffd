"""Context Resolver: turn variant/team hints into concrete task locations."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from teamtasks import log
from teamtasks.config import assert_valid_name, detect_current_team, detect_variant_from_env
from teamtasks.io_utils import PathLike
from teamtasks.tasks.model import TaskLocation
from teamtasks.tasks.store import get_tasks_dir, get_variant_tasks_root, list_teams


def list_variants_with_tasks(root_dir: PathLike) -> list[str]:
    """Return variant names under *root_dir* that have task storage."""
    root = Path(root_dir).expanduser()
    if not root.is_dir():
        return []
    return sorted(
        p.name
        for p in root.iterdir()
        if p.is_dir() and get_variant_tasks_root(root, p.name).is_dir()
    )


def resolve_context(
    root_dir: PathLike,
    *,
    variant: str | None = None,
    team: str | None = None,
    all_variants: bool = False,
    all_teams: bool = False,
    env: Mapping[str, str] | None = None,
) -> list[TaskLocation]:
    """Return the ordered locations a command should act on.

    An explicit variant and team always produce exactly one location, whether
    or not its directory exists. Nothing resolvable yields an empty list.
    """
    if team:
        assert_valid_name(team, "team")

    root = Path(root_dir).expanduser()

    if all_variants:
        variants = list_variants_with_tasks(root)
    else:
        selected = variant or detect_variant_from_env(root, env)
        if selected:
            assert_valid_name(selected, "variant")
        variants = [selected] if selected else []

    if not variants:
        log.debug(f"No variant resolved under {root}")
        return []

    locations: list[TaskLocation] = []
    for name in variants:
        if all_teams:
            teams = list_teams(root / name)
        else:
            teams = [team or detect_current_team(env)]
        for team_name in teams:
            tasks_dir = get_tasks_dir(root, name, team_name)
            locations.append(TaskLocation(variant=name, team=team_name, tasks_dir=str(tasks_dir)))

    log.debug(f"Resolved {len(locations)} location(s) under {root}")
    return locations
