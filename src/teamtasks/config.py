"""Configuration defaults, env vars, and variant/team detection for teamtasks."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from teamtasks.errors import InvalidInputError


DEFAULT_ROOT = "~/.teamtasks"
DEFAULT_TEAM = "default"

NAME_PATTERN = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9._-]*$")


@dataclass
class Config:
    """Runtime configuration — CLI flags with environment fallbacks."""

    root_dir: str = ""
    variant: str = ""
    team: str = ""
    verbose: bool = False

    def __post_init__(self) -> None:
        if not self.root_dir:
            self.root_dir = os.environ.get("TEAMTASKS_ROOT") or DEFAULT_ROOT
        self.root_dir = str(Path(self.root_dir).expanduser())
        if not self.variant:
            self.variant = os.environ.get("TEAMTASKS_VARIANT", "")
        if not self.team:
            self.team = os.environ.get("TEAMTASKS_TEAM", "")


def assert_valid_name(name: str, kind: str) -> None:
    """Reject variant/team names that could escape the storage tree."""
    if not name or not NAME_PATTERN.match(name):
        raise InvalidInputError(
            f'Invalid {kind} name "{name}". Use letters, numbers, underscores, '
            "dots, and dashes (no spaces or slashes)."
        )


def detect_variant_from_env(root_dir: str | Path, env: Mapping[str, str] | None = None) -> str:
    """Return the variant implied by the environment, or ``""``.

    ``TEAMTASKS_VARIANT`` wins. Otherwise a ``CLAUDE_CONFIG_DIR`` of the form
    ``<root>/<variant>/config`` names the variant.
    """
    env = os.environ if env is None else env
    explicit = env.get("TEAMTASKS_VARIANT", "")
    if explicit:
        return explicit

    config_dir = env.get("CLAUDE_CONFIG_DIR", "")
    if not config_dir:
        return ""
    config_path = Path(config_dir).expanduser()
    if config_path.name != "config":
        return ""
    variant_dir = config_path.parent
    try:
        if variant_dir.parent.resolve() != Path(root_dir).expanduser().resolve():
            return ""
    except OSError:
        return ""
    return variant_dir.name


def detect_current_team(env: Mapping[str, str] | None = None, cwd: Path | None = None) -> str:
    """Return the team for the current shell.

    ``CLAUDE_CODE_TEAM_NAME`` is used as-is when set. Otherwise the team is
    the working directory's folder name, suffixed with ``-$TEAM`` when the
    ``TEAM`` modifier is present.
    """
    env = os.environ if env is None else env
    explicit = env.get("CLAUDE_CODE_TEAM_NAME", "")
    if explicit:
        return _sanitize(explicit)

    folder = (cwd or Path.cwd()).name or DEFAULT_TEAM
    modifier = env.get("TEAM", "")
    return _sanitize(f"{folder}-{modifier}" if modifier else folder)


def _sanitize(name: str) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "-", name).lstrip(".-")
    return cleaned or DEFAULT_TEAM
