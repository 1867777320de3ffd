"""Tests for teamtasks.tasks.resolve — variant/team selection."""

from __future__ import annotations

from pathlib import Path

import pytest

from teamtasks.errors import InvalidInputError
from teamtasks.tasks.model import TaskLocation
from teamtasks.tasks.resolve import list_variants_with_tasks, resolve_context
from teamtasks.tasks.store import get_tasks_dir


def _mkloc(root: Path, variant: str, team: str) -> None:
    get_tasks_dir(root, variant, team).mkdir(parents=True, exist_ok=True)


class TestListVariants:

    def test_only_variants_with_task_storage(self, tmp_path: Path):
        _mkloc(tmp_path, "beta", "t")
        _mkloc(tmp_path, "alpha", "t")
        (tmp_path / "no-tasks" / "config").mkdir(parents=True)
        (tmp_path / "stray.txt").write_text("x", encoding="utf-8")
        assert list_variants_with_tasks(tmp_path) == ["alpha", "beta"]

    def test_missing_root(self, tmp_path: Path):
        assert list_variants_with_tasks(tmp_path / "missing") == []


class TestResolveContext:

    def test_explicit_variant_and_team_even_if_missing(self, tmp_path: Path):
        locations = resolve_context(tmp_path, variant="v1", team="t1")
        assert locations == [
            TaskLocation("v1", "t1", str(get_tasks_dir(tmp_path, "v1", "t1")))
        ]

    def test_no_variant_yields_nothing(self, tmp_path: Path):
        _mkloc(tmp_path, "v1", "t1")
        assert resolve_context(tmp_path, team="t1", env={}) == []

    def test_variant_from_env(self, tmp_path: Path):
        locations = resolve_context(tmp_path, team="t1", env={"TEAMTASKS_VARIANT": "v9"})
        assert [(l.variant, l.team) for l in locations] == [("v9", "t1")]

    def test_variant_from_claude_config_dir(self, tmp_path: Path):
        env = {"CLAUDE_CONFIG_DIR": str(tmp_path / "v2" / "config")}
        locations = resolve_context(tmp_path, team="t1", env=env)
        assert [l.variant for l in locations] == ["v2"]

    def test_detected_team(self, tmp_path: Path):
        env = {"CLAUDE_CODE_TEAM_NAME": "squad"}
        locations = resolve_context(tmp_path, variant="v1", env=env)
        assert [l.team for l in locations] == ["squad"]

    def test_all_variants_with_explicit_team(self, tmp_path: Path):
        _mkloc(tmp_path, "a", "x")
        _mkloc(tmp_path, "b", "y")
        locations = resolve_context(tmp_path, team="x", all_variants=True)
        assert [(l.variant, l.team) for l in locations] == [("a", "x"), ("b", "x")]

    def test_all_variants_all_teams(self, tmp_path: Path):
        _mkloc(tmp_path, "a", "x")
        _mkloc(tmp_path, "a", "z")
        _mkloc(tmp_path, "b", "y")
        locations = resolve_context(tmp_path, all_variants=True, all_teams=True)
        assert [(l.variant, l.team) for l in locations] == [("a", "x"), ("a", "z"), ("b", "y")]

    def test_all_teams_of_missing_variant(self, tmp_path: Path):
        assert resolve_context(tmp_path, variant="ghost", all_teams=True) == []

    def test_all_variants_missing_root(self, tmp_path: Path):
        assert resolve_context(tmp_path / "missing", all_variants=True, all_teams=True) == []

    @pytest.mark.parametrize("bad", ["../up", "has space", "a/b", ".hidden"])
    def test_invalid_names_rejected(self, tmp_path: Path, bad: str):
        with pytest.raises(InvalidInputError):
            resolve_context(tmp_path, variant=bad, team="t")
        with pytest.raises(InvalidInputError):
            resolve_context(tmp_path, variant="v", team=bad)
