"""Tests for teamtasks.config — env fallbacks and variant/team detection."""

from __future__ import annotations

from pathlib import Path

from teamtasks.config import DEFAULT_TEAM, Config, detect_current_team, detect_variant_from_env


def test_default_root_is_expanded(monkeypatch):
    """Config() falls back to ~/.teamtasks when nothing is set."""
    cfg = Config()
    assert cfg.root_dir == str(Path("~/.teamtasks").expanduser())


def test_env_overrides(monkeypatch, tmp_path):
    """TEAMTASKS_* variables fill blank fields."""
    monkeypatch.setenv("TEAMTASKS_ROOT", str(tmp_path))
    monkeypatch.setenv("TEAMTASKS_VARIANT", "work")
    monkeypatch.setenv("TEAMTASKS_TEAM", "core")
    cfg = Config()
    assert (cfg.root_dir, cfg.variant, cfg.team) == (str(tmp_path), "work", "core")


def test_explicit_values_win(monkeypatch, tmp_path):
    monkeypatch.setenv("TEAMTASKS_VARIANT", "work")
    cfg = Config(root_dir=str(tmp_path), variant="home")
    assert cfg.variant == "home"


class TestDetectVariant:

    def test_explicit_env(self, tmp_path):
        assert detect_variant_from_env(tmp_path, {"TEAMTASKS_VARIANT": "v"}) == "v"

    def test_config_dir_under_root(self, tmp_path):
        env = {"CLAUDE_CONFIG_DIR": str(tmp_path / "zai" / "config")}
        assert detect_variant_from_env(tmp_path, env) == "zai"

    def test_config_dir_elsewhere(self, tmp_path):
        env = {"CLAUDE_CONFIG_DIR": str(tmp_path / "other" / "zai" / "config")}
        assert detect_variant_from_env(tmp_path, env) == ""

    def test_nothing_set(self, tmp_path):
        assert detect_variant_from_env(tmp_path, {}) == ""


class TestDetectTeam:

    def test_team_name_env(self):
        assert detect_current_team({"CLAUDE_CODE_TEAM_NAME": "alpha"}) == "alpha"

    def test_folder_name(self, tmp_path):
        project = tmp_path / "my-project"
        assert detect_current_team({}, cwd=project) == "my-project"

    def test_folder_with_modifier(self, tmp_path):
        project = tmp_path / "my-project"
        assert detect_current_team({"TEAM": "qa"}, cwd=project) == "my-project-qa"

    def test_sanitizes_unsafe_names(self, tmp_path):
        assert detect_current_team({}, cwd=tmp_path / "My Project") == "My-Project"

    def test_filesystem_root(self):
        assert detect_current_team({}, cwd=Path("/")) == DEFAULT_TEAM
