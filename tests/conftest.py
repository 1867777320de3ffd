"""Shared fixtures for teamtasks tests.

File handling in tests:
- Use tmp_path for any directory or file creation so tests are isolated and cleaned up.
- Use teamtasks.io_utils write_json/write_text for consistent UTF-8 I/O.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from teamtasks.io_utils import write_json
from teamtasks.tasks.model import Task, TaskComment, TaskStatus
from teamtasks.tasks.store import get_tasks_dir

ENV_VARS = (
    "TEAMTASKS_ROOT",
    "TEAMTASKS_VARIANT",
    "TEAMTASKS_TEAM",
    "TEAMTASKS_VERBOSE",
    "CLAUDE_CONFIG_DIR",
    "CLAUDE_CODE_TEAM_NAME",
    "TEAM",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's shell environment out of variant/team resolution."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _make_task(
    id: str = "1",
    subject: str = "",
    status: str = "open",
    owner: str | None = None,
    blocks: list[str] | None = None,
    blocked_by: list[str] | None = None,
    references: list[str] | None = None,
    comments: list[TaskComment] | None = None,
    description: str = "",
) -> Task:
    return Task(
        id=id,
        subject=subject or f"Task {id}",
        description=description,
        status=TaskStatus(status),
        owner=owner,
        references=references or [],
        blocks=blocks or [],
        blocked_by=blocked_by or [],
        comments=comments or [],
    )


@pytest.fixture
def make_task():
    """Factory fixture that creates Task instances."""
    return _make_task


@pytest.fixture
def tasks_root(tmp_path: Path) -> Path:
    """Root directory with an empty ``test-variant`` / ``test-team`` location."""
    variant_dir = tmp_path / "test-variant"
    get_tasks_dir(tmp_path, "test-variant", "test-team").mkdir(parents=True)
    write_json(variant_dir / "variant.json", {"name": "test-variant"})
    return tmp_path


@pytest.fixture
def tasks_dir(tasks_root: Path) -> Path:
    return get_tasks_dir(tasks_root, "test-variant", "test-team")


@pytest.fixture
def write_task():
    """Write a raw record the way another process would."""

    def _write(tasks_dir: Path, task: Task) -> Path:
        path = tasks_dir / f"{task.id}.json"
        write_json(path, task.to_dict())
        return path

    return _write
