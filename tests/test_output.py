"""Tests for teamtasks.output — JSON contracts and text views."""

from __future__ import annotations

import json

from teamtasks.output import (
    CleanResult,
    LocationTasks,
    format_clean_results,
    format_multi_location_json,
    format_task_detail,
    format_task_graph,
    format_task_graph_json,
    format_task_json,
    format_task_table,
    format_tasks_json,
)
from teamtasks.tasks.model import TaskComment, TaskLocation, TaskSummary


def _loc(variant: str = "test-variant", team: str = "test-team") -> TaskLocation:
    return TaskLocation(variant=variant, team=team, tasks_dir="/tmp/tasks")


def _summary(**overrides) -> TaskSummary:
    base = dict(total=5, open=3, resolved=2, ready=2, blocked=1)
    base.update(overrides)
    return TaskSummary(**base)


class TestTasksJson:

    def test_enriched_fields(self, make_task):
        tasks = [
            make_task("1", blocked_by=["2", "3"]),
            make_task("2", status="resolved"),
            make_task("3"),
        ]
        parsed = json.loads(format_tasks_json(tasks, _loc(), _summary(), tasks))
        task1 = next(t for t in parsed["tasks"] if t["id"] == "1")
        assert task1["blocked"] is True
        assert task1["blockedBy"] == [
            {"id": "2", "status": "resolved"},
            {"id": "3", "status": "open"},
        ]
        assert task1["openBlockers"] == ["3"]

    def test_all_fields_present(self, make_task):
        task = make_task(
            "1",
            subject="Test Subject",
            description="Test Description",
            owner="agent-1",
            blocks=["2"],
            references=["3"],
            comments=[TaskComment(author="test", content="test comment")],
        )
        parsed = json.loads(format_tasks_json([task], _loc(), _summary(), [task]))
        t = parsed["tasks"][0]
        assert t["subject"] == "Test Subject"
        assert t["description"] == "Test Description"
        assert t["owner"] == "agent-1"
        assert t["blocks"] == ["2"]
        assert t["references"] == ["3"]
        assert t["comments"] == [{"author": "test", "content": "test comment"}]

    def test_location_and_summary(self):
        parsed = json.loads(
            format_tasks_json([], _loc("my-variant", "my-team"), _summary(total=10, ready=3), [])
        )
        assert parsed["variant"] == "my-variant"
        assert parsed["team"] == "my-team"
        assert parsed["summary"]["total"] == 10
        assert parsed["summary"]["ready"] == 3

    def test_single_task(self, make_task):
        task = make_task("1", blocked_by=["2"])
        parsed = json.loads(format_task_json(task, _loc("v1", "t1"), [task, make_task("2")]))
        assert parsed["variant"] == "v1"
        assert parsed["task"]["openBlockers"] == ["2"]

    def test_multi_location(self, make_task):
        tasks1 = [make_task("1", blocked_by=["2"]), make_task("2")]
        tasks2 = [make_task("3", status="resolved")]
        parsed = json.loads(format_multi_location_json([
            LocationTasks(_loc("v1", "t1"), tasks1, tasks1, _summary()),
            LocationTasks(_loc("v2", "t2"), tasks2, tasks2, _summary()),
        ]))
        assert [loc["variant"] for loc in parsed["locations"]] == ["v1", "v2"]
        assert parsed["locations"][0]["tasks"][0]["blocked"] is True
        assert parsed["locations"][1]["tasks"][0]["blocked"] is False


class TestTextViews:

    def test_table_marks_blocked(self, make_task):
        tasks = [make_task("1", subject="Root"), make_task("2", subject="Child", blocked_by=["1"])]
        out = format_task_table(tasks, _loc(), _summary(blocked=1))
        assert out.splitlines()[0] == "TASKS (test-variant / test-team) - 3 open, 2 resolved"
        row = next(line for line in out.splitlines() if line.startswith("2 "))
        assert row.endswith("●")
        assert "● = blocked by unresolved tasks" in out

    def test_table_truncates_long_subject(self, make_task):
        out = format_task_table([make_task("1", subject="x" * 80)], _loc(), _summary(blocked=0))
        assert "x" * 42 + "..." in out
        assert "blocked by unresolved" not in out

    def test_detail(self, make_task):
        task = make_task(
            "1",
            description="\n".join(f"line {i}" for i in range(12)),
            blocked_by=["2", "999"],
            blocks=["3"],
            comments=[TaskComment(author="lead", content="hello")],
        )
        out = format_task_detail(task, _loc(), [task, make_task("2", status="resolved")])
        assert "Owner:       (unassigned)" in out
        assert "  ... (2 more lines)" in out
        assert "Blocked by: #2 (resolved), #999 (?)" in out
        assert "Blocks:     #3" in out
        assert "  │ hello" in out

    def test_clean_results(self):
        out = format_clean_results([
            CleanResult(_loc(), ["1", "2"], dry_run=True),
            CleanResult(_loc("v2", "t2"), []),
        ])
        assert out.splitlines() == [
            "test-variant / test-team: Would delete 2 tasks",
            "  IDs: 1, 2",
            "v2 / t2: Deleted 0 tasks",
        ]


class TestGraphViews:

    def test_graph_json_chain(self, make_task):
        tasks = [
            make_task("1", blocks=["2"]),
            make_task("2", blocked_by=["1"], blocks=["3"]),
            make_task("3", blocked_by=["2"]),
        ]
        parsed = json.loads(format_task_graph_json(tasks, _loc()))
        assert parsed["variant"] == "test-variant"
        assert [n["depth"] for n in parsed["nodes"]] == [0, 1, 2]
        assert parsed["roots"] == ["1"]
        assert parsed["leaves"] == ["3"]
        assert parsed["orphans"] == []
        assert parsed["summary"]["ready"] == 1

    def test_graph_text_sections(self, make_task):
        tasks = [
            make_task("1", subject="Root", blocks=["2"]),
            make_task("2", subject="Child", blocked_by=["1"]),
            make_task("3", subject="Dangling", blocked_by=["999"]),
            make_task("4", subject="Loop A", blocked_by=["5"], blocks=["5"]),
            make_task("5", subject="Loop B", blocked_by=["4"], blocks=["4"]),
        ]
        out = format_task_graph(tasks, _loc())
        assert "[○] #1: Root" in out
        assert "  └─ [●] #2: Child" in out
        assert "Orphan tasks (blockedBy non-existent tasks):" in out
        assert "      blockedBy: 999 (missing: 999)" in out
        assert "Unreachable tasks" in out
        assert "#4: Loop A" in out
        assert out.splitlines()[-1] == "Total: 5 | Open: 5 | Ready: 2 | Blocked: 3"
