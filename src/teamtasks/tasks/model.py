"""Task data models shared by the store, queries, graph builder and CLI."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from teamtasks.errors import MalformedTaskError


class TaskStatus(str, Enum):
    OPEN = "open"
    RESOLVED = "resolved"


STATUS_FILTERS = ("open", "resolved", "all")


@dataclass
class TaskComment:
    author: str
    content: str


@dataclass
class Task:
    """A unit of work stored as ``<id>.json`` in a tasks directory.

    ``blocks`` are outgoing edges (this -> blocked task) and ``blocked_by``
    incoming ones. The two sides are not kept in sync; dangling or
    one-sided edges are valid data.
    """

    id: str
    subject: str
    description: str = ""
    status: TaskStatus = TaskStatus.OPEN
    owner: str | None = None
    references: list[str] = field(default_factory=list)
    blocks: list[str] = field(default_factory=list)
    blocked_by: list[str] = field(default_factory=list)
    comments: list[TaskComment] = field(default_factory=list)

    @property
    def is_open(self) -> bool:
        return self.status == TaskStatus.OPEN

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the on-disk key names."""
        data: dict[str, Any] = {
            "id": self.id,
            "subject": self.subject,
            "description": self.description,
            "status": self.status.value,
        }
        if self.owner is not None:
            data["owner"] = self.owner
        data["references"] = list(self.references)
        data["blocks"] = list(self.blocks)
        data["blockedBy"] = list(self.blocked_by)
        data["comments"] = [asdict(c) for c in self.comments]
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Task:
        """Parse a stored record. Raises ``MalformedTaskError`` on schema violations."""
        if not isinstance(data, dict):
            raise MalformedTaskError("task record must be a JSON object")

        task_id = data.get("id")
        if isinstance(task_id, int) and not isinstance(task_id, bool):
            task_id = str(task_id)
        if not isinstance(task_id, str) or not task_id:
            raise MalformedTaskError("task record is missing 'id'")

        subject = data.get("subject")
        if not isinstance(subject, str):
            raise MalformedTaskError(f"task {task_id} is missing 'subject'")

        description = data.get("description")
        if description is None:
            description = ""
        if not isinstance(description, str):
            raise MalformedTaskError(f"task {task_id}: 'description' must be a string")

        try:
            status = TaskStatus(data.get("status", TaskStatus.OPEN.value))
        except ValueError:
            raise MalformedTaskError(
                f"task {task_id}: unknown status {data.get('status')!r}"
            ) from None

        owner = data.get("owner")
        if owner is not None and not isinstance(owner, str):
            raise MalformedTaskError(f"task {task_id}: 'owner' must be a string")

        comments: list[TaskComment] = []
        raw_comments = data.get("comments")
        if raw_comments is None:
            raw_comments = []
        if not isinstance(raw_comments, list):
            raise MalformedTaskError(f"task {task_id}: 'comments' must be a list")
        for raw in raw_comments:
            if not isinstance(raw, dict):
                raise MalformedTaskError(f"task {task_id}: comment must be an object")
            comments.append(
                TaskComment(author=str(raw.get("author", "")), content=str(raw.get("content", "")))
            )

        return cls(
            id=task_id,
            subject=subject,
            description=description,
            status=status,
            owner=owner or None,
            references=_id_list(data, "references", task_id),
            blocks=_id_list(data, "blocks", task_id),
            blocked_by=_id_list(data, "blockedBy", task_id),
            comments=comments,
        )


def _id_list(data: dict[str, Any], key: str, task_id: str) -> list[str]:
    raw = data.get(key)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise MalformedTaskError(f"task {task_id}: '{key}' must be a list")
    return [str(item) for item in raw]


@dataclass(frozen=True)
class TaskLocation:
    """A resolved ``(variant, team)`` pair and its tasks directory."""

    variant: str
    team: str
    tasks_dir: str


@dataclass
class TaskSummary:
    total: int = 0
    open: int = 0
    resolved: int = 0
    ready: int = 0
    blocked: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass
class TaskFilter:
    """Independent list filters; ``None`` means the filter is skipped."""

    status: str | None = None
    blocked: bool | None = None
    blocking: bool | None = None
    ready: bool | None = None
    owner: str | None = None
    limit: int | None = None
