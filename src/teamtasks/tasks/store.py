"""Task Store: one JSON record per task inside a tasks directory.

Layout::

    <root>/<variant>/config/tasks/<team>/<id>.json

There is no locking. A load/mutate/save cycle is not atomic, so two
concurrent updates of the same task race and the later write wins.
"""

from __future__ import annotations

from pathlib import Path

from teamtasks import log
from teamtasks.errors import InvalidInputError, MalformedTaskError
from teamtasks.io_utils import PathLike, read_json, write_json
from teamtasks.tasks.model import Task, TaskStatus

RECORD_SUFFIX = ".json"


# ── paths ────────────────────────────────────────────────────────────

def get_variant_tasks_root(root_dir: PathLike, variant: str) -> Path:
    """Return ``<root>/<variant>/config/tasks``, the parent of all team dirs."""
    return Path(root_dir).expanduser() / variant / "config" / "tasks"


def get_tasks_dir(root_dir: PathLike, variant: str, team: str) -> Path:
    """Return the tasks directory for *variant* / *team*. No I/O."""
    return get_variant_tasks_root(root_dir, variant) / team


def is_task_id(value: str) -> bool:
    return value.isascii() and value.isdigit() and value[0] != "0"


def _record_path(tasks_dir: PathLike, task_id: str) -> Path:
    return Path(tasks_dir) / f"{task_id}{RECORD_SUFFIX}"


# ── reads ────────────────────────────────────────────────────────────

def list_task_ids(tasks_dir: PathLike) -> set[str]:
    """Return the IDs with a record file in *tasks_dir* (empty if missing)."""
    path = Path(tasks_dir)
    if not path.is_dir():
        return set()
    return {
        p.stem
        for p in path.iterdir()
        if p.suffix == RECORD_SUFFIX and is_task_id(p.stem) and p.is_file()
    }


def _read_record(path: Path) -> Task:
    try:
        data = read_json(path)
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        raise MalformedTaskError(f"{path}: {exc}") from exc
    task = Task.from_dict(data)
    if task.id != path.stem:
        raise MalformedTaskError(f"{path}: record id {task.id!r} does not match file name")
    return task


def load_task(tasks_dir: PathLike, task_id: str) -> Task | None:
    """Load one task, or ``None`` when it is absent or malformed."""
    if not is_task_id(str(task_id)):
        return None
    path = _record_path(tasks_dir, str(task_id))
    if not path.is_file():
        return None
    try:
        return _read_record(path)
    except MalformedTaskError as exc:
        log.debug(f"Ignoring malformed task record: {log.escape(str(exc))}")
        return None


def load_all_tasks(tasks_dir: PathLike, skipped: list[Path] | None = None) -> list[Task]:
    """Load every well-formed task in *tasks_dir*, in no particular order.

    Malformed records are skipped. When *skipped* is given, the path of each
    skipped file is appended to it.
    """
    tasks: list[Task] = []
    for task_id in list_task_ids(tasks_dir):
        path = _record_path(tasks_dir, task_id)
        try:
            tasks.append(_read_record(path))
        except MalformedTaskError as exc:
            log.debug(f"Skipping malformed task record: {log.escape(str(exc))}")
            if skipped is not None:
                skipped.append(path)
    return tasks


def get_next_task_id(tasks_dir: PathLike) -> str:
    """Return the smallest positive integer not used by a record.

    IDs freed by deletion are handed out again.
    """
    used = {int(i) for i in list_task_ids(tasks_dir)}
    candidate = 1
    while candidate in used:
        candidate += 1
    return str(candidate)


def get_task_mtime(tasks_dir: PathLike, task_id: str) -> float | None:
    """Return the last-modified time of a task record, or ``None`` if absent."""
    if not is_task_id(str(task_id)):
        return None
    try:
        return _record_path(tasks_dir, str(task_id)).stat().st_mtime
    except FileNotFoundError:
        return None


def list_teams(variant_dir: PathLike) -> list[str]:
    """Return the team directory names under ``<variant_dir>/config/tasks``."""
    root = Path(variant_dir) / "config" / "tasks"
    if not root.is_dir():
        return []
    return sorted(p.name for p in root.iterdir() if p.is_dir())


# ── writes ───────────────────────────────────────────────────────────

def save_task(tasks_dir: PathLike, task: Task) -> None:
    """Create or overwrite the record for *task*. ``OSError`` propagates."""
    if not is_task_id(task.id):
        raise InvalidInputError(f"Task id must be a positive integer, got {task.id!r}.")
    path = Path(tasks_dir)
    path.mkdir(parents=True, exist_ok=True)
    write_json(_record_path(path, task.id), task.to_dict())


def delete_task(tasks_dir: PathLike, task_id: str) -> bool:
    """Remove a task record. Returns ``False`` if there was none.

    References to the deleted ID in other tasks are left in place.
    """
    if not is_task_id(str(task_id)):
        return False
    path = _record_path(tasks_dir, str(task_id))
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True


def validate_task_ids(ids: list[str] | tuple[str, ...] | None, option: str) -> list[str]:
    """Check edge IDs and drop duplicates, keeping first occurrences."""
    result: list[str] = []
    for raw in ids or []:
        value = str(raw).strip().lstrip("#")
        if not is_task_id(value):
            raise InvalidInputError(
                f"{option} expects positive integer task IDs, got {raw!r}."
            )
        if value not in result:
            result.append(value)
    return result


def create_task(
    tasks_dir: PathLike,
    subject: str,
    description: str = "",
    *,
    owner: str | None = None,
    blocks: list[str] | None = None,
    blocked_by: list[str] | None = None,
) -> Task:
    """Allocate an ID, persist a new open task and return it."""
    subject = (subject or "").strip()
    if not subject:
        raise InvalidInputError("Task subject must not be empty.")
    blocks_ids = validate_task_ids(blocks, "blocks")
    blocked_by_ids = validate_task_ids(blocked_by, "blockedBy")

    task = Task(
        id=get_next_task_id(tasks_dir),
        subject=subject,
        description=description or "",
        status=TaskStatus.OPEN,
        owner=owner or None,
        blocks=blocks_ids,
        blocked_by=blocked_by_ids,
    )
    save_task(tasks_dir, task)
    log.debug(f"Created task {task.id} in {tasks_dir}")
    return task
