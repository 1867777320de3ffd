"""Wrappers for text and JSON file I/O with consistent encoding (UTF-8)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

PathLike = Path | str


def read_text(path: PathLike, errors: str = "strict", **kwargs: Any) -> str:
    """Read path as text with UTF-8 encoding. Forwards extra kwargs to Path.read_text."""
    p = path if isinstance(path, Path) else Path(path)
    return p.read_text(encoding="utf-8", errors=errors, **kwargs)


def write_text(path: PathLike, text: str, **kwargs: Any) -> None:
    """Write text to path with UTF-8 encoding. Forwards extra kwargs to Path.write_text."""
    p = path if isinstance(path, Path) else Path(path)
    p.write_text(text, encoding="utf-8", **kwargs)


def read_json(path: PathLike) -> Any:
    """Parse a UTF-8 JSON document. Raises ``ValueError`` on invalid JSON."""
    return json.loads(read_text(path))


def dump_json(data: Any) -> str:
    """Serialize *data* the way records and CLI output are written: 2-space indent."""
    return json.dumps(data, indent=2, ensure_ascii=False)


def write_json(path: PathLike, data: Any) -> None:
    """Write *data* as pretty-printed JSON with a trailing newline."""
    write_text(path, dump_json(data) + "\n")
