"""Error taxonomy shared by the store, resolver and query layers.

Not-found conditions are never exceptions: they come back as ``None`` or an
empty collection. ``OSError`` from the filesystem propagates unchanged.
"""

from __future__ import annotations


class TaskError(Exception):
    """Base class for teamtasks errors."""


class InvalidInputError(TaskError, ValueError):
    """Caller-supplied input violates a constraint; raised before any I/O."""


class MalformedTaskError(TaskError, ValueError):
    """A task record on disk is unreadable or does not match the schema."""
