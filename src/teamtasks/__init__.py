"""teamtasks: file-backed task dependency tracker for variants and teams."""

__version__ = "1.0.0"
