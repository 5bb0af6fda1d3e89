"""Data models for git-info."""

from .blame import BlameEntry, BlameLine, BlameTable
from .change import FileChangeRecord, FileStatus
from .commit import CommitRecord, FileHistoryEntry
from .deletion import DeletionAttribution

__all__ = [
    "BlameEntry",
    "BlameLine",
    "BlameTable",
    "CommitRecord",
    "DeletionAttribution",
    "FileChangeRecord",
    "FileHistoryEntry",
    "FileStatus",
]
