"""Commit models parsed from git log output."""

from datetime import datetime

from pydantic import BaseModel


class CommitRecord(BaseModel):
    """Represents a single commit as reported by ``git log``."""

    sha: str
    author: str
    date: datetime
    message: str

    model_config = {"frozen": True}

    @property
    def short_sha(self) -> str:
        return self.sha[:7]


class FileHistoryEntry(CommitRecord):
    """A commit that touched one particular file."""
