"""File change model for commits."""

from enum import Enum

from pydantic import BaseModel


class FileStatus(str, Enum):
    """Kind of change git reports for a file in ``--name-status`` output."""

    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"
    RENAMED = "R"
    COPIED = "C"
    TYPE_CHANGED = "T"
    UNMERGED = "U"
    UNKNOWN = "X"

    @classmethod
    def from_code(cls, code: str) -> "FileStatus":
        """Map a status code such as ``M`` or ``R100`` to its kind."""
        if not code:
            return cls.UNKNOWN
        try:
            return cls(code[0].upper())
        except ValueError:
            return cls.UNKNOWN


class FileChangeRecord(BaseModel):
    """Represents one file touched by a commit."""

    status: str
    path: str

    model_config = {"frozen": True}

    @property
    def kind(self) -> FileStatus:
        return FileStatus.from_code(self.status)
