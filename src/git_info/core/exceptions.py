"""Exceptions raised by git-info."""

from typing import Optional, Sequence


class GitInfoError(Exception):
    """Base class for git-info errors."""


class RecordParseError(GitInfoError, ValueError):
    """A field of a delimited git output line could not be converted."""

    def __init__(self, line: str, field: str, reason: str):
        self.line = line
        self.field = field
        super().__init__(f"Cannot parse field '{field}' from line {line!r}: {reason}")


class GitCommandFailed(GitInfoError, RuntimeError):
    """A git invocation exited with an error."""

    def __init__(self, command: Sequence[str], stderr: Optional[str] = None):
        self.command = list(command)
        self.stderr = stderr or ""
        message = f"Git command failed: git {' '.join(self.command)}"
        if self.stderr.strip():
            message += f"\n{self.stderr.strip()}"
        super().__init__(message)

    @property
    def is_missing_path(self) -> bool:
        """True when git reports that the path does not exist at the revision."""
        return "no such path" in self.stderr


class RepositoryNotFound(GitInfoError):
    """No git repository contains the requested directory."""


class ConfigError(GitInfoError):
    """The configuration file is unreadable or invalid."""
