"""Parsers for raw git output.

Every parser here is a pure function over text that git has already
produced, so calling one twice on the same text yields the same records.

- ``parse_records``: delimited log / name-status lines into typed records
- ``parse_blame`` / ``parse_blame_map``: ``git blame --line-porcelain`` output
- ``parse_diff``: zero-context unified diffs into deleted line positions
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, NamedTuple, Optional, Tuple, Type

from pydantic import BaseModel

from git_info.core.exceptions import RecordParseError
from git_info.models.blame import BlameEntry, BlameLine, BlameTable
from git_info.models.change import FileChangeRecord, FileStatus

GIT_ISO_FORMAT = "%Y-%m-%d %H:%M:%S %z"
SHA_LENGTH = 40

HUNK_HEADER = re.compile(r"^@@ -(\d+)")

DiffHunkMap = Dict[str, List[Tuple[int, str]]]
Converter = Callable[[str], Any]


class RecordShape(NamedTuple):
    """Declares how the positional fields of one output line map onto a record.

    ``fields`` lists ``(field_name, converter)`` pairs in the exact order the
    git format string emits them. With ``greedy_tail`` the last field keeps any
    remaining delimiters, so free text such as a commit subject survives intact.
    """

    model: Type[BaseModel]
    fields: Tuple[Tuple[str, Converter], ...]
    greedy_tail: bool = False


def utc_timestamp(fmt: str = GIT_ISO_FORMAT) -> Converter:
    """Build a converter that parses ``fmt`` and normalizes the result to UTC."""

    def convert(raw: str) -> datetime:
        parsed = datetime.strptime(raw, fmt)
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    return convert


def log_shape(model: Type[BaseModel], timestamp_format: str = GIT_ISO_FORMAT) -> RecordShape:
    """Shape of a ``--pretty=format:%H|%an|%ai|%s`` log line."""
    return RecordShape(
        model=model,
        fields=(
            ("sha", str),
            ("author", str),
            ("date", utc_timestamp(timestamp_format)),
            ("message", str),
        ),
        greedy_tail=True,
    )


FILE_CHANGE_SHAPE = RecordShape(
    model=FileChangeRecord,
    fields=(("status", str), ("path", str)),
)


def parse_records(output: str, shape: RecordShape, delimiter: str = "|") -> Iterator[Any]:
    """Yield one record per non-empty line of ``output``.

    Lines with fewer fields than the shape declares are skipped. A field that
    fails conversion raises ``RecordParseError``: it means git's output does not
    match the format we asked for.
    """
    field_count = len(shape.fields)
    maxsplit = field_count - 1 if shape.greedy_tail else -1

    for raw_line in output.split("\n"):
        line = raw_line.strip()
        if not line:
            continue

        parts = line.split(delimiter, maxsplit)
        if len(parts) < field_count:
            continue

        values = {}
        for (name, convert), raw in zip(shape.fields, parts):
            try:
                values[name] = convert(raw.strip())
            except (ValueError, TypeError) as e:
                raise RecordParseError(line, name, str(e)) from e

        yield shape.model(**values)


def normalize_git_path(path: str) -> str:
    """Strip the ``a/`` or ``b/`` side prefix git puts on diff paths."""
    if path.startswith(("a/", "b/")):
        return path[2:]
    return path


def find_file_status(name_status_output: str, path: str) -> str:
    """Return the status letter(s) for ``path`` in ``--name-status`` output.

    Only plain ``<status>\\t<path>`` lines are considered. Files without an
    entry are reported as modified.
    """
    for raw_line in name_status_output.split("\n"):
        parts = raw_line.strip().split("\t")
        if len(parts) == 2 and parts[1] == path:
            return parts[0]
    return FileStatus.MODIFIED.value


class BlameState(Enum):
    """Progress through one ``--line-porcelain`` block."""

    AWAITING_ID = "awaiting_id"
    AWAITING_AUTHOR = "awaiting_author"
    READY = "ready"


class _BlameRow(NamedTuple):
    line_number: int
    sha: str
    author: str
    date: Optional[datetime]
    content: str


def _local_time(raw: str) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(int(raw.strip())).astimezone()
    except (ValueError, OverflowError, OSError):
        return None


def _iter_blame_rows(output: str) -> Iterator[_BlameRow]:
    """Walk porcelain blocks, yielding a row for every complete block.

    Block state resets only after a tab-prefixed content line. The line counter
    advances for every content line, including blocks that are dropped for
    lacking a commit id or author.
    """
    state = BlameState.AWAITING_ID
    sha: Optional[str] = None
    author: Optional[str] = None
    date: Optional[datetime] = None
    line_number = 0

    for line in output.split("\n"):
        if line.startswith("\t"):
            line_number += 1
            if state is BlameState.READY:
                yield _BlameRow(line_number, sha, author, date, line[1:])

            state = BlameState.AWAITING_ID
            sha = author = date = None
            continue

        if state is BlameState.AWAITING_ID and len(line) >= SHA_LENGTH:
            # Header line: "<sha> <orig-line> <final-line> [<group-size>]"
            sha = line[:SHA_LENGTH]
            state = BlameState.READY if author is not None else BlameState.AWAITING_AUTHOR
        elif line.startswith("author "):
            author = line[len("author "):]
            if state is BlameState.AWAITING_AUTHOR:
                state = BlameState.READY
        elif line.startswith("author-time "):
            date = _local_time(line[len("author-time "):])


def parse_blame(output: str) -> Iterator[BlameLine]:
    """Parse ``git blame --line-porcelain`` output into per-line records."""
    for row in _iter_blame_rows(output):
        yield BlameLine(
            line_number=row.line_number,
            sha=row.sha,
            author=row.author,
            date=row.date,
            content=row.content,
        )


def parse_blame_map(output: str) -> BlameTable:
    """Parse blame output into a ``line number -> (sha, author)`` lookup."""
    return {row.line_number: BlameEntry(row.sha, row.author) for row in _iter_blame_rows(output)}


def parse_diff(diff: str) -> DiffHunkMap:
    """Collect deleted lines per file from a ``--unified=0`` diff.

    Line numbers refer to the file before the change. Files with no deleted
    lines (binary files, pure additions) map to an empty list.
    """
    result: DiffHunkMap = {}
    current_file: Optional[str] = None
    old_line = 0
    in_hunk = False

    for line in diff.split("\n"):
        if line.startswith("diff --git"):
            current_file = normalize_git_path(line.split()[-1])
            result.setdefault(current_file, [])
            in_hunk = False
            continue

        if current_file is None:
            continue

        if line.startswith("@@"):
            match = HUNK_HEADER.match(line)
            if match:
                old_line = int(match.group(1))
                in_hunk = True
            continue

        # ---/+++ are file headers only until the first hunk of a section
        if not in_hunk and line.startswith(("---", "+++")):
            continue

        if line.startswith("-"):
            result[current_file].append((old_line, line[1:]))
            old_line += 1
        elif line.startswith(("+", "\\")):
            continue
        else:
            old_line += 1

    return result
