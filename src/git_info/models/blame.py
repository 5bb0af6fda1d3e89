"""Blame models for per-line authorship."""

from datetime import datetime
from typing import Dict, NamedTuple, Optional

from pydantic import BaseModel


class BlameLine(BaseModel):
    """One line of a file annotated with the commit that last touched it."""

    line_number: int
    sha: str
    author: str
    date: Optional[datetime] = None  # None when author-time was unparseable
    content: str

    model_config = {"frozen": True}


class BlameEntry(NamedTuple):
    """Compact blame lookup value: who last touched a line."""

    sha: str
    author: str


BlameTable = Dict[int, BlameEntry]
