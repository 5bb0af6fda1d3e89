"""Deleted line attribution model."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class DeletionAttribution(BaseModel):
    """A line removed by a commit, paired with the author who originally wrote it."""

    line_number: int  # Position in the file before the deleting commit
    text: str
    file_path: str
    deleted_in: str
    deleted_by: str
    original_sha: str
    original_author: str
    original_date: Optional[datetime] = None

    model_config = {"frozen": True}
