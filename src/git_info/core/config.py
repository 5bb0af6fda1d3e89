"""Configuration for git-info."""

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from git_info.core.exceptions import ConfigError

CONFIG_FILE_NAME = ".git-info.json"


class GitInfoConfig(BaseModel):
    """Settings controlling how git output is requested and displayed."""

    log_limit: Optional[int] = Field(
        default=None, ge=1, description="Maximum number of commits to read from git log"
    )
    log_delimiter: str = Field(
        default="|", min_length=1, description="Field separator used in log output"
    )
    timestamp_format: str = Field(
        default="%Y-%m-%d %H:%M:%S %z",
        description="strptime format of commit dates in log output (git %ai)",
    )
    display_date_format: str = Field(
        default="%Y-%m-%d %H:%M", description="strftime format for CLI output"
    )


def load_config(project_root: Path) -> GitInfoConfig:
    """Load ``.git-info.json`` from the project root, falling back to defaults."""
    config_file = Path(project_root) / CONFIG_FILE_NAME
    if not config_file.exists():
        return GitInfoConfig()

    try:
        data = json.loads(config_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{config_file} must contain a JSON object")

    try:
        return GitInfoConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_file}: {e}") from e
