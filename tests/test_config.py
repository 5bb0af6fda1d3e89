"""Tests for loading git-info configuration."""

import json
import tempfile
from pathlib import Path

import pytest

from git_info.core.config import CONFIG_FILE_NAME, GitInfoConfig, load_config
from git_info.core.exceptions import ConfigError


@pytest.fixture
def project_dir():
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


def test_defaults_without_config_file(project_dir):
    config = load_config(project_dir)

    assert config == GitInfoConfig()
    assert config.log_limit is None
    assert config.log_delimiter == "|"
    assert config.timestamp_format == "%Y-%m-%d %H:%M:%S %z"


def test_values_from_config_file(project_dir):
    (project_dir / CONFIG_FILE_NAME).write_text(
        json.dumps({"log_limit": 25, "display_date_format": "%d.%m.%Y"})
    )

    config = load_config(project_dir)

    assert config.log_limit == 25
    assert config.display_date_format == "%d.%m.%Y"
    assert config.log_delimiter == "|"


def test_invalid_json(project_dir):
    (project_dir / CONFIG_FILE_NAME).write_text("{not json")

    with pytest.raises(ConfigError):
        load_config(project_dir)


def test_config_must_be_an_object(project_dir):
    (project_dir / CONFIG_FILE_NAME).write_text("[1, 2]")

    with pytest.raises(ConfigError):
        load_config(project_dir)


@pytest.mark.parametrize(
    "data",
    [
        {"log_limit": 0},
        {"log_delimiter": ""},
        {"log_limit": "many"},
    ],
)
def test_invalid_values(project_dir, data):
    (project_dir / CONFIG_FILE_NAME).write_text(json.dumps(data))

    with pytest.raises(ConfigError):
        load_config(project_dir)
