"""Shared fixtures for neonotes tests."""

from __future__ import annotations

from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from neonotes import config as config_module
from neonotes.cli import config_cmd as config_cmd_module
from neonotes.cli import utils as cli_utils_module
from neonotes.cli import web as cli_web_module
from neonotes.config import Config, LLMConfig, StorageConfig
from neonotes.core import notes as notes_module
from neonotes.core.ai import agent as agent_module
from neonotes.models import Note


@pytest.fixture
def temp_home(tmp_path: Path) -> Path:
    """Create a temporary neonotes home directory."""
    home = tmp_path / "neonotes"
    home.mkdir(parents=True)
    return home


@pytest.fixture
def temp_config(temp_home: Path) -> Generator[Config]:
    """Create a temporary configuration for testing."""
    cfg = Config(
        home=temp_home,
        storage=StorageConfig(data_file=temp_home / "data" / "notes.json"),
        llm=LLMConfig(api_key="test-key"),
    )

    yield cfg

    config_module.reset_config()


@pytest.fixture
def mock_config(temp_config: Config, monkeypatch: pytest.MonkeyPatch) -> Config:
    """Mock get_config() to return temp_config.

    This patches get_config in neonotes.config AND every module that imports
    it at module level.
    """
    config_module.reset_config()
    monkeypatch.setattr(config_module, "_config", temp_config)
    monkeypatch.setattr(config_module, "get_config", lambda: temp_config)
    monkeypatch.setattr(notes_module, "get_config", lambda: temp_config)
    monkeypatch.setattr(agent_module, "get_config", lambda: temp_config)
    monkeypatch.setattr(cli_utils_module, "get_config", lambda: temp_config)
    monkeypatch.setattr(cli_web_module, "get_config", lambda: temp_config)
    monkeypatch.setattr(config_cmd_module, "get_config", lambda: temp_config)
    return temp_config


@pytest.fixture
def data_file(mock_config: Config) -> Path:
    """Path of the JSON store used by the mocked config."""
    return mock_config.data_path


@pytest.fixture
def make_note(mock_config: Config) -> Callable[..., Note]:
    """Factory fixture that creates notes through the service."""

    def _make_note(**fields: object) -> Note:
        return notes_module.create_note(fields)

    return _make_note
