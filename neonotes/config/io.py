"""Configuration I/O functions for neonotes."""

from __future__ import annotations

from pathlib import Path

import yaml
from dotenv import load_dotenv

from .models import DEFAULT_CONFIG_YAML, Config
from .parsers import (
    _parse_agent_config,
    _parse_llm_config,
    _parse_server_config,
    _parse_storage_config,
    expand_path,
    get_config_path,
    get_default_home,
)


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from YAML file.

    A missing config file yields the default configuration.

    Environment variables are loaded in this priority order (first wins):
    1. Shell environment variables (already set before neonotes runs)
    2. Custom env_file specified in config (if set)
    3. Default <home>/.env file

    API keys are ONLY loaded from environment variables, never from config.
    """
    if config_path is None:
        config_path = get_config_path()

    home = config_path.parent

    if config_path.exists():
        with config_path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    else:
        data = {}

    # Load environment variables from .env files (for API keys etc.)
    # Using override=False means existing env vars are NOT overwritten
    custom_env_file: Path | None = None
    if data.get("env_file"):
        custom_env_file = expand_path(data["env_file"])
        if custom_env_file.exists():
            load_dotenv(custom_env_file, override=False)

    default_env_file = home / ".env"
    if default_env_file.exists():
        load_dotenv(default_env_file, override=False)

    # The LLM section must be parsed after .env loading to see the API keys
    return Config(
        home=home,
        env_file=custom_env_file,
        server=_parse_server_config(data.get("server")),
        storage=_parse_storage_config(data.get("storage")),
        agent=_parse_agent_config(data.get("agent")),
        llm=_parse_llm_config(data.get("llm")),
    )


def ensure_directories(config: Config) -> None:
    """Create required directories if they don't exist."""
    config.home.mkdir(parents=True, exist_ok=True)
    config.data_path.parent.mkdir(parents=True, exist_ok=True)


def init_config(home: Path | None = None) -> Config:
    """Initialize configuration for first-time setup.

    Creates the default config file and directory structure.
    """
    if home is None:
        home = get_default_home()

    config_path = home / "config.yaml"
    home.mkdir(parents=True, exist_ok=True)

    if not config_path.exists():
        config_path.write_text(DEFAULT_CONFIG_YAML, encoding="utf-8")

    config = load_config(config_path)
    ensure_directories(config)

    return config
