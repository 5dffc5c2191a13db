"""Configuration management for neonotes.

The main entry points are:
- get_config(): Get the global configuration instance
- reset_config(): Clear the cached configuration
- load_config(): Load configuration from file
"""

from __future__ import annotations

from .io import ensure_directories, init_config, load_config
from .models import (
    DEFAULT_CONFIG_YAML,
    DEFAULT_HOME,
    AgentConfig,
    Config,
    LLMConfig,
    LLMModelConfig,
    ServerConfig,
    StorageConfig,
)
from .parsers import (
    _parse_agent_config,
    _parse_llm_config,
    _parse_server_config,
    _parse_storage_config,
    expand_path,
    get_config_path,
    get_default_home,
)

# Singleton config instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance.

    Loads config on first call, returns cached instance thereafter.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset the cached configuration (useful for testing)."""
    global _config
    _config = None


__all__ = [
    "DEFAULT_CONFIG_YAML",
    "DEFAULT_HOME",
    # Models
    "AgentConfig",
    "Config",
    "LLMConfig",
    "LLMModelConfig",
    "ServerConfig",
    "StorageConfig",
    "_parse_agent_config",
    "_parse_llm_config",
    "_parse_server_config",
    "_parse_storage_config",
    # I/O
    "ensure_directories",
    # Parsers
    "expand_path",
    # Singleton
    "get_config",
    "get_config_path",
    "get_default_home",
    "init_config",
    "load_config",
    "reset_config",
]
