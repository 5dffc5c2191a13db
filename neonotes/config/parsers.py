"""Configuration parsing functions for neonotes."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from .models import (
    DEFAULT_HOME,
    AgentConfig,
    LLMConfig,
    LLMModelConfig,
    ServerConfig,
    StorageConfig,
)

# Default models when the provider is switched without naming models
OPENAI_DEFAULT_MODELS = LLMModelConfig(smart="gpt-4o")


def expand_path(path: str | Path) -> Path:
    """Expand ~ and environment variables in a path."""
    path_str = str(path)
    # Expand environment variables
    path_str = os.path.expandvars(path_str)
    # Expand ~
    return Path(path_str).expanduser()


def get_default_home() -> Path:
    """Get the default neonotes home directory."""
    # Check environment variable first
    env_home = os.environ.get("NEONOTES_HOME")
    if env_home:
        return expand_path(env_home)
    return DEFAULT_HOME


def get_config_path(home: Path | None = None) -> Path:
    """Get the path to the config file."""
    if home is None:
        home = get_default_home()
    return home / "config.yaml"


def _parse_server_config(data: dict[str, Any] | None) -> ServerConfig:
    """Parse server configuration."""
    if data is None:
        return ServerConfig()
    return ServerConfig(
        host=str(data.get("host", "127.0.0.1")),
        port=int(data.get("port", 3000)),
    )


def _parse_storage_config(data: dict[str, Any] | None) -> StorageConfig:
    """Parse storage configuration."""
    if data is None:
        return StorageConfig()
    data_file = data.get("data_file")
    return StorageConfig(data_file=expand_path(data_file) if data_file else None)


def _parse_agent_config(data: dict[str, Any] | None) -> AgentConfig:
    """Parse agent configuration.

    Non-positive limits fall back to the defaults.
    """
    if data is None:
        return AgentConfig()
    defaults = AgentConfig()

    max_rounds = int(data.get("max_rounds", defaults.max_rounds))
    preview_chars = int(data.get("preview_chars", defaults.preview_chars))
    max_history = int(data.get("max_history", defaults.max_history))
    # Only a real boolean is accepted
    require_known_ids = data.get("require_known_ids", defaults.require_known_ids)

    return AgentConfig(
        max_rounds=max_rounds if max_rounds > 0 else defaults.max_rounds,
        temperature=float(data.get("temperature", defaults.temperature)),
        preview_chars=preview_chars if preview_chars > 0 else defaults.preview_chars,
        max_history=max_history if max_history >= 0 else defaults.max_history,
        require_known_ids=require_known_ids
        if isinstance(require_known_ids, bool)
        else defaults.require_known_ids,
    )


def _parse_llm_models_config(
    data: dict[str, Any] | None, provider: str = "anthropic"
) -> LLMModelConfig:
    """Parse LLM models configuration."""
    defaults = OPENAI_DEFAULT_MODELS if provider == "openai" else LLMModelConfig()
    if data is None:
        return LLMModelConfig(smart=defaults.smart)
    return LLMModelConfig(smart=data.get("smart", defaults.smart))


def _parse_llm_config(data: dict[str, Any] | None) -> LLMConfig:
    """Parse LLM configuration.

    API key is loaded from environment variable:
    - ANTHROPIC_API_KEY for Anthropic provider
    - OPENAI_API_KEY for OpenAI provider
    """
    if data is None:
        data = {}

    provider = data.get("provider", "anthropic")

    # Get API key from environment variable based on provider
    if provider == "anthropic":
        api_key = os.environ.get("ANTHROPIC_API_KEY")
    elif provider == "openai":
        api_key = os.environ.get("OPENAI_API_KEY")
    else:
        api_key = None

    return LLMConfig(
        provider=provider,
        models=_parse_llm_models_config(data.get("models"), provider),
        api_key=api_key,
        base_url=data.get("base_url"),
        max_tokens=data.get("max_tokens", 1024),
        temperature=data.get("temperature", 0.7),
        system_prompt=data.get("system_prompt"),
    )
