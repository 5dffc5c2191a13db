"""Configuration dataclass models for neonotes."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class ServerConfig:
    """Configuration for the HTTP server."""

    host: str = "127.0.0.1"
    port: int = 3000


@dataclass
class StorageConfig:
    """Configuration for the JSON note store."""

    data_file: Path | None = None  # None = <home>/data/notes.json


@dataclass
class AgentConfig:
    """Configuration for the natural-language agent endpoint."""

    max_rounds: int = 3  # Model round-trips before giving up
    temperature: float = 0.2  # Low temperature, this agent takes actions
    preview_chars: int = 160  # Text preview budget in list/search results
    max_history: int = 20  # Prior conversation turns forwarded to the model
    require_known_ids: bool = True  # Only update/delete ids seen in this request


@dataclass
class LLMModelConfig:
    """Configuration for LLM model selection per use case."""

    smart: str = "claude-sonnet-4-5"  # Used by the agent


@dataclass
class LLMConfig:
    """Configuration for LLM integration.

    Supports Anthropic (Claude) and OpenAI APIs via direct REST calls.
    API key is loaded from ANTHROPIC_API_KEY or OPENAI_API_KEY environment variable
    (based on provider setting).
    """

    provider: str = "anthropic"  # anthropic, openai
    models: LLMModelConfig = field(default_factory=LLMModelConfig)
    api_key: str | None = None  # Loaded from env var (not config)
    base_url: str | None = None  # Custom API endpoint (e.g., for proxies)
    max_tokens: int = 1024  # Max tokens in response
    temperature: float = 0.7  # Sampling temperature
    system_prompt: str | None = None  # Appended to the agent's built-in instructions


@dataclass
class Config:
    """Application configuration."""

    home: Path
    env_file: Path | None = None  # Custom .env file path (default: <home>/.env)
    server: ServerConfig = field(default_factory=ServerConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    agent: AgentConfig = field(default_factory=AgentConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)

    @property
    def config_path(self) -> Path:
        """Return path to config file."""
        return self.home / "config.yaml"

    @property
    def default_env_file(self) -> Path:
        """Return path to the default .env file."""
        return self.home / ".env"

    @property
    def data_path(self) -> Path:
        """Return path to the notes JSON file."""
        if self.storage.data_file is not None:
            return self.storage.data_file
        return self.home / "data" / "notes.json"


# Default configuration values
DEFAULT_HOME = Path.home() / ".neonotes"

DEFAULT_CONFIG_YAML = """\
# neonotes configuration

# HTTP server
server:
  host: 127.0.0.1
  port: 3000

# Note storage (a single JSON file)
storage:
  # data_file: ~/.neonotes/data/notes.json

# Natural-language agent (POST /api/agent, `neonotes ask`)
agent:
  max_rounds: 3          # Model round-trips per request
  temperature: 0.2       # Keep low, the agent edits your notes
  preview_chars: 160     # Preview length in list/search tool results
  max_history: 20        # Prior turns forwarded to the model
  require_known_ids: true  # Refuse update/delete on ids not looked up first

# Language model provider
# API keys come from ANTHROPIC_API_KEY / OPENAI_API_KEY (environment or .env)
llm:
  provider: anthropic    # anthropic or openai
  models:
    smart: claude-sonnet-4-5
  # base_url: https://my-proxy.example.com/v1/messages
"""
