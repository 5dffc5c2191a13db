"""Config-related CLI commands."""

from __future__ import annotations

import os

import click

from neonotes.cli.utils import console
from neonotes.config import get_config


def register_config_commands(cli: click.Group) -> None:
    """Register all config-related commands with the CLI."""
    cli.add_command(config_cmd)


@click.group("config")
def config_cmd() -> None:
    """Inspect configuration settings.

    \b
    Subcommands:
      show       Show the effective configuration
      path       Print the config file location
      api-keys   Show detected API keys (masked)
    """


@config_cmd.command("show")
def config_show() -> None:
    """Show the effective configuration."""
    config = get_config()

    console.print("\n[bold]Configuration[/bold]\n")
    rows = [
        ("home", config.home),
        ("config file", config.config_path),
        ("data file", config.data_path),
        ("server.host", config.server.host),
        ("server.port", config.server.port),
        ("agent.max_rounds", config.agent.max_rounds),
        ("agent.temperature", config.agent.temperature),
        ("agent.preview_chars", config.agent.preview_chars),
        ("agent.max_history", config.agent.max_history),
        ("agent.require_known_ids", config.agent.require_known_ids),
        ("llm.provider", config.llm.provider),
        ("llm.models.smart", config.llm.models.smart),
        ("llm.base_url", config.llm.base_url),
        ("llm.max_tokens", config.llm.max_tokens),
    ]
    for key, value in rows:
        value_str = str(value) if value is not None else "[dim]<not set>[/dim]"
        console.print(f"  [cyan]{key}[/cyan] = {value_str}")
    console.print()


@config_cmd.command("path")
def config_path() -> None:
    """Print the config file location."""
    console.print(str(get_config().config_path))


@config_cmd.command("api-keys")
def config_api_keys() -> None:
    """Show detected API keys and their sources.

    API keys are loaded from environment variables (never from config.yaml).

    \b
    Priority order (first found wins):
      1. Shell environment variables
      2. Custom env_file (if configured)
      3. Default <home>/.env file

    \b
    Supported API keys:
      ANTHROPIC_API_KEY   - For the agent (llm.provider: anthropic)
      OPENAI_API_KEY      - For the agent (llm.provider: openai)
    """
    config = get_config()

    api_keys = [
        ("ANTHROPIC_API_KEY", "LLM (Anthropic Claude)", "llm.provider: anthropic"),
        ("OPENAI_API_KEY", "LLM (OpenAI)", "llm.provider: openai"),
    ]

    console.print("\n[bold]API Keys[/bold]\n")

    default_env = config.default_env_file
    console.print("[dim]Sources (priority order):[/dim]")
    console.print("  1. Shell environment variables")
    if config.env_file:
        exists = (
            "[green]exists[/green]"
            if config.env_file.exists()
            else "[red]not found[/red]"
        )
        console.print(f"  2. Custom env_file: {config.env_file} ({exists})")
        console.print(f"  3. Default: {default_env}", end="")
    else:
        console.print(f"  2. Default: {default_env}", end="")
    if default_env.exists():
        console.print(" [green](exists)[/green]")
    else:
        console.print(" [dim](not found)[/dim]")
    console.print()

    found_any = False
    for env_var, description, usage in api_keys:
        value = os.environ.get(env_var)
        if value:
            found_any = True
            console.print(f"  [green]{env_var}[/green]")
            console.print(f"    {description}")
            console.print(f"    Value: {_mask_api_key(value)}")
            console.print(f"    Used by: {usage}")
        else:
            console.print(f"  [dim]{env_var}[/dim]")
            console.print(f"    {description}")
            console.print("    [dim]<not set>[/dim]")
        console.print()

    if not found_any:
        console.print("[yellow]No API keys detected.[/yellow]")
        console.print("\n[dim]To configure API keys, create a .env file at:[/dim]")
        console.print(f"  {default_env}")
        console.print("\n[dim]Example .env file:[/dim]")
        console.print("  ANTHROPIC_API_KEY=sk-ant-...")


def _mask_api_key(key: str) -> str:
    """Mask an API key for display, showing only first 4 and last 4 chars."""
    if len(key) <= 12:
        return "*" * len(key)
    masked_len = min(len(key) - 8, 32)
    return f"{key[:4]}{'*' * masked_len}{key[-4:]}"
