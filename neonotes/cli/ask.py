"""Natural-language agent command."""

from __future__ import annotations

import json
import sys

import click
from rich.table import Table

from neonotes.cli.utils import console


def register_ask_commands(cli: click.Group) -> None:
    """Register the ask command with the CLI."""
    cli.add_command(ask_cmd)


def _format_value(value: object, limit: int = 80) -> str:
    text = json.dumps(value, ensure_ascii=False, default=str)
    return text if len(text) <= limit else text[: limit - 3] + "..."


@click.command("ask")
@click.argument("message")
def ask_cmd(message: str) -> None:
    """Ask the agent to read or change your notes.

    \b
    Examples:
      neonotes ask "add a work note: standup moved to 10am"
      neonotes ask "delete the grocery note"
    """
    from neonotes.core.ai import run_agent
    from neonotes.core.llm import LLMConfigError, LLMError

    try:
        with console.status("[bold blue]Thinking...[/bold blue]"):
            result = run_agent(message)
    except LLMConfigError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        console.print(
            "\n[dim]Hint: Set ANTHROPIC_API_KEY (or OPENAI_API_KEY with "
            "llm.provider: openai). Run 'neonotes config api-keys' to check.[/dim]"
        )
        sys.exit(1)
    except LLMError as e:
        console.print(f"[red]LLM error:[/red] {e}")
        sys.exit(1)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    console.print(result.reply, markup=False)

    if result.actions:
        table = Table(show_header=True, title="Actions")
        table.add_column("Tool", style="cyan")
        table.add_column("Input")
        table.add_column("Result")
        for action in result.actions:
            style = "red" if action.is_error else ""
            table.add_row(
                action.tool,
                _format_value(action.input),
                _format_value(action.result),
                style=style,
            )
        console.print()
        console.print(table)

    console.print(
        f"\n[dim]{result.rounds} round(s), "
        f"{result.input_tokens} in / {result.output_tokens} out tokens[/dim]"
    )
