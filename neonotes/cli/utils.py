"""Shared utilities for CLI commands."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from neonotes.config import get_config, init_config
from neonotes.models import Note

# Main console for stdout (user-facing output)
console = Console(highlight=False)


def ensure_setup() -> None:
    """Ensure neonotes is set up (creates config and data file on first run)."""
    config = get_config()
    if not config.config_path.exists():
        init_config(config.home)


def notes_table(notes: list[Note], title: str | None = None) -> Table:
    """Build a table of notes for listing and search output."""
    from neonotes.core.notes import preview

    table = Table(show_header=True, title=title)
    table.add_column("ID", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Category", style="cyan")
    table.add_column("Updated", style="dim")
    table.add_column("Preview")

    for note in notes:
        table.add_row(
            str(note.id),
            escape(note.title),
            note.category.value,
            note.updated_at[:10],
            escape(preview(note.text, 60).replace("\n", " ")),
        )
    return table


def print_note(note: Note) -> None:
    """Print a single note in full."""
    console.print(f"[bold]{escape(note.title)}[/bold]  [dim]#{note.id}[/dim]")
    console.print(
        f"[cyan]{note.category.value}[/cyan]  [dim]{note.color}  "
        f"created {note.created_at}  updated {note.updated_at}[/dim]"
    )
    if note.text:
        console.print()
        console.print(note.text, markup=False)
