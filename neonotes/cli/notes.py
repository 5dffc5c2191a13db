"""Note management CLI commands."""

from __future__ import annotations

import click
from rich.markup import escape

from neonotes.cli.utils import console, notes_table, print_note
from neonotes.models import Category

CATEGORY_CHOICE = click.Choice(Category.values(), case_sensitive=False)


def register_note_commands(cli: click.Group) -> None:
    """Register all note-related commands with the CLI."""
    cli.add_command(list_cmd)
    cli.add_command(show_cmd)
    cli.add_command(add_cmd)
    cli.add_command(edit_cmd)
    cli.add_command(delete_cmd)
    cli.add_command(search_cmd)


@click.command("list")
@click.option("--category", "-c", type=CATEGORY_CHOICE, help="Only this category")
def list_cmd(category: str | None) -> None:
    """List notes in storage order."""
    from neonotes.core.notes import list_notes

    notes = list_notes()
    if category:
        notes = [n for n in notes if n.category.value == category.lower()]

    if not notes:
        console.print("[dim]No notes found.[/dim]")
        return

    console.print(notes_table(notes))


@click.command("show")
@click.argument("note_id", type=int)
def show_cmd(note_id: int) -> None:
    """Show a note in full."""
    from neonotes.core.notes import get_note

    note = get_note(note_id)
    if note is None:
        console.print(f"[red]Note not found:[/red] {note_id}")
        raise SystemExit(1)
    print_note(note)


@click.command("add")
@click.argument("title", required=False)
@click.option("--text", "-t", help="Note body")
@click.option("--category", "-c", type=CATEGORY_CHOICE, help="Note category")
@click.option("--color", help="Hex color, e.g. #fff59d")
def add_cmd(
    title: str | None, text: str | None, category: str | None, color: str | None
) -> None:
    """Create a note.

    \b
    Examples:
      neonotes add "Groceries" -t "milk, eggs" -c personal
      neonotes add -t "untitled thought"
    """
    from neonotes.core.notes import create_note

    note = create_note(
        {"title": title, "text": text, "category": category, "color": color}
    )
    console.print(f"[green]Created note[/green] {note.id}: {escape(note.title)}")


@click.command("edit")
@click.argument("note_id", type=int)
@click.option("--title", help="New title")
@click.option("--text", help="New body")
@click.option("--category", "-c", type=CATEGORY_CHOICE, help="New category")
@click.option("--color", help="New hex color")
def edit_cmd(
    note_id: int,
    title: str | None,
    text: str | None,
    category: str | None,
    color: str | None,
) -> None:
    """Change fields of a note. Omitted fields stay as they are."""
    from neonotes.core.notes import update_note

    note = update_note(
        note_id, {"title": title, "text": text, "category": category, "color": color}
    )
    if note is None:
        console.print(f"[red]Note not found:[/red] {note_id}")
        raise SystemExit(1)
    console.print(f"[green]Updated note[/green] {note.id}: {escape(note.title)}")


@click.command("delete")
@click.argument("note_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def delete_cmd(note_id: int, yes: bool) -> None:
    """Delete a note."""
    from neonotes.core.notes import delete_note, get_note

    note = get_note(note_id)
    if note is None:
        console.print(f"[red]Note not found:[/red] {note_id}")
        raise SystemExit(1)

    if not yes and not click.confirm(f"Delete '{note.title}'?"):
        console.print("[dim]Cancelled.[/dim]")
        return

    delete_note(note_id)
    console.print(f"[green]Deleted note[/green] {note_id}")


@click.command("search")
@click.argument("query")
def search_cmd(query: str) -> None:
    """Find notes whose title or text contains QUERY."""
    from neonotes.core.notes import search_notes

    notes = search_notes(query)
    if not notes:
        console.print(f"[dim]No notes match '{escape(query)}'.[/dim]")
        return

    console.print(notes_table(notes, title=f"Results for '{escape(query)}'"))
