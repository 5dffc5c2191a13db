"""CLI package for neonotes."""

from __future__ import annotations

from typing import ClassVar

import click

from neonotes import __version__
from neonotes.cli.ask import register_ask_commands
from neonotes.cli.config_cmd import register_config_commands
from neonotes.cli.notes import register_note_commands
from neonotes.cli.utils import ensure_setup
from neonotes.cli.web import register_web_commands


class AliasedGroup(click.Group):
    """Click group that supports short command aliases."""

    ALIASES: ClassVar[dict[str, str]] = {
        "ls": "list",
        "s": "search",
        "rm": "delete",
        "new": "add",
    }

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        rv = super().get_command(ctx, cmd_name)
        if rv is not None:
            return rv
        if cmd_name in self.ALIASES:
            return super().get_command(ctx, self.ALIASES[cmd_name])
        return None

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        # Report the real command name, not the alias
        _, cmd, args = super().resolve_command(ctx, args)
        return (cmd.name if cmd else None), cmd, args


@click.group(cls=AliasedGroup)
@click.version_option(version=__version__, prog_name="neonotes")
def cli() -> None:
    """A personal notes manager with a natural-language agent.

    Run 'neonotes serve' to open the web client.
    """
    ensure_setup()


# Register all command groups
register_note_commands(cli)
register_ask_commands(cli)
register_config_commands(cli)
register_web_commands(cli)
