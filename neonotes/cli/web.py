"""Web server command for neonotes."""

from __future__ import annotations

import logging

import click

from neonotes.cli.utils import console
from neonotes.config import get_config


@click.command("serve")
@click.option("--host", default=None, help="Interface to bind (default from config)")
@click.option("--port", "-p", type=int, default=None, help="Port to serve on")
@click.option("--no-open", is_flag=True, help="Don't open browser automatically")
@click.option("--verbose", "-v", is_flag=True, help="Log every request")
def serve_cmd(host: str | None, port: int | None, no_open: bool, verbose: bool) -> None:
    """Start the notes server and web client.

    Press Ctrl+C to stop.
    """
    from neonotes.webserver import run_server

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    server_config = get_config().server
    host = host or server_config.host
    port = port or server_config.port

    console.print(f"[dim]Starting web server at http://{host}:{port}[/dim]")
    console.print("[dim]Press Ctrl+C to stop[/dim]")

    run_server(host=host, port=port, open_browser=not no_open)


def register_web_commands(cli: click.Group) -> None:
    """Register web commands with the CLI."""
    cli.add_command(serve_cmd)
