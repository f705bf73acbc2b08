#!/usr/bin/env python3
"""
Snack CLI.

Server management, database migrations, and data maintenance.
Built with Typer for type-safe commands and Rich for formatted output.

Usage:
    python cli.py --help

    # Server
    python cli.py server start --reload

    # Database migrations
    python cli.py db current
    python cli.py db upgrade
    python cli.py db generate -m "message"

    # Data maintenance
    python cli.py ops check-save-counts --fix
    python cli.py ops fix-public-ids
    python cli.py ops normalize-positions
    python cli.py ops table-counts

    # System info
    python cli.py system info
    python cli.py system config security
    python cli.py system health --skip-database

Options:
    --verbose, -v     Enable verbose output
    --debug, -d       Enable debug mode (detailed logging)
"""

import typer
from rich.console import Console

from snack.backend.core.config import validate_project_root
from snack.cli.commands import db_app, ops_app, server_app, system_app

app = typer.Typer(
    name="cli",
    help="Snack CLI - server management, migrations, and data maintenance.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

app.add_typer(server_app, name="server")
app.add_typer(db_app, name="db")
app.add_typer(ops_app, name="ops")
app.add_typer(system_app, name="system")


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output (INFO level logging)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode (DEBUG level logging)",
    ),
) -> None:
    """
    Snack CLI.

    Run from the project root (the directory holding .project_root).
    """
    validate_project_root()

    from snack.backend.core.logging import setup_logging

    if debug:
        setup_logging(level="DEBUG", format_type="console")
        console.print("[dim]Debug mode enabled[/dim]")
    elif verbose:
        setup_logging(level="INFO", format_type="console")
    else:
        setup_logging(level="WARNING", format_type="console")


if __name__ == "__main__":
    app()
