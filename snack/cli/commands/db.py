"""
Database migration commands, driven through Alembic's Python API.

The connection URL is resolved by migrations/env.py from config, so these
commands work the same against Postgres and a local DATABASE_URL.
"""

from pathlib import Path

import typer
from alembic import command
from alembic.config import Config
from alembic.util import CommandError
from rich.console import Console

from snack.backend.core.config import find_project_root

app = typer.Typer(help="Database migration commands")
console = Console()

ALEMBIC_INI = Path("snack") / "backend" / "migrations" / "alembic.ini"


def _alembic_config() -> Config:
    ini = find_project_root() / ALEMBIC_INI
    if not ini.exists():
        console.print(f"[red]Error: {ALEMBIC_INI} not found[/red]")
        raise typer.Exit(1)
    return Config(str(ini))


def _run(operation, *args, **kwargs) -> None:
    try:
        operation(_alembic_config(), *args, **kwargs)
    except CommandError as e:
        console.print(f"[red]Alembic error: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def upgrade(
    revision: str = typer.Option("head", "--revision", "-r", help="Target revision"),
    sql: bool = typer.Option(False, "--sql", help="Print SQL instead of running it"),
) -> None:
    """
    Upgrade the database.

    Examples:
        cli.py db upgrade
        cli.py db upgrade -r 0001 --sql
    """
    console.print(f"[bold]Upgrading database to {revision}[/bold]")
    _run(command.upgrade, revision, sql=sql)
    if not sql:
        console.print("[green]Upgrade completed[/green]")


@app.command()
def downgrade(
    revision: str = typer.Option(..., "--revision", "-r", help="Target revision, e.g. -1 or base"),
) -> None:
    console.print(f"[bold]Downgrading database to {revision}[/bold]")
    _run(command.downgrade, revision)
    console.print("[green]Downgrade completed[/green]")


@app.command()
def current() -> None:
    """Show the revision the database is at."""
    _run(command.current, verbose=True)


@app.command()
def history() -> None:
    _run(command.history, verbose=True)


@app.command()
def generate(
    message: str = typer.Option(..., "--message", "-m", help="Migration message"),
) -> None:
    """Autogenerate a revision from model changes."""
    _run(command.revision, message=message, autogenerate=True)
    console.print("[green]Migration generated[/green]")
