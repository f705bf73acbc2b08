"""
System commands: application info, resolved configuration, secret
presence, and an offline health check of the install.
"""

import asyncio
from collections.abc import Callable
from typing import Any, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from snack.backend.core import config as config_module

app = typer.Typer(help="System information commands")
console = Console()

SECRET_FIELDS = (
    "database_url",
    "db_password",
    "jwt_secret",
    "resend_api_key",
    "openai_api_key",
    "stripe_secret_key",
    "stripe_webhook_secret",
    "revenuecat_webhook_secret",
)


def _load_app_config() -> config_module.AppConfig:
    try:
        return config_module.get_app_config()
    except Exception as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        raise typer.Exit(1)


def _tree(label: str, data: dict[str, Any]) -> Tree:
    tree = Tree(f"[bold cyan]{label}[/bold cyan]")
    pending = [(tree, data)]
    while pending:
        node, items = pending.pop()
        for key, value in items.items():
            if isinstance(value, dict):
                pending.append((node.add(f"[cyan]{key}[/cyan]"), value))
            else:
                node.add(f"[cyan]{key}[/cyan]: {value}")
    return tree


@app.command()
def info() -> None:
    """Name, version, environment, and enabled features."""
    app_config = _load_app_config()
    application = app_config.application
    enabled = [name for name, on in app_config.features.model_dump().items() if on]

    console.print(Panel(
        f"[bold]{application.name}[/bold] {application.version}\n"
        f"{application.description}\n"
        f"Environment: {application.environment}\n"
        f"Enabled features: {', '.join(enabled) or 'none'}",
        title="Application Info",
    ))


@app.command()
def config(
    section: Optional[str] = typer.Argument(
        None,
        help=f"One of: {', '.join(config_module.CONFIG_SECTIONS)}",
    ),
) -> None:
    """Print the validated YAML configuration, or one section of it."""
    if section is not None and section not in config_module.CONFIG_SECTIONS:
        console.print(f"[red]Unknown section: {section}[/red]")
        console.print(f"Available sections: {', '.join(config_module.CONFIG_SECTIONS)}")
        raise typer.Exit(1)

    app_config = _load_app_config()
    names = [section] if section else list(config_module.CONFIG_SECTIONS)
    for name in names:
        console.print(_tree(name, getattr(app_config, name).model_dump()))


@app.command()
def secrets() -> None:
    """Which config/.env secrets are set. Values are never printed."""
    try:
        settings = config_module.get_settings()
    except Exception as e:
        console.print(f"[red]Could not load config/.env: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="secrets")
    table.add_column("name", style="cyan")
    table.add_column("state")
    for name in SECRET_FIELDS:
        table.add_row(name, "[green]set[/green]" if getattr(settings, name, "") else "[yellow]empty[/yellow]")
    console.print(table)


def _check_config() -> str:
    return config_module.get_app_config().application.name


def _check_secrets() -> str:
    config_module.get_settings()
    return "config/.env loaded"


def _check_startup_rules() -> str:
    from snack.backend.core.startup_checks import run_startup_checks

    run_startup_checks()
    return "passed"


def _check_app() -> str:
    from snack.backend.main import create_app

    return f"{len(create_app().routes)} routes"


def _check_database() -> str:
    from snack.backend.api.health import check_database
    from snack.backend.core.database import dispose_engine

    async def check() -> dict[str, Any]:
        try:
            return await check_database()
        finally:
            await dispose_engine()

    result = asyncio.run(check())
    if result["status"] != "healthy":
        raise RuntimeError(result.get("error", "unhealthy"))
    return f"{result['latency_ms']}ms"


HEALTH_CHECKS: list[tuple[str, Callable[[], str]]] = [
    ("YAML configuration", _check_config),
    ("Secrets", _check_secrets),
    ("Startup security rules", _check_startup_rules),
    ("FastAPI application", _check_app),
    ("Database", _check_database),
]


@app.command()
def health(
    skip_database: bool = typer.Option(False, "--skip-database", help="Do not open a connection"),
) -> None:
    """Check this install without starting the server. Exits 1 on any failure."""
    table = Table(title="health")
    table.add_column("check", style="cyan")
    table.add_column("result")
    table.add_column("detail", style="dim")

    failed = 0
    for name, check in HEALTH_CHECKS:
        if skip_database and check is _check_database:
            table.add_row(name, "[yellow]skipped[/yellow]", "")
            continue
        try:
            table.add_row(name, "[green]ok[/green]", check())
        except Exception as e:
            failed += 1
            table.add_row(name, "[red]failed[/red]", str(e))

    console.print(table)
    if failed:
        raise typer.Exit(1)
