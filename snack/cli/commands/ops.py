"""
Data Maintenance Commands.

Repairs for denormalized counters, legacy public IDs, and link
positions. Each command opens its own database session and commits
only when it changes something.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from snack.backend.core.database import dispose_engine, get_session_factory
from snack.backend.core.logging import get_logger, log_with_source
from snack.backend.services.maintenance import MaintenanceService

app = typer.Typer(help="Data maintenance commands")
console = Console()
logger = get_logger(__name__)

T = TypeVar("T")


async def _with_service(
    operation: Callable[[MaintenanceService], Awaitable[T]],
    commit: bool = False,
) -> T:
    try:
        async with get_session_factory()() as session:
            result = await operation(MaintenanceService(session))
            if commit:
                await session.commit()
            return result
    finally:
        await dispose_engine()


def _run(operation: Callable[[MaintenanceService], Awaitable[T]], commit: bool = False) -> T:
    try:
        return asyncio.run(_with_service(operation, commit=commit))
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@app.command("check-save-counts")
def check_save_counts(
    fix: bool = typer.Option(False, "--fix", help="Rewrite drifted counters"),
) -> None:
    """
    Compare each list's save_count with its actual saves.

    Examples:
        cli.py ops check-save-counts
        cli.py ops check-save-counts --fix
    """
    drifted: list[dict[str, Any]] = _run(
        lambda service: service.check_save_counts(fix=fix),
        commit=fix,
    )

    if not drifted:
        console.print("[green]All save counts match[/green]")
        return

    table = Table(title="Save count drift")
    table.add_column("List", style="cyan")
    table.add_column("Title")
    table.add_column("Stored", justify="right")
    table.add_column("Actual", justify="right")
    for row in drifted:
        table.add_row(row["public_id"], row["title"], str(row["stored"]), str(row["actual"]))
    console.print(table)

    if fix:
        log_with_source(logger, "cli", "info", "Save counts repaired", fixed=len(drifted))
        console.print(f"\n[green]Fixed {len(drifted)} list(s)[/green]")
    else:
        console.print(f"\n[yellow]{len(drifted)} list(s) drifted. Re-run with --fix to repair.[/yellow]")


@app.command("fix-public-ids")
def fix_public_ids() -> None:
    """Regenerate public IDs that are not valid 8-character IDs."""
    changed = _run(lambda service: service.fix_public_ids(), commit=True)

    if not changed:
        console.print("[green]All public IDs are valid[/green]")
        return

    log_with_source(logger, "cli", "info", "Public IDs regenerated", count=len(changed))

    table = Table(title="Regenerated public IDs")
    table.add_column("Old", style="red")
    table.add_column("New", style="green")
    for old, new in changed:
        table.add_row(old, new)
    console.print(table)


@app.command("normalize-positions")
def normalize_positions() -> None:
    """Rewrite each list's link positions to 0..n-1 in their current order."""
    moved = _run(lambda service: service.normalize_positions(), commit=True)

    changed = {list_id: count for list_id, count in moved.items() if count}
    if not changed:
        console.print("[green]All link positions are contiguous[/green]")
        return

    log_with_source(logger, "cli", "info", "Link positions normalized", lists=len(changed))

    table = Table(title="Normalized lists")
    table.add_column("List ID", style="cyan")
    table.add_column("Links moved", justify="right")
    for list_id, count in changed.items():
        table.add_row(list_id, str(count))
    console.print(table)


@app.command("table-counts")
def table_counts() -> None:
    """Show row counts for every table."""
    counts = _run(lambda service: service.table_counts())

    table = Table(title="Table row counts")
    table.add_column("Table", style="cyan")
    table.add_column("Rows", justify="right")
    for name, count in counts.items():
        table.add_row(name, str(count))
    console.print(table)
