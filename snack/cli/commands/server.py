"""
Server command: run the API under uvicorn.
"""

import typer
import uvicorn
from rich.console import Console

app = typer.Typer(help="Server management commands")
console = Console()


@app.command()
def start(
    host: str = typer.Option(None, "--host", "-h", help="Defaults to application.server.host"),
    port: int = typer.Option(None, "--port", "-p", help="Defaults to application.server.port"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Restart on code changes"),
    workers: int = typer.Option(1, "--workers", "-w", min=1, help="Worker processes (ignored with --reload)"),
) -> None:
    """
    Examples:
        cli.py server start --reload
        cli.py server start --host 0.0.0.0 --port 8080 --workers 4
    """
    from snack.backend.core.config import get_app_config

    try:
        server = get_app_config().application.server
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Could not load configuration: {e}[/red]")
        raise typer.Exit(1)

    host = host or server.host
    port = port or server.port
    console.print(f"[bold]Snack API on http://{host}:{port}[/bold]" + (" [dim](reload)[/dim]" if reload else ""))

    uvicorn.run(
        "snack.backend.main:app",
        host=host,
        port=port,
        reload=reload,
        workers=None if reload else workers,
        log_config=None,
    )
