"""Development server CLI commands."""

import typer
from dotenv.main import load_dotenv
from rich.panel import Panel

from .utils import console

dev_app = typer.Typer(help="🚀 Development environment commands")


@dev_app.command(name="start-server")
def start_server(
    host: str = typer.Option("0.0.0.0", help="Host to bind the server to"),
    port: int = typer.Option(8000, help="Port to bind the server to"),
    reload: bool = typer.Option(True, help="Enable auto-reload on code changes"),
    log_level: str = typer.Option(
        "info", help="Log level (debug, info, warning, error, critical)"
    ),
) -> None:
    """
    🚀 Start the FastAPI development server.

    Pending migrations are applied on startup unless
    DATABASE_MIGRATE_ON_STARTUP is false.
    """
    import uvicorn

    load_dotenv()
    console.print(
        Panel.fit(
            "[bold green]Starting FastAPI Development Server[/bold green]",
            border_style="green",
        )
    )
    console.print(f"[blue]Server will be available at:[/blue] http://{host}:{port}")
    console.print("[dim]Press Ctrl+C to stop the server[/dim]")

    uvicorn.run(
        "src.servemee.api.http.app:app",
        host=host,
        port=port,
        reload=reload,
        reload_dirs=["src"] if reload else None,
        log_level=log_level,
    )
