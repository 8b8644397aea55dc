"""Database migration CLI commands."""

import typer
from rich.table import Table

from src.servemee.migrations import MigrationError, MigrationRunner

from .utils import console, get_engine

db_app = typer.Typer(help="🗄️  Database schema migrations")

DatabaseUrlOption = typer.Option(
    None, "--database-url", "-d", help="Override the configured database URL"
)


def _runner(database_url: str | None) -> MigrationRunner:
    return MigrationRunner(get_engine(database_url))


@db_app.command()
def upgrade(
    target: int | None = typer.Option(
        None, "--target", "-t", help="Stop after applying this version"
    ),
    database_url: str | None = DatabaseUrlOption,
) -> None:
    """Apply pending migrations in version order."""
    try:
        applied = _runner(database_url).upgrade(target=target)
    except MigrationError as e:
        console.print(f"[red]❌ Migration failed: {e}[/red]")
        raise typer.Exit(code=1) from e

    if not applied:
        console.print("[green]✅ Database is up to date[/green]")
        return
    for migration in applied:
        console.print(f"[green]⬆️  Applied {migration.label}[/green]")


@db_app.command()
def downgrade(
    steps: int = typer.Option(1, "--steps", "-n", help="Number of migrations to revert"),
    target: int | None = typer.Option(
        None,
        "--target",
        "-t",
        help="Revert until this version is the newest applied (0 reverts all)",
    ),
    database_url: str | None = DatabaseUrlOption,
) -> None:
    """Revert the most recently applied migrations."""
    try:
        reverted = _runner(database_url).downgrade(steps=steps, target=target)
    except MigrationError as e:
        console.print(f"[red]❌ Downgrade failed: {e}[/red]")
        raise typer.Exit(code=1) from e

    if not reverted:
        console.print("[yellow]Nothing to revert[/yellow]")
        return
    for migration in reverted:
        console.print(f"[yellow]⬇️  Reverted {migration.label}[/yellow]")


@db_app.command()
def status(database_url: str | None = DatabaseUrlOption) -> None:
    """Show the current version and pending migrations."""
    runner = _runner(database_url)
    try:
        current = runner.current_version()
        pending = runner.pending()
    except MigrationError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print(f"[blue]Current version:[/blue] {current or 'none'}")
    if not pending:
        console.print("[green]✅ No pending migrations[/green]")
        return
    console.print(f"[yellow]{len(pending)} pending migration(s):[/yellow]")
    for migration in pending:
        console.print(f"  • {migration.label}")


@db_app.command()
def history(database_url: str | None = DatabaseUrlOption) -> None:
    """List every known migration and when it was applied."""
    try:
        statuses = _runner(database_url).history()
    except MigrationError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=1) from e

    table = Table(title="Schema migrations")
    table.add_column("Version", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Applied", style="yellow")
    table.add_column("Applied at", style="magenta")

    for entry in statuses:
        table.add_row(
            str(entry.version),
            entry.name,
            "✅" if entry.applied else "❌",
            entry.applied_at.isoformat() if entry.applied_at else "",
        )

    console.print(table)
