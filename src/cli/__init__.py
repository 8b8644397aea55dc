"""Main CLI application module."""

import typer

from .db_commands import db_app
from .dev_commands import dev_app

# Create the main CLI application
app = typer.Typer(
    help="🛠️  servemee CLI - database and development tooling",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register command groups
app.add_typer(db_app, name="db")
app.add_typer(dev_app, name="dev")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
