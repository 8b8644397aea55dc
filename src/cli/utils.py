"""Shared utilities for CLI commands."""

from dotenv.main import load_dotenv
from rich.console import Console
from sqlalchemy import Engine, create_engine

# Initialize Rich console for colored output
console = Console()


def get_engine(database_url: str | None = None) -> Engine:
    """Engine for ``database_url``, or for the database configured in config.yaml.

    Configuration is loaded after ``.env`` so its values reach the templated YAML.
    """
    if database_url:
        return create_engine(database_url)

    load_dotenv()
    from src.servemee.core.services.database.db_session import DbSessionService

    return DbSessionService().engine
