"""Versioned, reversible schema migrations for the ``users`` table."""

from .base import Migration, MigrationError, discover_migrations
from .operations import ColumnState, SchemaOperations
from .runner import MigrationRunner, MigrationStatus

__all__ = [
    "ColumnState",
    "Migration",
    "MigrationError",
    "MigrationRunner",
    "MigrationStatus",
    "SchemaOperations",
    "discover_migrations",
]
