"""Migration contract and discovery."""

from __future__ import annotations

import importlib
import inspect
import pkgutil
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from .operations import SchemaOperations

VERSIONS_PACKAGE = "src.servemee.migrations.versions"


class MigrationError(RuntimeError):
    """A migration could not be applied or reverted.

    Fatal to the run: nothing after the failing migration is attempted and the
    schema must be repaired by an operator.
    """

    def __init__(self, message: str, migration: Migration | None = None) -> None:
        super().__init__(message)
        self.migration = migration


class Migration(ABC):
    """A single forward/backward schema change.

    ``down`` must exactly invert ``up`` so the chain stays reversible.
    """

    version: ClassVar[int]
    name: ClassVar[str]

    @abstractmethod
    def up(self, op: SchemaOperations) -> None:
        """Move the schema forward one step."""

    @abstractmethod
    def down(self, op: SchemaOperations) -> None:
        """Undo exactly what ``up`` did."""

    @property
    def label(self) -> str:
        return f"{self.version}-{self.name}"

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.label}>"


def discover_migrations(module_path: str = VERSIONS_PACKAGE) -> list[Migration]:
    """Import every module in ``module_path`` and collect its migrations.

    Returns instances ordered by version. Duplicate versions are rejected.
    """
    pkg = importlib.import_module(module_path)
    found: list[Migration] = []
    for m in pkgutil.iter_modules(pkg.__path__, prefix=f"{module_path}."):
        mod = importlib.import_module(m.name)
        for _, obj in inspect.getmembers(mod, inspect.isclass):
            if (
                issubclass(obj, Migration)
                and obj is not Migration
                and obj.__module__ == mod.__name__
                and not inspect.isabstract(obj)
            ):
                found.append(obj())

    return order_migrations(found)


def order_migrations(migrations: list[Migration]) -> list[Migration]:
    """Sort migrations by version, refusing duplicate versions."""
    ordered = sorted(migrations, key=lambda m: m.version)
    seen: dict[int, Migration] = {}
    for migration in ordered:
        if migration.version in seen:
            raise MigrationError(
                f"Duplicate migration version {migration.version}: "
                f"{seen[migration.version].name} and {migration.name}",
                migration,
            )
        seen[migration.version] = migration
    return ordered
