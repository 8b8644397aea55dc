"""Apply and revert the migration chain against a database.

Applied versions are recorded in ``schema_migrations``. The chain is linear:
the applied set must always be a prefix of the ordered migrations, and each
migration runs inside its own transaction. On SQLite, DDL statements commit
as they run, so a failed migration may leave part of its schema change applied.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

import sqlalchemy as sa
from loguru import logger
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .base import Migration, MigrationError, discover_migrations, order_migrations
from .operations import ColumnState, SchemaOperations

VERSION_TABLE = "schema_migrations"

_metadata = sa.MetaData()
schema_migrations = sa.Table(
    VERSION_TABLE,
    _metadata,
    sa.Column("version", sa.BigInteger, primary_key=True, autoincrement=False),
    sa.Column("name", sa.String(255), nullable=False),
    sa.Column("applied_at", sa.DateTime(timezone=True), nullable=False),
)


@dataclass(frozen=True)
class MigrationStatus:
    version: int
    name: str
    applied: bool
    applied_at: datetime | None = None


class MigrationRunner:
    """Moves a database along the migration chain."""

    def __init__(
        self, engine: Engine, migrations: list[Migration] | None = None
    ) -> None:
        self._engine = engine
        self._migrations = (
            order_migrations(list(migrations))
            if migrations is not None
            else discover_migrations()
        )

    @property
    def migrations(self) -> list[Migration]:
        return list(self._migrations)

    def ensure_version_table(self) -> None:
        with self._engine.begin() as conn:
            schema_migrations.create(conn, checkfirst=True)

    def _applied_rows(self) -> list[sa.Row]:
        self.ensure_version_table()
        with self._engine.connect() as conn:
            return list(
                conn.execute(
                    sa.select(schema_migrations).order_by(schema_migrations.c.version)
                )
            )

    def applied_versions(self) -> list[int]:
        """Versions recorded as applied, validated against the known chain."""
        applied = [row.version for row in self._applied_rows()]
        expected = [m.version for m in self._migrations[: len(applied)]]
        if applied != expected:
            raise MigrationError(
                f"Recorded migrations {applied} are not a prefix of the known "
                f"chain {[m.version for m in self._migrations]}"
            )
        return applied

    def current_version(self) -> int | None:
        applied = self.applied_versions()
        return applied[-1] if applied else None

    def applied(self) -> list[Migration]:
        return self._migrations[: len(self.applied_versions())]

    def pending(self) -> list[Migration]:
        return self._migrations[len(self.applied_versions()) :]

    def history(self) -> list[MigrationStatus]:
        rows = {row.version: row for row in self._applied_rows()}
        return [
            MigrationStatus(
                version=m.version,
                name=m.name,
                applied=m.version in rows,
                applied_at=rows[m.version].applied_at if m.version in rows else None,
            )
            for m in self._migrations
        ]

    def _known_version(self, target: int) -> None:
        if target != 0 and target not in {m.version for m in self._migrations}:
            raise MigrationError(f"Unknown migration version {target}")

    def upgrade(self, target: int | None = None) -> list[Migration]:
        """Apply pending migrations up to and including ``target`` (all if None)."""
        if target is not None:
            self._known_version(target)
            current = self.current_version() or 0
            if target < current:
                raise MigrationError(
                    f"Target {target} is behind current version {current}; "
                    "use downgrade instead"
                )

        to_apply = [
            m for m in self.pending() if target is None or m.version <= target
        ]
        if not to_apply:
            logger.info("Database schema is up to date")
            return []

        for migration in to_apply:
            self._run(migration, "up")
        return to_apply

    def downgrade(self, steps: int = 1, target: int | None = None) -> list[Migration]:
        """Revert applied migrations, newest first.

        With ``target`` every migration newer than it is reverted; ``0`` reverts
        the whole chain. Otherwise the last ``steps`` migrations are reverted.
        """
        applied = self.applied()

        if target is not None:
            self._known_version(target)
            to_revert = [m for m in applied if m.version > target]
        else:
            if steps < 1:
                raise MigrationError("steps must be at least 1")
            to_revert = applied[-steps:] if applied else []

        for migration in reversed(to_revert):
            self._run(migration, "down")
        return list(reversed(to_revert))

    def snapshot(self, table: str) -> dict[str, ColumnState]:
        with self._engine.connect() as conn:
            return SchemaOperations(conn).snapshot(table)

    def _run(self, migration: Migration, direction: str) -> None:
        verb = "Applying" if direction == "up" else "Reverting"
        logger.info("{} migration {}", verb, migration.label)
        try:
            with self._engine.begin() as conn:
                op = SchemaOperations(conn)
                if direction == "up":
                    migration.up(op)
                    conn.execute(
                        schema_migrations.insert().values(
                            version=migration.version,
                            name=migration.name,
                            applied_at=datetime.now(UTC),
                        )
                    )
                else:
                    migration.down(op)
                    conn.execute(
                        schema_migrations.delete().where(
                            schema_migrations.c.version == migration.version
                        )
                    )
        except (SQLAlchemyError, MigrationError) as e:
            logger.error("Migration {} ({}) failed: {}", migration.label, direction, e)
            raise MigrationError(
                f"Migration {migration.label} failed during {direction}: {e}",
                migration,
            ) from e
