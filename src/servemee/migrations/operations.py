"""Schema operations available to migrations.

PostgreSQL gets plain ``ALTER TABLE`` statements. SQLite cannot drop columns
that take part in constraints or change nullability in place, so those two
operations rebuild the table: create a copy with the new shape, move the rows,
swap the names and recreate the indexes.
"""

from __future__ import annotations

from typing import NamedTuple

import sqlalchemy as sa
from loguru import logger
from sqlalchemy.engine import Connection
from sqlalchemy.schema import CreateColumn

from .base import MigrationError


class ColumnState(NamedTuple):
    type: str
    nullable: bool


class SchemaOperations:
    """DDL helpers bound to the connection a migration runs on."""

    def __init__(self, connection: Connection) -> None:
        self._conn = connection
        self._dialect = connection.dialect

    @property
    def connection(self) -> Connection:
        return self._conn

    @property
    def is_sqlite(self) -> bool:
        return self._dialect.name == "sqlite"

    def _quote(self, name: str) -> str:
        return self._dialect.identifier_preparer.quote(name)

    def _inspector(self) -> sa.Inspector:
        # inspectors cache results; take a fresh one after every change
        return sa.inspect(self._conn)

    def execute(self, statement: str, **params) -> None:
        self._conn.execute(sa.text(statement), params)

    # ------------------------------------------------------------------ queries

    def table_exists(self, table: str) -> bool:
        return self._inspector().has_table(table)

    def column_exists(self, table: str, column: str) -> bool:
        if not self.table_exists(table):
            return False
        return any(c["name"] == column for c in self._inspector().get_columns(table))

    def snapshot(self, table: str) -> dict[str, ColumnState]:
        """Column name -> (type, nullable) for ``table``; empty if it does not exist."""
        if not self.table_exists(table):
            return {}
        return {
            c["name"]: ColumnState(
                str(c["type"].compile(dialect=self._dialect)), bool(c["nullable"])
            )
            for c in self._inspector().get_columns(table)
        }

    def _require_column(self, table: str, column: str) -> None:
        if not self.table_exists(table):
            raise MigrationError(f'Table "{table}" does not exist')
        if not self.column_exists(table, column):
            raise MigrationError(f'Column "{column}" does not exist on "{table}"')

    # ------------------------------------------------------------------- tables

    def create_table(self, name: str, *columns_and_constraints: sa.SchemaItem) -> None:
        if self.table_exists(name):
            raise MigrationError(f'Table "{name}" already exists')
        sa.Table(name, sa.MetaData(), *columns_and_constraints).create(self._conn)
        logger.debug("Created table {}", name)

    def drop_table(self, name: str) -> None:
        if not self.table_exists(name):
            raise MigrationError(f'Table "{name}" does not exist')
        self.execute(f"DROP TABLE {self._quote(name)}")
        logger.debug("Dropped table {}", name)

    # ------------------------------------------------------------------ columns

    def add_column(self, table: str, column: sa.Column) -> None:
        if not self.table_exists(table):
            raise MigrationError(f'Table "{table}" does not exist')
        if self.column_exists(table, column.name):
            raise MigrationError(f'Column "{column.name}" already exists on "{table}"')

        # compile against a throwaway table so dialects can inspect column.table
        sa.Table(table, sa.MetaData(), column)
        column_ddl = CreateColumn(column).compile(dialect=self._dialect)
        self.execute(f"ALTER TABLE {self._quote(table)} ADD COLUMN {column_ddl}")
        logger.debug("Added column {}.{}", table, column.name)

    def drop_column(self, table: str, column: str) -> None:
        self._require_column(table, column)
        if self.is_sqlite:
            self._rebuild_sqlite_table(table, drop=column)
        else:
            self.execute(
                f"ALTER TABLE {self._quote(table)} DROP COLUMN {self._quote(column)}"
            )
        logger.debug("Dropped column {}.{}", table, column)

    def alter_column_nullable(self, table: str, column: str, nullable: bool) -> None:
        self._require_column(table, column)
        if self.is_sqlite:
            self._rebuild_sqlite_table(table, nullability={column: nullable})
        else:
            action = "DROP NOT NULL" if nullable else "SET NOT NULL"
            self.execute(
                f"ALTER TABLE {self._quote(table)} "
                f"ALTER COLUMN {self._quote(column)} {action}"
            )
        logger.debug("Set {}.{} nullable={}", table, column, nullable)

    # ------------------------------------------------------------------ indexes

    def create_index(
        self, name: str, table: str, columns: list[str], unique: bool = False
    ) -> None:
        reflected = sa.Table(table, sa.MetaData(), autoload_with=self._conn)
        missing = [c for c in columns if c not in reflected.c]
        if missing:
            raise MigrationError(f'Cannot index "{table}": unknown columns {missing}')
        sa.Index(name, *(reflected.c[c] for c in columns), unique=unique).create(
            self._conn
        )

    def drop_index(self, name: str) -> None:
        self.execute(f"DROP INDEX {self._quote(name)}")

    # ------------------------------------------------------------------- sqlite

    def _rebuild_sqlite_table(
        self,
        table: str,
        *,
        drop: str | None = None,
        nullability: dict[str, bool] | None = None,
    ) -> None:
        nullability = nullability or {}
        insp = self._inspector()
        columns = [c for c in insp.get_columns(table) if c["name"] != drop]
        primary_key = set(insp.get_pk_constraint(table)["constrained_columns"])
        uniques = [
            u for u in insp.get_unique_constraints(table) if drop not in u["column_names"]
        ]
        indexes = [i for i in insp.get_indexes(table) if drop not in i["column_names"]]

        rebuilt_name = f"_{table}_rebuild"
        # copy left behind by an earlier failed rebuild
        if self.table_exists(rebuilt_name):
            logger.warning("Dropping leftover table {} from a failed rebuild", rebuilt_name)
            self.execute(f"DROP TABLE {self._quote(rebuilt_name)}")

        new_columns = [
            sa.Column(
                c["name"],
                c["type"],
                primary_key=c["name"] in primary_key,
                nullable=nullability.get(c["name"], c["nullable"]),
                server_default=(
                    sa.text(c["default"]) if c.get("default") is not None else None
                ),
            )
            for c in columns
        ]
        constraints = [
            sa.UniqueConstraint(*u["column_names"], name=u["name"]) for u in uniques
        ]
        sa.Table(rebuilt_name, sa.MetaData(), *new_columns, *constraints).create(
            self._conn
        )

        names = ", ".join(self._quote(c["name"]) for c in columns)
        self.execute(
            f"INSERT INTO {self._quote(rebuilt_name)} ({names}) "
            f"SELECT {names} FROM {self._quote(table)}"
        )
        self.execute(f"DROP TABLE {self._quote(table)}")
        self.execute(
            f"ALTER TABLE {self._quote(rebuilt_name)} RENAME TO {self._quote(table)}"
        )

        for index in indexes:
            cols = ", ".join(self._quote(c) for c in index["column_names"])
            unique = "UNIQUE " if index["unique"] else ""
            self.execute(
                f"CREATE {unique}INDEX {self._quote(index['name'])} "
                f"ON {self._quote(table)} ({cols})"
            )
