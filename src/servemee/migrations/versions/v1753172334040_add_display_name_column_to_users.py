"""Add the snake_case display_name column mapped by the ORM."""

import sqlalchemy as sa

from src.servemee.migrations.base import Migration
from src.servemee.migrations.operations import SchemaOperations


class AddDisplayNameColumnToUsers(Migration):
    version = 1753172334040
    name = "add_display_name_column_to_users"

    def up(self, op: SchemaOperations) -> None:
        op.add_column("users", sa.Column("display_name", sa.String(255), nullable=True))

    def down(self, op: SchemaOperations) -> None:
        op.drop_column("users", "display_name")
