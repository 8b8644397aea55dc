"""Add the camelCase "displayName" column."""

import sqlalchemy as sa

from src.servemee.migrations.base import Migration
from src.servemee.migrations.operations import SchemaOperations


class AddDisplayNameToUser(Migration):
    version = 1753046886697
    name = "add_display_name_to_user"

    def up(self, op: SchemaOperations) -> None:
        op.add_column("users", sa.Column("displayName", sa.String(100), nullable=True))

    def down(self, op: SchemaOperations) -> None:
        op.drop_column("users", "displayName")
