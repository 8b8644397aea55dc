"""Make full_name optional."""

from src.servemee.migrations.base import Migration
from src.servemee.migrations.operations import SchemaOperations


class UpdateUserColumnsNullability(Migration):
    version = 1753075461277
    name = "update_user_columns_nullability"

    def up(self, op: SchemaOperations) -> None:
        op.alter_column_nullable("users", "full_name", nullable=True)

    def down(self, op: SchemaOperations) -> None:
        op.alter_column_nullable("users", "full_name", nullable=False)
