"""Make phone_number optional."""

from src.servemee.migrations.base import Migration
from src.servemee.migrations.operations import SchemaOperations


class MakePhoneNumberNullableInUser(Migration):
    version = 1753047758591
    name = "make_phone_number_nullable_in_user"

    def up(self, op: SchemaOperations) -> None:
        op.alter_column_nullable("users", "phone_number", nullable=True)

    def down(self, op: SchemaOperations) -> None:
        op.alter_column_nullable("users", "phone_number", nullable=False)
