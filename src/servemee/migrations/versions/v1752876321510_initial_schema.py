"""Create the users table."""

import sqlalchemy as sa

from src.servemee.migrations.base import Migration
from src.servemee.migrations.operations import SchemaOperations


class InitialSchema(Migration):
    version = 1752876321510
    name = "initial_schema"

    def up(self, op: SchemaOperations) -> None:
        op.create_table(
            "users",
            sa.Column("id", sa.String(36), primary_key=True),
            sa.Column("firebase_uid", sa.String(128), nullable=False),
            sa.Column("email", sa.String(255), nullable=True),
            sa.Column("phone_number", sa.String(20), nullable=False),
            sa.Column("username", sa.String(50), nullable=True),
            sa.Column("profile_picture_url", sa.Text, nullable=True),
            sa.Column("full_name", sa.String(255), nullable=False),
            sa.Column("role", sa.String(50), nullable=False),
            sa.Column(
                "is_active", sa.Boolean, nullable=False, server_default=sa.true()
            ),
            sa.Column(
                "created_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now(),
            ),
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now(),
            ),
            sa.UniqueConstraint("firebase_uid", name="uq_users_firebase_uid"),
            sa.UniqueConstraint("email", name="uq_users_email"),
            sa.UniqueConstraint("phone_number", name="uq_users_phone_number"),
            sa.UniqueConstraint("username", name="uq_users_username"),
        )
        op.create_index("idx_users_firebase_uid", "users", ["firebase_uid"])
        op.create_index("idx_users_role", "users", ["role"])
        op.create_index("idx_users_phone_number", "users", ["phone_number"])

    def down(self, op: SchemaOperations) -> None:
        op.drop_index("idx_users_phone_number")
        op.drop_index("idx_users_role")
        op.drop_index("idx_users_firebase_uid")
        op.drop_table("users")
