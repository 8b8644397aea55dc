"""User database table model."""

import sqlalchemy as sa
from sqlmodel import Field

from src.servemee.entities.core._base import EntityTable


class UserTable(EntityTable, table=True):
    """Database persistence model for users.

    The ``users`` schema is owned by the migration chain in
    ``src.servemee.migrations``; this model maps the current revision. The
    legacy ``"displayName"`` column added by an earlier revision is left
    unmapped.
    """

    __tablename__ = "users"

    firebase_uid: str = Field(max_length=128, unique=True, index=True)
    email: str | None = Field(default=None, max_length=255, unique=True)
    phone_number: str | None = Field(default=None, max_length=20, unique=True, index=True)
    username: str | None = Field(default=None, max_length=50, unique=True)
    profile_picture_url: str | None = Field(default=None, sa_type=sa.Text)
    full_name: str | None = Field(default=None, max_length=255)
    display_name: str | None = Field(default=None, max_length=255)
    role: str = Field(default="consumer", max_length=50, index=True)
    is_active: bool = Field(default=True)
