"""User domain entity."""

from enum import StrEnum
from typing import Any

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.servemee.entities.core._base import Entity


class UserRole(StrEnum):
    """Roles a user can hold."""

    CONSUMER = "consumer"
    SERVICE_PROVIDER = "service_provider"
    ADMIN = "admin"


class User(Entity):
    """User entity representing a person in the system.

    Users are keyed by the Firebase UID of the identity that created them. The
    API exposes attributes in camelCase (``displayName``, ``phoneNumber``); the
    snake_case names are accepted on input as well.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    firebase_uid: str = Field(description="Firebase UID of the owning identity")
    email: str | None = Field(default=None, description="User's email address")
    phone_number: str | None = Field(default=None, description="User's phone number")
    username: str | None = Field(default=None, description="Unique handle")
    display_name: str | None = Field(default=None, description="Name shown in the UI")
    full_name: str | None = Field(default=None, description="User's full name")
    profile_picture_url: str | None = Field(
        default=None, description="URL of the user's avatar"
    )
    role: UserRole = Field(default=UserRole.CONSUMER, description="User role")
    is_active: bool = Field(default=True, description="Whether the account is active")

    def __eq__(self, other: Any) -> bool:
        """Compare users by business attributes, ignoring timestamps."""
        if not isinstance(other, User):
            return False

        return (
            self.id == other.id
            and self.firebase_uid == other.firebase_uid
            and self.email == other.email
            and self.phone_number == other.phone_number
            and self.username == other.username
            and self.display_name == other.display_name
            and self.full_name == other.full_name
            and self.profile_picture_url == other.profile_picture_url
            and self.role == other.role
            and self.is_active == other.is_active
        )

    def __hash__(self) -> int:
        """Hash based on business attributes, ignoring timestamps."""
        return hash((
            self.id,
            self.firebase_uid,
            self.email,
            self.phone_number,
            self.username,
            self.display_name,
            self.full_name,
            self.profile_picture_url,
            self.role,
            self.is_active,
        ))
