"""Verified Firebase ID token claims."""

from typing import Any

from pydantic import BaseModel, Field


class TokenClaims(BaseModel):
    """Structured representation of a verified Firebase ID token."""

    uid: str = Field(description="Firebase UID (the sub claim)")

    # Token metadata
    raw_token: str = Field(default="", description="Original JWT token")

    # Registered claims
    issuer: str = Field(description="Issuer")
    subject: str = Field(description="Subject")
    audience: str | list[str] = Field(description="Audience (the Firebase project)")
    expires_at: int = Field(description="Expiration time")
    issued_at: int = Field(description="Issued at")
    auth_time: int | None = Field(default=None, description="Time the user signed in")

    # Profile claims
    email: str | None = Field(default=None, description="Email address")
    email_verified: bool = Field(default=False, description="Email verification status")
    name: str | None = Field(default=None, description="Display name")
    picture: str | None = Field(default=None, description="Avatar URL")
    phone_number: str | None = Field(default=None, description="Phone number")

    sign_in_provider: str | None = Field(
        default=None, description="firebase.sign_in_provider, e.g. password or phone"
    )

    custom_claims: dict[str, Any] = Field(
        default_factory=dict, description="Claims not mapped to a field"
    )
