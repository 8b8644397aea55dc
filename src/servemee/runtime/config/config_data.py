"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

import os
from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field, computed_field, field_validator

from src.servemee.core.phone import PHONE_PATTERNS


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:3001"]
    )
    allow_credentials: bool = True
    allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
    )
    allow_headers: list[str] = Field(default=["*"])


class RateLimiterConfig(BaseModel):
    """Rate limiter configuration model."""

    requests: int = Field(
        default=10, description="Number of requests allowed per window"
    )
    window_ms: int = Field(default=60000, description="Time window in milliseconds")
    enabled: bool = Field(default=True, description="Enable rate limiting")
    per_endpoint: bool = Field(
        default=True, description="Apply rate limiting per endpoint"
    )
    per_method: bool = Field(
        default=True, description="Apply rate limiting per HTTP method"
    )


class FirebaseConfig(BaseModel):
    """Firebase Authentication project settings."""

    project_id: str = Field(default="servemee-app", description="Firebase project ID")
    api_key: str | None = Field(
        default=None, description="Web API key used for the REST sign-in endpoint"
    )
    auth_domain: str | None = Field(default=None, description="Firebase auth domain")
    storage_bucket: str | None = Field(default=None, description="Storage bucket")
    messaging_sender_id: str | None = Field(
        default=None, description="Cloud messaging sender ID"
    )
    app_id: str | None = Field(default=None, description="Firebase web app ID")
    jwks_uri: str = Field(
        default=(
            "https://www.googleapis.com/service_accounts/v1/jwk/"
            "securetoken@system.gserviceaccount.com"
        ),
        description="JWKS endpoint publishing the ID token signing keys",
    )
    jwks_cache_ttl: int = Field(
        default=3600, description="Seconds to cache the JWKS document"
    )
    sign_in_endpoint: str = Field(
        default="https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword",
        description="Identity Toolkit email/password sign-in endpoint",
    )
    request_timeout: float = Field(
        default=5.0, description="Timeout in seconds for calls to Firebase"
    )

    @computed_field
    @property
    def issuer(self) -> str:
        """Issuer Firebase stamps into ID tokens for this project."""
        return f"https://securetoken.google.com/{self.project_id}"


class JWTConfig(BaseModel):
    """ID token validation configuration."""

    allowed_algorithms: list[str] = Field(
        default_factory=lambda: ["RS256"],
        description="JWT algorithms allowed for token validation",
    )
    clock_skew: int = Field(default=60, description="Clock skew tolerance in seconds")
    max_subject_length: int = Field(
        default=128, description="Maximum length of the sub (Firebase UID) claim"
    )


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="json", description="Log format")
    file: str | None = Field(default="logs/app.log", description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./servemee.db",
        description="Database connection URL",
    )
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    echo: bool = Field(default=False, description="Echo SQL statements")
    migrate_on_startup: bool = Field(
        default=True, description="Apply pending migrations when the API starts"
    )
    password_env_var: str | None = Field(
        default=None,
        description="Environment variable name containing database password",
    )
    password_file: str | None = Field(
        default=None,
        description="Path to file containing database password",
    )

    @computed_field
    @property
    def password(self) -> str | None:
        """Resolve the database password.

        A password embedded in the URL wins; otherwise the mounted secrets file
        named by ``password_file`` and then the environment variable named by
        ``password_env_var`` are consulted.
        """
        from sqlalchemy.engine import make_url

        url_obj = make_url(self.url)
        if url_obj.password:
            return url_obj.password

        if self.password_file:
            try:
                with open(self.password_file) as f:
                    return f.read().strip()
            except OSError as e:
                raise ValueError("Failed to read database password from file.") from e

        if self.password_env_var:
            password = os.getenv(self.password_env_var)
            if not password:
                raise ValueError(
                    f"Environment variable {self.password_env_var} not set"
                )
            return password

        return None

    @computed_field
    @property
    def connection_string(self) -> str:
        """Construct the database connection string with the resolved password."""
        from sqlalchemy.engine import make_url

        base_url = make_url(self.url)
        if base_url.get_backend_name() == "sqlite":
            return self.url

        resolved_password = self.password
        if resolved_password and resolved_password != base_url.password:
            if base_url.password:
                logger.warning(
                    "Database password from the secrets source does not match the one in the URL. "
                    "Using the secrets source."
                )
            base_url = base_url.set(password=resolved_password)

        # render without SQLAlchemy's password masking
        return base_url.render_as_string(hide_password=False)

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


class AppConfig(BaseModel):
    """Application configuration model."""

    name: str = Field(default="servemee", description="Application name")
    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="localhost", description="Application host")
    port: int = Field(default=8000, description="Application port")
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )

    @property
    def base_url(self) -> str:
        """Construct the base URL from host and port."""
        scheme = "https" if self.environment == "production" else "http"
        return f"{scheme}://{self.host}:{self.port}"


class ProfileConfig(BaseModel):
    """User profile validation settings."""

    phone_region: str = Field(
        default="IN", description="Region whose phone number format is accepted"
    )

    @field_validator("phone_region")
    @classmethod
    def _known_region(cls, value: str) -> str:
        region = value.upper()
        if region not in PHONE_PATTERNS:
            raise ValueError(
                f"No phone number format for region {value!r}; "
                f"expected one of {sorted(PHONE_PATTERNS)}"
            )
        return region


class ClientConfig(BaseModel):
    """Settings consumed by the client-side auth helpers."""

    backend_url: str = Field(
        default="http://localhost:8000", description="Base URL of this API"
    )
    login_path: str = Field(
        default="/auth/email-password",
        description="Where unauthenticated visitors are sent",
    )
    role_fallback_path: str = Field(
        default="/dashboard",
        description="Where authenticated users with the wrong role are sent",
    )
    profile_timeout: float = Field(
        default=5.0, description="Timeout in seconds for the profile lookup"
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    rate_limiter: RateLimiterConfig = Field(
        default_factory=RateLimiterConfig, description="Rate limiter configuration"
    )
    firebase: FirebaseConfig = Field(
        default_factory=FirebaseConfig, description="Firebase configuration"
    )
    jwt: JWTConfig = Field(
        default_factory=JWTConfig, description="ID token validation configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    profile: ProfileConfig = Field(
        default_factory=ProfileConfig, description="Profile validation settings"
    )
    client: ClientConfig = Field(
        default_factory=ClientConfig, description="Client helper settings"
    )
