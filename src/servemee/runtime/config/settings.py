from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentVariables(BaseSettings):
    """Simple primitive values loaded from environment variables and .env files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Environment selection; also picks the <ENV>_ override prefix in config.yaml
    app_environment: Literal["development", "production", "test"] = Field(
        default="development"
    )

    # Location of the templated YAML configuration
    app_config_file: str = Field(default="config.yaml")
