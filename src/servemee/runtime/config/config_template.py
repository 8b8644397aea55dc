"""Configuration template substitution utilities."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.servemee.runtime.config.config_data import ConfigData

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message
    """

    def replacer(match: re.Match[str]) -> str:
        var_expr = match.group(1)

        # ${VAR:-default}
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)

        # ${VAR:?message}
        if ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name}: {error_msg}")
            return value

        value = os.getenv(var_expr)
        if value is None:
            raise ValueError(f"Required environment variable {var_expr} not set")
        return value

    # YAML comment lines are left as written
    return "".join(
        line if line.lstrip().startswith("#") else _PLACEHOLDER.sub(replacer, line)
        for line in text.splitlines(keepends=True)
    )


def apply_environment_overrides(env_mode: str) -> None:
    """Promote ``<ENV>_NAME`` variables to ``NAME`` for the active environment.

    ``PRODUCTION_DATABASE_URL`` becomes ``DATABASE_URL`` when running with
    ``APP_ENVIRONMENT=production``.
    """
    prefix = f"{env_mode.upper()}_"
    overrides = [(var, value) for var, value in os.environ.items() if var.startswith(prefix)]
    if overrides:
        logger.info(
            "Applying environment-specific overrides: {}",
            [var for var, _ in overrides],
        )
    for var_name, var_value in overrides:
        new_var_name = var_name[len(prefix):]
        os.environ[new_var_name] = var_value
        logger.debug("Set environment variable {} from {}", new_var_name, var_name)


def parse_config_text(content: str) -> ConfigData:
    """Substitute placeholders in ``content`` and validate it as ConfigData."""
    substituted_content = substitute_env_vars(content)

    try:
        loaded = yaml.safe_load(substituted_content)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e
    if not loaded:
        raise ValueError("Failed to parse YAML")

    try:
        return ConfigData(**(loaded.get("config") or {}))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e


def load_templated_yaml(file_path: Path, env_mode: str = "development") -> ConfigData:
    """
    Load a YAML file with environment variable substitution.

    Args:
        file_path: Path to the YAML file
        env_mode: Active environment; selects the override prefix

    Returns:
        Parsed configuration

    Raises:
        ValueError: If required environment variables are missing or the file is invalid
        FileNotFoundError: If the YAML file doesn't exist
    """
    with open(file_path) as f:
        content = f.read()

    logger.info("Loading configuration for environment: {}", env_mode)
    apply_environment_overrides(env_mode)

    config = parse_config_text(content)

    if config.app.environment != env_mode:
        logger.warning(
            "config.yaml declares environment '{}' but APP_ENVIRONMENT is '{}'",
            config.app.environment,
            env_mode,
        )

    if not config.firebase.api_key:
        logger.warning(
            "Firebase API key not configured; password sign-in without an idToken is disabled"
        )

    return config
