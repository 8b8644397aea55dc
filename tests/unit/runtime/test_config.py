"""Templated YAML configuration and the context override system."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from src.servemee.runtime.config.config_data import (
    ConfigData,
    DatabaseConfig,
    FirebaseConfig,
    ProfileConfig,
)
from src.servemee.runtime.config.config_template import (
    load_templated_yaml,
    parse_config_text,
    substitute_env_vars,
)
from src.servemee.runtime.context import AppContext, get_config, get_context, with_context

REPOSITORY_CONFIG = Path(__file__).parents[3] / "config.yaml"

SAMPLE_YAML = """
config:
  app:
    environment: ${APP_ENVIRONMENT:-development}
    port: ${APP_PORT:-8000}
  firebase:
    project_id: ${FIREBASE_PROJECT_ID:?Firebase project is required}
    api_key: ${FIREBASE_API_KEY:-}
  database:
    url: ${DATABASE_URL:-sqlite:///./test.db}
    migrate_on_startup: ${DATABASE_MIGRATE_ON_STARTUP:-true}
"""


class TestSubstituteEnvVars:
    def test_required_variable(self):
        with patch.dict(os.environ, {"TEST_VAR": "value"}):
            assert substitute_env_vars("${TEST_VAR}") == "value"

    def test_default_used_when_missing(self):
        with patch.dict(os.environ, {}, clear=True):
            assert substitute_env_vars("${MISSING:-fallback}") == "fallback"
            assert substitute_env_vars("${MISSING:-}") == ""

    def test_missing_required_variable(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="Required environment variable MISSING not set"):
                substitute_env_vars("${MISSING}")

    def test_custom_error_message(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="MISSING: needed for auth"):
                substitute_env_vars("${MISSING:?needed for auth}")

    def test_comment_lines_left_alone(self):
        text = "# set ${NOT_SET_ANYWHERE} to override\nkey: ${PRESENT:-on}\n"
        with patch.dict(os.environ, {}, clear=True):
            assert substitute_env_vars(text) == (
                "# set ${NOT_SET_ANYWHERE} to override\nkey: on\n"
            )

    def test_default_may_contain_colons(self):
        with patch.dict(os.environ, {}, clear=True):
            assert (
                substitute_env_vars("${URL:-postgresql://u:p@db:5432/app}")
                == "postgresql://u:p@db:5432/app"
            )


class TestLoadTemplatedYaml:
    def test_parses_sections(self):
        env = {"FIREBASE_PROJECT_ID": "my-project", "DATABASE_MIGRATE_ON_STARTUP": "false"}
        with patch.dict(os.environ, env, clear=True):
            config = parse_config_text(SAMPLE_YAML)

        assert config.firebase.project_id == "my-project"
        assert config.firebase.issuer == "https://securetoken.google.com/my-project"
        assert config.database.migrate_on_startup is False
        assert config.app.port == 8000

    def test_missing_project_fails(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="Firebase project is required"):
                parse_config_text(SAMPLE_YAML)

    def test_environment_prefixed_overrides(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text(SAMPLE_YAML)
        env = {
            "APP_ENVIRONMENT": "production",
            "FIREBASE_PROJECT_ID": "dev-project",
            "PRODUCTION_FIREBASE_PROJECT_ID": "prod-project",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_templated_yaml(path, "production")

        assert config.firebase.project_id == "prod-project"
        assert config.app.environment == "production"

    def test_invalid_yaml(self):
        with pytest.raises(ValueError):
            parse_config_text("config: [unclosed")

    def test_empty_file(self):
        with pytest.raises(ValueError, match="Failed to parse YAML"):
            parse_config_text("")

    def test_file_not_found(self):
        with pytest.raises(FileNotFoundError):
            load_templated_yaml(Path("/nonexistent/config.yaml"))

    def test_repository_config_loads(self):
        with patch.dict(os.environ, {}, clear=True):
            config = load_templated_yaml(REPOSITORY_CONFIG)
        assert config.profile.phone_region == "IN"
        assert config.client.login_path == "/auth/email-password"
        assert config.jwt.allowed_algorithms == ["RS256"]


class TestProfileConfig:
    def test_region_normalized(self):
        assert ProfileConfig(phone_region="gb").phone_region == "GB"

    def test_unknown_region_rejected(self):
        with pytest.raises(ValidationError, match="No phone number format"):
            ProfileConfig(phone_region="ZZ")

    def test_unknown_region_fails_config_load(self):
        with patch.dict(os.environ, {"PROFILE_PHONE_REGION": "ZZ"}, clear=True):
            with pytest.raises(ValueError, match="Invalid configuration"):
                load_templated_yaml(REPOSITORY_CONFIG)


class TestDatabaseConfig:
    def test_sqlite_connection_string_unchanged(self):
        config = DatabaseConfig(url="sqlite:///./x.db")
        assert config.is_sqlite
        assert config.connection_string == "sqlite:///./x.db"

    def test_password_from_env_var(self):
        config = DatabaseConfig(
            url="postgresql://app@db:5432/servemee", password_env_var="DB_SECRET"
        )
        with patch.dict(os.environ, {"DB_SECRET": "s3cret"}):
            assert config.connection_string == "postgresql://app:s3cret@db:5432/servemee"

    def test_password_from_file(self, tmp_path: Path):
        secret = tmp_path / "db_password"
        secret.write_text("from-file\n")
        config = DatabaseConfig(
            url="postgresql://app@db:5432/servemee", password_file=str(secret)
        )
        assert config.password == "from-file"

    def test_missing_env_var_raises(self):
        config = DatabaseConfig(
            url="postgresql://app@db:5432/servemee", password_env_var="NOT_SET_ANYWHERE"
        )
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError):
                config.password


class TestContext:
    def test_default_context(self):
        assert isinstance(get_context(), AppContext)
        assert get_context().config is get_config()

    def test_partial_override_inherits_the_rest(self):
        original = get_config()
        with with_context(ConfigData(profile=ProfileConfig(phone_region="US"))):
            assert get_config().profile.phone_region == "US"
            assert get_config().firebase.project_id == original.firebase.project_id
        assert get_config() is original

    def test_nested_overrides(self):
        with with_context(ConfigData(firebase=FirebaseConfig(project_id="outer"))):
            with with_context(ConfigData(profile=ProfileConfig(phone_region="GB"))):
                assert get_config().firebase.project_id == "outer"
                assert get_config().profile.phone_region == "GB"
            assert get_config().profile.phone_region != "GB"

    def test_rejects_non_config(self):
        with pytest.raises(ValueError):
            with with_context({"app": {}}):
                pass

    async def test_override_visible_in_tasks(self):
        import asyncio

        async def read_project() -> str:
            return get_config().firebase.project_id

        with with_context(ConfigData(firebase=FirebaseConfig(project_id="task-project"))):
            assert await asyncio.create_task(read_project()) == "task-project"
