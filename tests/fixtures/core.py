from __future__ import annotations

from collections.abc import Callable, Generator, Iterator
from typing import Any

import pytest
from sqlalchemy import Engine, StaticPool
from sqlmodel import Session, create_engine

from src.servemee.migrations import MigrationRunner
from src.servemee.runtime.config.config_data import (
    AppConfig,
    ConfigData,
    FirebaseConfig,
    JWTConfig,
    RateLimiterConfig,
)
from src.servemee.runtime.context import with_context
from tests.utils import firebase_id_token, oct_jwk

_HS_KEY = b"firebase-test-signing-key"
_KID = "firebase-test-key"
_PROJECT_ID = "servemee-test"
_JWKS_URI = "https://keys.servemee.test/jwks"


@pytest.fixture
def signing_key() -> bytes:
    return _HS_KEY


@pytest.fixture
def kid_for_jwt() -> str:
    return _KID


@pytest.fixture
def project_id() -> str:
    return _PROJECT_ID


@pytest.fixture
def jwks_data(signing_key: bytes, kid_for_jwt: str) -> dict[str, Any]:
    """Key set the fake JWKS endpoint serves."""
    return {"keys": [oct_jwk(signing_key, kid_for_jwt)]}


@pytest.fixture
def test_config(project_id: str) -> ConfigData:
    """Configuration override used by tests that verify tokens."""
    return ConfigData(
        app=AppConfig(environment="test"),
        firebase=FirebaseConfig(
            project_id=project_id, api_key="test-api-key", jwks_uri=_JWKS_URI
        ),
        jwt=JWTConfig(allowed_algorithms=["HS256"]),
        rate_limiter=RateLimiterConfig(requests=1000, window_ms=60000),
    )


@pytest.fixture
def config_context(test_config: ConfigData) -> Iterator[ConfigData]:
    with with_context(config_override=test_config):
        yield test_config


@pytest.fixture
def id_token_factory(
    signing_key: bytes, kid_for_jwt: str, project_id: str
) -> Callable[..., str]:
    """Mint Firebase-shaped ID tokens signed with the test key."""

    def _make(uid: str, **kwargs: Any) -> str:
        kwargs.setdefault("key", signing_key)
        kwargs.setdefault("kid", kid_for_jwt)
        kwargs.setdefault("project_id", project_id)
        return firebase_id_token(uid, **kwargs)

    return _make


@pytest.fixture
def engine() -> Generator[Engine]:
    """Empty in-memory database shared by every session of a test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def migrated_engine(engine: Engine) -> Engine:
    """In-memory database brought up to the latest migration."""
    MigrationRunner(engine).upgrade()
    return engine


@pytest.fixture
def session(migrated_engine: Engine) -> Generator[Session]:
    """Create a fresh database session for testing."""
    with Session(migrated_engine, expire_on_commit=False) as session:
        yield session
