"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, create_engine

from src.servemee.runtime.config.config_data import ConfigData
from src.servemee.runtime.context import get_config


class DbSessionService:
    def __init__(self, engine: Engine | None = None):
        """Use ``engine`` or build one from the database configuration."""
        self._engine = engine or self._create_engine(get_config())

    @property
    def engine(self) -> Engine:
        return self._engine

    @staticmethod
    def _create_engine(config: ConfigData) -> Engine:
        db_config = config.database
        logger.info(
            "Configuring database engine for environment: {}", config.app.environment
        )

        engine_kwargs: dict[str, Any] = {
            "echo": db_config.echo,
            "pool_pre_ping": True,
            "connect_args": DbSessionService._get_connect_args(config),
        }
        if not db_config.is_sqlite:
            engine_kwargs.update(
                pool_size=db_config.pool_size,
                max_overflow=db_config.max_overflow,
                pool_timeout=db_config.pool_timeout,
                pool_recycle=db_config.pool_recycle,
            )

        return create_engine(db_config.connection_string, **engine_kwargs)

    @staticmethod
    def _get_connect_args(config: ConfigData) -> dict[str, Any]:
        """Get database-specific connection arguments."""
        if config.database.is_sqlite:
            if config.app.environment == "production":
                logger.warning(
                    "SQLite is not recommended for production use. "
                    "Consider PostgreSQL."
                )
            return {"check_same_thread": False, "timeout": 20}

        return {
            "application_name": f"{config.app.name}_{config.app.environment}",
            "connect_timeout": 30,
        }

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(self._engine, expire_on_commit=False, autoflush=True)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Commit on success, roll back and re-raise on failure."""
        db = self.get_session()
        try:
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(
                "Database transaction failed: {}: {}", type(e).__name__, e
            )
            raise
        finally:
            db.close()

    def health_check(self) -> bool:
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except SQLAlchemyError as e:
            logger.error("Database health check failed: {}", e)
            return False

    def dispose(self) -> None:
        self._engine.dispose()
