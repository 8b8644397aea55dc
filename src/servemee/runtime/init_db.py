"""Database initialization script."""

from loguru import logger
from sqlalchemy.engine import Engine

from src.servemee.core.services.database.db_session import DbSessionService
from src.servemee.migrations import Migration, MigrationRunner


def init_db(engine: Engine | None = None) -> list[Migration]:
    """Bring the schema up to the latest migration."""
    runner = MigrationRunner(engine or DbSessionService().engine)
    applied = runner.upgrade()
    logger.info(
        "Database schema at version {} ({} migrations applied)",
        runner.current_version(),
        len(applied),
    )
    return applied


if __name__ == "__main__":
    init_db()
