"""Health check endpoints for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

from src.servemee.api.http.app_data import ApplicationDependencies
from src.servemee.migrations import MigrationError, MigrationRunner
from src.servemee.runtime.context import get_config

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict[str, str]:
    """Liveness probe: 200 as long as the process is running."""
    return {"status": "healthy", "service": get_config().app.name}


@router.get("/ready", response_model=None)
async def readiness(request: Request) -> dict[str, Any] | JSONResponse:
    """Readiness probe: 503 unless the database is reachable and fully migrated."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    config = get_config()

    checks: dict[str, dict[str, Any]] = {}
    all_healthy = True

    db_healthy = app_deps.database_service.health_check()
    checks["database"] = {
        "status": "healthy" if db_healthy else "unhealthy",
        "type": "sqlite" if config.database.is_sqlite else "postgresql",
    }
    all_healthy = all_healthy and db_healthy

    if db_healthy:
        try:
            runner = MigrationRunner(app_deps.database_service.engine)
            pending = runner.pending()
            checks["migrations"] = {
                "status": "healthy" if not pending else "unhealthy",
                "current": runner.current_version(),
                "pending": [m.version for m in pending],
            }
            all_healthy = all_healthy and not pending
        except MigrationError as e:
            checks["migrations"] = {"status": "unhealthy", "error": str(e)}
            all_healthy = False

    checks["firebase"] = {
        "status": "healthy" if config.firebase.api_key else "degraded",
        "project_id": config.firebase.project_id,
    }

    body = {"status": "ready" if all_healthy else "not_ready", "checks": checks}
    if not all_healthy:
        return JSONResponse(status_code=503, content=body)
    return body
