"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from src.servemee.api.http.app_data import ApplicationDependencies
from src.servemee.api.http.errors import register_exception_handlers
from src.servemee.api.http.middleware.limiter import close_rate_limiter
from src.servemee.api.http.routers.auth import router as auth_router
from src.servemee.api.http.routers.health import router as health_router
from src.servemee.api.utils.app_startup import configure_logging
from src.servemee.core.services import (
    DbSessionService,
    FirebaseIdentityClient,
    FirebaseTokenVerifier,
    JWKSCacheInMemory,
    JwksService,
)
from src.servemee.runtime.context import get_config
from src.servemee.runtime.init_db import init_db

# Initialize logging
configure_logging()


# --- Security middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault(
            "Referrer-Policy", "strict-origin-when-cross-origin"
        )
        # HSTS only in prod
        if get_config().app.environment == "production":
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return response


# --- FastAPI app setup ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup()
    try:
        yield
    finally:
        await shutdown()


app = FastAPI(
    title=get_config().app.name,
    lifespan=lifespan,
    docs_url=None if get_config().app.environment == "production" else "/docs",
    redoc_url=None if get_config().app.environment == "production" else "/redoc",
)

app.add_middleware(SecurityHeadersMiddleware)
register_exception_handlers(app)

__all__ = ["app", "startup", "shutdown"]

# --- CORS configuration ---
if get_config().app.environment == "production" and (
    "*" in get_config().app.cors.origins
):
    raise RuntimeError(
        "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_config().app.cors.origins,
    allow_credentials=get_config().app.cors.allow_credentials,
    allow_methods=get_config().app.cors.allow_methods,
    allow_headers=get_config().app.cors.allow_headers,
)


# --- Request logging middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    xff = request.headers.get("x-forwarded-for")
    client_ip = (
        xff.split(",")[0].strip()
        if xff
        else request.client.host
        if request.client
        else "unknown"
    )

    # query strings are left out; they may carry the Firebase API key
    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
        "user_agent": request.headers.get("user-agent", "unknown"),
    }

    start = time.perf_counter()

    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end")

            response.headers.setdefault("X-Request-ID", request_id)
            return response

        except HTTPException as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=exc.status_code,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).warning("request.error")
            return JSONResponse(
                status_code=exc.status_code,
                content={"detail": exc.detail, "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )

        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal Server Error", "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )


# --- Router registration ---
app.include_router(auth_router, prefix="/auth")
app.include_router(health_router)


# --- Lifecycle hooks ---
async def startup() -> None:
    config = get_config()
    logger.info("Starting up application in {} environment", config.app.environment)

    jwks_cache = JWKSCacheInMemory(ttl=config.firebase.jwks_cache_ttl)
    jwks_service = JwksService(jwks_cache, timeout=config.firebase.request_timeout)
    database_service = DbSessionService()

    app.state.app_dependencies = ApplicationDependencies(
        jwks_cache=jwks_cache,
        jwks_service=jwks_service,
        token_verifier=FirebaseTokenVerifier(jwks_service),
        identity_client=FirebaseIdentityClient(),
        database_service=database_service,
    )

    if config.database.migrate_on_startup:
        # MigrationError aborts startup; the schema needs an operator
        init_db(database_service.engine)

    # Fetch signing keys now so a bad JWKS URI surfaces at boot
    try:
        await jwks_service.fetch_jwks(config.firebase.jwks_uri)
    except HTTPException as exc:
        logger.error("Failed to prefetch Firebase JWKS: {}", exc.detail)
        if config.app.environment == "production":
            raise RuntimeError("JWKS readiness check failed") from exc


async def shutdown() -> None:
    logger.info("Shutting down application")
    close_rate_limiter()
    app_dependencies: ApplicationDependencies = app.state.app_dependencies
    app_dependencies.jwks_cache.clear_jwks_cache()
    app_dependencies.database_service.dispose()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=get_config().app.host,
        port=get_config().app.port,
        access_log=False,  # request logging middleware covers access logs
    )
