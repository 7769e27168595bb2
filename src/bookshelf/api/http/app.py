"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from src.bookshelf.api.http.app_data import ApplicationDependencies
from src.bookshelf.api.http.errors import (
    INTERNAL_ERROR_MESSAGE,
    error_response,
    register_error_handlers,
)
from src.bookshelf.api.http.middleware.api_key import APIKeyGuard
from src.bookshelf.api.http.middleware.limiter import TokenBucketRateLimiter
from src.bookshelf.api.http.routers import books, health
from src.bookshelf.api.utils.app_startup import configure_logging
from src.bookshelf.core.services import DbManageService, DbSessionService
from src.bookshelf.runtime.config.config_data import ConfigData
from src.bookshelf.runtime.context import get_config


# --- Security middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, environment: str = "development"):
        super().__init__(app)
        self._environment = environment

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault(
            "Referrer-Policy", "strict-origin-when-cross-origin"
        )
        response.headers.setdefault(
            "Permissions-Policy", "geolocation=(), microphone=()"
        )
        # HSTS only in prod
        if self._environment == "production":
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return response


# --- Lifecycle hooks ---
async def startup(app: FastAPI) -> None:
    config: ConfigData = app.state.config
    configure_logging(config)
    logger.info("Starting up application in {} environment", config.app.environment)

    database_service = DbSessionService(config)
    if config.database.auto_create or config.database.seed_sample_data:
        manager = DbManageService(database_service)
        manager.create_all()
        if config.database.seed_sample_data:
            manager.seed(only_if_empty=True)

    rate_limiter = None
    if config.rate_limiter.enabled:
        rate_limiter = TokenBucketRateLimiter.from_config(config.rate_limiter)
        logger.bind(
            rate=rate_limiter.rate, burst=rate_limiter.burst
        ).info("Rate limiter configured")
    else:
        logger.info("Rate limiting disabled")

    app.state.app_dependencies = ApplicationDependencies(
        config=config,
        database_service=database_service,
        api_key_guard=APIKeyGuard(config.security),
        rate_limiter=rate_limiter,
    )


async def shutdown(app: FastAPI) -> None:
    logger.info("Shutting down application")
    app_dependencies: ApplicationDependencies | None = getattr(
        app.state, "app_dependencies", None
    )
    if app_dependencies is not None:
        app_dependencies.database_service.dispose()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup(app)
    try:
        yield
    finally:
        await shutdown(app)


# --- Request logging middleware ---
async def log_requests(request: Request, call_next):
    # Correlation / tracing
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    xff = request.headers.get("x-forwarded-for")
    client_ip = (
        xff.split(",")[0].strip()
        if xff
        else request.client.host
        if request.client
        else "unknown"
    )

    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
        "user_agent": request.headers.get("user-agent", "unknown"),
    }

    start = time.perf_counter()

    # Everything that logs within this block inherits base_ctx
    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end")

            # Attach correlation id
            response.headers.setdefault("X-Request-ID", request_id)
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return error_response(
                request,
                500,
                "INTERNAL_ERROR",
                INTERNAL_ERROR_MESSAGE,
                headers={"X-Request-ID": request_id},
            )


# --- FastAPI app setup ---
def create_app(config: ConfigData | None = None) -> FastAPI:
    """Build the FastAPI application for the given configuration."""
    config = config or get_config()
    cors = config.app.cors

    if config.app.environment == "production" and "*" in cors.origins and (
        cors.allow_credentials
    ):
        raise RuntimeError(
            "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
        )

    docs_enabled = config.api.enable_docs
    app = FastAPI(
        title="Book Library API",
        lifespan=lifespan,
        docs_url=config.api.docs_path if docs_enabled else None,
        redoc_url=None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )
    app.state.config = config

    # Innermost, so its 500 responses still pass through CORS and security headers
    app.middleware("http")(log_requests)
    app.add_middleware(SecurityHeadersMiddleware, environment=config.app.environment)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors.origins,
        allow_credentials=cors.allow_credentials,
        allow_methods=cors.allow_methods,
        allow_headers=cors.allow_headers,
        expose_headers=cors.expose_headers,
        max_age=cors.max_age,
    )

    register_error_handlers(app)

    # --- Router registration ---
    app.include_router(health.router)

    base_path = config.api.base_path.rstrip("/")
    if base_path:
        app.include_router(books.router, prefix=f"{base_path}/books")
        # Unversioned paths kept for existing clients
        app.include_router(books.router, prefix="/books", include_in_schema=False)
    else:
        app.include_router(books.router, prefix="/books")

    return app


app = create_app()

# expose startup for tests
__all__ = ["app", "create_app", "startup", "shutdown"]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=get_config().app.host,
        port=get_config().app.port,
        access_log=False,  # We handle access logging in middleware
    )
