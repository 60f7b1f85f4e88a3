"""
Member API Application.

FastAPI application with structured logging, error handling,
login protection and security middleware.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from member_api.api import (
    auth_router,
    health_router,
    members_router,
    products_router,
)
from member_api.auth import AccountLockGuard, AttemptLimiter
from member_api.auth.bootstrap import ensure_bootstrap_admin
from member_api.config import Settings, get_settings
from member_api.core import (
    RequestContextMiddleware,
    RequestSizeLimitMiddleware,
    get_logger,
    setup_exception_handlers,
    setup_logging,
)
from member_api.db import dispose_engine, verify_database_connection

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings: Settings = _app.state.settings

    # Startup
    setup_logging(
        level=settings.log_level,
        json_output=not settings.debug,
        log_file=settings.log_file or None,
    )
    logger.info(
        "Starting member API",
        data={
            "host": settings.host,
            "port": settings.port,
            "debug": settings.debug,
            "cors_origins": settings.cors_origins_list,
        },
    )

    # Verify database connectivity (does NOT run migrations)
    if verify_database_connection():
        logger.info("Database connection verified")
        try:
            ensure_bootstrap_admin(settings)
        except Exception as exc:
            logger.error("Bootstrap admin failed", data={"error": str(exc)})
    else:
        logger.warning(
            "Database connection failed - run 'alembic upgrade head' to initialize"
        )

    _app.state.start_time = datetime.now(UTC)
    _app.state.login_limiter.start()

    yield

    # Shutdown
    logger.info("Shutting down member API")
    _app.state.login_limiter.stop()
    dispose_engine()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Member API",
        description="Member management REST backend with login protection",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # One limiter and one guard per process, shared by every login request
    app.state.settings = settings
    app.state.trusted_proxies = settings.trusted_proxies_set
    app.state.login_limiter = AttemptLimiter(
        max_attempts=settings.login_max_attempts,
        window_seconds=settings.login_window_seconds,
        block_seconds=settings.login_block_seconds,
        sweep_interval_seconds=settings.login_sweep_interval_seconds,
    )
    app.state.account_guard = AccountLockGuard(
        max_failed_attempts=settings.account_max_failed_attempts,
        lock_seconds=settings.account_lock_seconds,
    )

    # Setup exception handlers (must be before middleware)
    setup_exception_handlers(app)

    # Add middleware (order matters - last added = first executed)
    # 1. Request size limit (reject oversized requests early)
    app.add_middleware(
        RequestSizeLimitMiddleware,
        max_bytes=settings.max_request_bytes,
    )

    # 2. Request context (inject request ID, log requests)
    app.add_middleware(RequestContextMiddleware)

    # 3. CORS
    allow_origin_regex = None
    if not settings.is_production:
        allow_origin_regex = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
        allow_origin_regex=allow_origin_regex,
    )

    # Register routers
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(members_router)
    app.include_router(products_router)

    return app


# Create application instance
app = create_app()
