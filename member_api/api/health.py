"""
Health check endpoints.

Provides liveness and readiness probes for monitoring.
"""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from member_api.config import get_settings
from member_api.db import verify_database_connection

router = APIRouter(tags=["health"])


@router.get("/health")
@router.get("/healthz")
async def healthcheck() -> dict[str, Any]:
    """
    Health check endpoint.

    Returns basic service health status. Used by load balancers,
    orchestrators, and monitoring systems.
    """
    settings = get_settings()

    return {
        "status": "ok",
        "version": "0.1.0",
        "timestamp": datetime.now(UTC).isoformat(),
        "debug": settings.debug,
    }


@router.get("/readyz")
async def readiness(request: Request) -> JSONResponse:
    """
    Readiness check endpoint.

    Ready when the database answers and the login limiter's sweep thread
    is running.
    """
    limiter = getattr(request.app.state, "login_limiter", None)
    checks: dict[str, bool] = {
        "database": verify_database_connection(),
        "login_limiter": bool(limiter is not None and limiter.running),
    }

    all_ok = all(checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if all_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ready" if all_ok else "not_ready", "checks": checks},
    )
