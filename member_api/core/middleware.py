"""
Application middleware for observability and request hygiene.

Includes request ID injection, request size limits, and error handling.
"""

import secrets
import time
from collections.abc import Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from member_api.core.errors import AppError, ErrorCode, ErrorResponse
from member_api.core.logging import get_logger, get_request_id, request_context

logger = get_logger(__name__)


def get_client_ip(request: Request) -> str:
    """
    Extract the client IP address used to key login rate limiting.

    ``X-Forwarded-For`` is only honoured when the connecting peer is one of
    ``app.state.trusted_proxies``. The chain is walked right to left and the
    first address that is not a trusted proxy wins, so entries a client
    prepends itself are ignored.
    """
    peer = request.client.host if request.client else None
    trusted = getattr(request.app.state, "trusted_proxies", frozenset())

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded and peer in trusted:
        hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
        for hop in reversed(hops):
            if hop not in trusted:
                return hop
        if hops:
            return hops[0]

    return peer or "unknown"


def _request_id_headers(request_id: str | None) -> dict[str, str]:
    return {"X-Request-ID": request_id} if request_id else {}


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware to inject request context for logging."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request with context."""
        request_id = request.headers.get("X-Request-ID") or secrets.token_hex(8)
        start_time = time.perf_counter()

        ctx = {
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "client_ip": get_client_ip(request),
        }
        token = request_context.set(ctx)

        try:
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code}",
                data={"duration_ms": round(duration_ms, 2)},
            )

            response.headers["X-Request-ID"] = request_id
            return response

        finally:
            request_context.reset(token)


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Middleware to enforce request body size limits."""

    def __init__(self, app: FastAPI, max_bytes: int = 1048576):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Check request size before processing."""
        content_length = request.headers.get("content-length")
        request_id = get_request_id()

        try:
            declared_bytes = int(content_length) if content_length else 0
        except ValueError:
            logger.warning("Malformed Content-Length", data={"content_length": content_length})
            error_response = ErrorResponse(
                code=ErrorCode.VALIDATION_ERROR,
                message="Invalid Content-Length header",
                request_id=request_id,
            )
            return JSONResponse(
                status_code=400,
                content=error_response.to_dict(),
                headers=_request_id_headers(request_id),
            )

        if declared_bytes > self.max_bytes:
            logger.warning(
                "Request too large",
                data={"content_length": content_length, "max_bytes": self.max_bytes},
            )
            error_response = ErrorResponse(
                code=ErrorCode.REQUEST_TOO_LARGE,
                message=f"Request body exceeds {self.max_bytes} bytes",
                request_id=request_id,
            )
            return JSONResponse(
                status_code=413,
                content=error_response.to_dict(),
                headers=_request_id_headers(request_id),
            )

        return await call_next(request)


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure global exception handlers for the application."""
    from fastapi.exceptions import RequestValidationError
    from fastapi.encoders import jsonable_encoder
    from starlette.exceptions import HTTPException as StarletteHTTPException

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle validation errors with structured response."""
        request_id = get_request_id()
        error_response = ErrorResponse(
            code=ErrorCode.VALIDATION_ERROR,
            message="Validation error",
            request_id=request_id,
            details={"errors": jsonable_encoder(exc.errors())},
        )
        return JSONResponse(
            status_code=422,
            content=error_response.to_dict(),
            headers=_request_id_headers(request_id),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        _request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle HTTP exceptions with structured response."""
        request_id = get_request_id()
        code_map = {
            404: ErrorCode.NOT_FOUND,
            405: ErrorCode.METHOD_NOT_ALLOWED,
            401: ErrorCode.UNAUTHORIZED,
            403: ErrorCode.FORBIDDEN,
            429: ErrorCode.RATE_LIMITED,
        }
        error_code = code_map.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
        error_response = ErrorResponse(
            code=error_code,
            message=str(exc.detail) if exc.detail else "HTTP error",
            request_id=request_id,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response.to_dict(),
            headers=_request_id_headers(request_id),
        )

    @app.exception_handler(AppError)
    async def app_error_handler(_request: Request, exc: AppError) -> JSONResponse:
        """Handle application errors with structured response."""
        request_id = get_request_id()
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            f"Application error: {exc.message}",
            data={"code": exc.code.value, "details": exc.details},
        )
        headers = _request_id_headers(request_id)
        if exc.headers:
            headers.update(exc.headers)
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_response(request_id=request_id).to_dict(),
            headers=headers,
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected errors without exposing internals."""
        request_id = get_request_id()

        logger.error(
            "Unhandled exception",
            exc_info=exc,
            data={"path": request.url.path, "method": request.method},
        )

        error_response = ErrorResponse(
            code=ErrorCode.INTERNAL_ERROR,
            message="An unexpected error occurred",
            request_id=request_id,
        )
        return JSONResponse(
            status_code=500,
            content=error_response.to_dict(),
            headers=_request_id_headers(request_id),
        )
