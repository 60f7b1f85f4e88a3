"""Core module with logging, errors, middleware, and exception handling."""

from member_api.core.errors import (
    AccountLockedError,
    AppError,
    EmailTakenError,
    ErrorCode,
    ErrorResponse,
    ForbiddenError,
    InvalidCredentialsError,
    MemberNotFoundError,
    NotFoundError,
    PersistenceError,
    ProductNotFoundError,
    RateLimitError,
    SessionExpiredError,
    UnauthorizedError,
)
from member_api.core.logging import get_logger, get_request_id, setup_logging
from member_api.core.middleware import (
    RequestContextMiddleware,
    RequestSizeLimitMiddleware,
    get_client_ip,
    setup_exception_handlers,
)

__all__ = [
    "get_logger",
    "get_request_id",
    "setup_logging",
    "RequestContextMiddleware",
    "RequestSizeLimitMiddleware",
    "get_client_ip",
    "setup_exception_handlers",
    # Errors
    "AppError",
    "ErrorCode",
    "ErrorResponse",
    "AccountLockedError",
    "EmailTakenError",
    "ForbiddenError",
    "InvalidCredentialsError",
    "MemberNotFoundError",
    "NotFoundError",
    "PersistenceError",
    "ProductNotFoundError",
    "RateLimitError",
    "SessionExpiredError",
    "UnauthorizedError",
]
