"""
Structured error handling with stable error codes.

No stack traces are exposed to clients. All errors are mapped to
stable, documented error codes for reliable client handling.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes for API responses."""

    # General errors (1xxx)
    INTERNAL_ERROR = "E1000"
    VALIDATION_ERROR = "E1001"
    NOT_FOUND = "E1002"
    METHOD_NOT_ALLOWED = "E1003"
    REQUEST_TOO_LARGE = "E1004"
    RATE_LIMITED = "E1005"
    PERSISTENCE_FAILURE = "E1006"

    # Authentication errors (2xxx)
    UNAUTHORIZED = "E2000"
    INVALID_CREDENTIALS = "E2001"
    SESSION_EXPIRED = "E2002"
    EMAIL_TAKEN = "E2009"
    ACCOUNT_LOCKED = "E2011"

    # Authorization errors (3xxx)
    FORBIDDEN = "E3000"

    # Resource errors (5xxx)
    MEMBER_NOT_FOUND = "E5002"
    PRODUCT_NOT_FOUND = "E5003"


@dataclass(frozen=True)
class ErrorResponse:
    """Structured error response for API.

    Format: {error: {code, message, request_id, details?}}
    """

    code: ErrorCode
    message: str
    request_id: str | None = None
    details: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON response."""
        error: dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.request_id:
            error["request_id"] = self.request_id
        if self.details:
            error["details"] = self.details
        return {"error": error}


class AppError(Exception):
    """Base application error with structured error detail."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        self.headers = headers
        super().__init__(message)

    def to_response(self, request_id: str | None = None) -> ErrorResponse:
        """Create error response with request ID."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            request_id=request_id,
            details=self.details,
        )


# Convenience error classes
class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(self, message: str = "Resource not found", code: ErrorCode = ErrorCode.NOT_FOUND):
        super().__init__(code, message, 404)


class MemberNotFoundError(NotFoundError):
    def __init__(self, message: str = "Member not found"):
        super().__init__(message, ErrorCode.MEMBER_NOT_FOUND)


class ProductNotFoundError(NotFoundError):
    def __init__(self, message: str = "Product not found"):
        super().__init__(message, ErrorCode.PRODUCT_NOT_FOUND)


class UnauthorizedError(AppError):
    """Authentication required (401)."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(ErrorCode.UNAUTHORIZED, message, 401)


class ForbiddenError(AppError):
    """Access denied (403)."""

    def __init__(self, message: str = "Access denied"):
        super().__init__(ErrorCode.FORBIDDEN, message, 403)


class RateLimitError(AppError):
    """Rate limit exceeded (429).

    Carries the retry-after time, which is tied to the caller's own
    identity and therefore safe to reveal.
    """

    def __init__(
        self,
        retry_after_seconds: int,
        message: str = "Too many login attempts, please try again later",
    ):
        super().__init__(
            ErrorCode.RATE_LIMITED,
            message,
            429,
            details={"retry_after_seconds": retry_after_seconds},
            headers={"Retry-After": str(retry_after_seconds)},
        )
        self.retry_after_seconds = retry_after_seconds


class PersistenceError(AppError):
    """Lock-state bookkeeping could not be stored (500)."""

    def __init__(self, message: str = "Unable to complete the request"):
        super().__init__(ErrorCode.PERSISTENCE_FAILURE, message, 500)


class InvalidCredentialsError(AppError):
    """Invalid credentials (401)."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(ErrorCode.INVALID_CREDENTIALS, message, 401)


class AccountLockedError(AppError):
    """Account temporarily locked (403). Never reports remaining attempts."""

    def __init__(self, message: str = "Account is temporarily locked, please try again later"):
        super().__init__(ErrorCode.ACCOUNT_LOCKED, message, 403)


class SessionExpiredError(AppError):
    """Session expired (401)."""

    def __init__(self, message: str = "Session expired"):
        super().__init__(ErrorCode.SESSION_EXPIRED, message, 401)


class EmailTakenError(AppError):
    """Email already taken (409)."""

    def __init__(self, message: str = "Email already registered"):
        super().__init__(ErrorCode.EMAIL_TAKEN, message, 409)
