"""
FastAPI dependencies for authentication.

These dependencies protect routes, resolve the current member from the
bearer token, and hand out the process-wide login protection components
owned by the application.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from member_api.auth.account_lock import AccountLockGuard
from member_api.auth.login_limiter import AttemptLimiter
from member_api.auth.session import validate_session
from member_api.core import ForbiddenError, SessionExpiredError, UnauthorizedError
from member_api.db import get_db
from member_api.db.models import Member, MemberSession


def get_bearer_token(request: Request) -> str | None:
    """
    Extract the bearer token from the Authorization header.

    Returns:
        Token if the header is ``Bearer <token>``, None otherwise.
    """
    header = request.headers.get("authorization")
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme != "Bearer" or not token.strip():
        return None
    return token.strip()


def require_auth(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> tuple[Member, MemberSession]:
    """
    Require authentication - raises if not authenticated.

    Raises:
        UnauthorizedError: If no bearer token is present.
        SessionExpiredError: If the session is expired/invalid.
    """
    token = get_bearer_token(request)
    if not token:
        raise UnauthorizedError("Authentication required")

    result = validate_session(db, token)
    if not result:
        raise SessionExpiredError("Session expired or invalid")

    session, member = result
    return member, session


def require_admin(
    auth: Annotated[tuple[Member, MemberSession], Depends(require_auth)],
) -> tuple[Member, MemberSession]:
    """
    Require admin role - raises if not admin.

    Raises:
        ForbiddenError: If member is not admin.
    """
    member, session = auth
    if not member.is_admin:
        raise ForbiddenError("Admin access required")
    return member, session


def get_login_limiter(request: Request) -> AttemptLimiter:
    """The application's single AttemptLimiter."""
    return request.app.state.login_limiter


def get_account_guard(request: Request) -> AccountLockGuard:
    """The application's AccountLockGuard."""
    return request.app.state.account_guard


# Type aliases for cleaner dependency injection
RequireAuth = Annotated[tuple[Member, MemberSession], Depends(require_auth)]
RequireAdmin = Annotated[tuple[Member, MemberSession], Depends(require_admin)]
LoginLimiter = Annotated[AttemptLimiter, Depends(get_login_limiter)]
AccountGuard = Annotated[AccountLockGuard, Depends(get_account_guard)]
