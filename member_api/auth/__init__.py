"""Authentication and login protection for the member API."""

from member_api.auth.account_lock import AccountLockGuard, LoginOutcome
from member_api.auth.dependencies import (
    AccountGuard,
    LoginLimiter,
    RequireAdmin,
    RequireAuth,
    get_account_guard,
    get_login_limiter,
    require_admin,
    require_auth,
)
from member_api.auth.login_limiter import AttemptLimiter, AttemptRecord
from member_api.auth.password import hash_password, needs_rehash, verify_password
from member_api.auth.session import (
    SessionData,
    create_session,
    delete_member_sessions,
    delete_session,
    validate_session,
)

__all__ = [
    # Login protection
    "AttemptLimiter",
    "AttemptRecord",
    "AccountLockGuard",
    "LoginOutcome",
    # Password
    "hash_password",
    "verify_password",
    "needs_rehash",
    # Session
    "SessionData",
    "create_session",
    "delete_session",
    "delete_member_sessions",
    "validate_session",
    # Dependencies
    "require_auth",
    "require_admin",
    "get_login_limiter",
    "get_account_guard",
    # Type aliases
    "RequireAuth",
    "RequireAdmin",
    "LoginLimiter",
    "AccountGuard",
]
