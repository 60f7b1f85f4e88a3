"""
Login and registration flows.

Login passes through two independent layers:

1. ``AttemptLimiter`` keyed by client identity, checked before any storage
   access.
2. ``AccountLockGuard`` keyed by the account, which verifies the password
   and maintains the persistent lock state.

Callers only ever see generic messages for invalid credentials and locked
accounts, so the responses do not reveal whether an email is registered.
"""

import math

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from member_api.auth.account_lock import AccountLockGuard, LoginOutcome
from member_api.auth.login_limiter import AttemptLimiter
from member_api.auth.password import hash_password, needs_rehash
from member_api.core import (
    AccountLockedError,
    EmailTakenError,
    InvalidCredentialsError,
    RateLimitError,
    get_logger,
)
from member_api.db.models import Member
from member_api.db.repositories import (
    create_member,
    email_exists,
    get_member_by_email,
    update_last_login,
)

logger = get_logger(__name__)


def retry_after_seconds(remaining: float) -> int:
    """Whole seconds a client should wait; never 0 while blocked."""
    return max(1, math.ceil(remaining))


def authenticate(
    db: Session,
    limiter: AttemptLimiter,
    guard: AccountLockGuard,
    client_ip: str,
    email: str,
    password: str,
) -> Member:
    """
    Authenticate a login request.

    Returns:
        The authenticated member.

    Raises:
        RateLimitError: The client identity is blocked.
        InvalidCredentialsError: Unknown email or wrong password.
        AccountLockedError: The account is locked, or this attempt locked it.
        PersistenceError: Lock state could not be stored.
    """
    allowed, remaining = limiter.check_and_record(client_ip)
    if not allowed:
        raise RateLimitError(retry_after_seconds(remaining))

    member = get_member_by_email(db, email)
    if member is None:
        logger.info("Login failed: unknown account", data={"client_ip": client_ip})
        raise InvalidCredentialsError()

    outcome = guard.authenticate(db, member, password)

    if outcome is LoginOutcome.ACCOUNT_LOCKED:
        raise AccountLockedError()
    if outcome is LoginOutcome.INVALID_CREDENTIALS:
        logger.info(
            "Login failed: bad credentials",
            data={"member_id": member.id, "client_ip": client_ip},
        )
        raise InvalidCredentialsError()

    limiter.reset(client_ip)

    if needs_rehash(member.password_hash):
        member.password_hash = hash_password(password)
    update_last_login(db, member)

    logger.info("Login succeeded", data={"member_id": member.id})
    return member


def register(db: Session, name: str, email: str, password: str) -> Member:
    """
    Create a self-registered member.

    Raises:
        EmailTakenError: If the email is already registered.
    """
    if email_exists(db, email):
        raise EmailTakenError()

    try:
        member = create_member(
            db,
            name=name,
            email=email,
            password_hash=hash_password(password),
        )
    except IntegrityError as exc:
        # Lost a race with a concurrent registration of the same email
        db.rollback()
        raise EmailTakenError() from exc
    logger.info("Member registered", data={"member_id": member.id})
    return member
