"""
Per-account lockout after repeated authentication failures.

Lock state lives on the member row (``failed_login_attempts``,
``is_locked``, ``locked_until``) so it survives restarts and follows the
targeted account rather than the caller's network identity.

State machine per account:

    Unlocked --(failure #max)--> Locked --(locked_until passes)--> Unlocked

An expired lock is cleared lazily by the next login attempt, which is then
evaluated as an ordinary unlocked attempt.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from member_api.auth.password import verify_password
from member_api.core import PersistenceError, get_logger
from member_api.core.time import utcnow
from member_api.db.models import Member
from member_api.db.repositories import (
    clear_expired_lock,
    record_failed_attempt,
    reset_failed_attempts,
    unlock_member,
)

logger = get_logger(__name__)


class LoginOutcome(str, Enum):
    """Result of a credential check, as surfaced to the HTTP layer."""

    SUCCESS = "success"
    INVALID_CREDENTIALS = "invalid_credentials"
    ACCOUNT_LOCKED = "account_locked"


class AccountLockGuard:
    """Checks credentials while maintaining the member's lock state."""

    def __init__(
        self,
        max_failed_attempts: int = 5,
        lock_seconds: int = 1800,
        verify_secret: Callable[[str, str], bool] = verify_password,
        clock: Callable[[], datetime] = utcnow,
    ):
        if max_failed_attempts < 1:
            raise ValueError("max_failed_attempts must be at least 1")
        self.max_failed_attempts = max_failed_attempts
        self.lock_duration = timedelta(seconds=lock_seconds)
        self._verify_secret = verify_secret
        self._clock = clock

    def authenticate(self, db: Session, member: Member, password: str) -> LoginOutcome:
        """
        Verify ``password`` for ``member`` and advance its lock state.

        Every state change is committed before this returns. On return
        ``member`` reflects the stored lock state.

        Raises:
            PersistenceError: If a lock-state write fails.
        """
        now = self._clock()

        if member.is_locked:
            if member.locked_until is not None and member.locked_until > now:
                logger.warning(
                    "Login attempt on locked account",
                    data={"member_id": member.id},
                )
                return LoginOutcome.ACCOUNT_LOCKED

            self._persist(db, clear_expired_lock, member.id, now)
            db.refresh(member)
            if member.is_locked:
                # Re-locked by a concurrent request after our read
                return LoginOutcome.ACCOUNT_LOCKED
            logger.info("Account lock expired", data={"member_id": member.id})

        if self._verify_secret(password, member.password_hash):
            # The row may have been locked while the secret was being verified
            still_unlocked = self._persist(db, reset_failed_attempts, member.id)
            db.refresh(member)
            if not still_unlocked:
                logger.warning(
                    "Account locked during login attempt",
                    data={"member_id": member.id},
                )
                return LoginOutcome.ACCOUNT_LOCKED
            return LoginOutcome.SUCCESS

        counters = self._persist(
            db,
            record_failed_attempt,
            member.id,
            self.max_failed_attempts,
            now + self.lock_duration,
        )
        db.refresh(member)

        if counters is None:
            return LoginOutcome.ACCOUNT_LOCKED

        if counters.is_locked:
            logger.warning(
                "Account locked after repeated failures",
                data={
                    "member_id": member.id,
                    "failed_attempts": counters.failed_login_attempts,
                    "locked_until": member.locked_until.isoformat()
                    if member.locked_until
                    else None,
                },
            )
            return LoginOutcome.ACCOUNT_LOCKED

        return LoginOutcome.INVALID_CREDENTIALS

    def unlock(self, db: Session, member_id: int) -> bool:
        """Administratively clear lock state. Returns False if no such member."""
        unlocked = self._persist(db, unlock_member, member_id)
        if unlocked:
            logger.info("Account unlocked by administrator", data={"member_id": member_id})
        return unlocked

    def is_locked(self, member: Member) -> bool:
        """Whether ``member`` is locked right now (expired locks count as unlocked)."""
        return bool(
            member.is_locked
            and member.locked_until is not None
            and member.locked_until > self._clock()
        )

    @staticmethod
    def _persist(db: Session, operation: Callable, *args):
        try:
            return operation(db, *args)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(
                "Failed to persist account lock state",
                data={"operation": operation.__name__, "error": str(exc)},
            )
            raise PersistenceError() from exc
