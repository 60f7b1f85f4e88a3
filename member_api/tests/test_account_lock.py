"""
Tests for per-account lockout bookkeeping.

Uses a plain string comparison as the secret verifier so the tests do not
pay for Argon2 hashing.
"""

import threading
from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from member_api.auth import AccountLockGuard, LoginOutcome
from member_api.auth import account_lock as account_lock_module
from member_api.core import PersistenceError
from member_api.db import get_session_factory
from member_api.db.models import Member
from member_api.db.repositories import create_member, get_member_by_email, record_failed_attempt


class FakeClock:
    def __init__(self):
        self.now = datetime(2025, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def plain_verify(password: str, stored: str) -> bool:
    return password == stored


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def guard(clock):
    return AccountLockGuard(
        max_failed_attempts=5,
        lock_seconds=1800,
        verify_secret=plain_verify,
        clock=clock,
    )


@pytest.fixture
def member(db_session):
    return create_member(
        db_session,
        name="A",
        email="a@example.com",
        password_hash="correct-password",
    )


def fail(guard, db_session, member, times=1):
    return [guard.authenticate(db_session, member, "wrong") for _ in range(times)]


def test_fifth_failure_locks_and_correct_password_is_refused(guard, db_session, member):
    outcomes = fail(guard, db_session, member, times=5)

    assert outcomes == [LoginOutcome.INVALID_CREDENTIALS] * 4 + [LoginOutcome.ACCOUNT_LOCKED]
    assert guard.authenticate(db_session, member, "correct-password") is LoginOutcome.ACCOUNT_LOCKED


def test_lock_state_is_persisted(guard, db_session, member, clock):
    fail(guard, db_session, member, times=5)

    db_session.expire_all()
    stored = get_member_by_email(db_session, "a@example.com")
    assert stored.is_locked is True
    assert stored.failed_login_attempts == 5
    assert stored.locked_until == clock.now + timedelta(seconds=1800)


def test_failures_below_threshold_accumulate(guard, db_session, member):
    fail(guard, db_session, member, times=3)

    assert member.failed_login_attempts == 3
    assert member.is_locked is False
    assert member.locked_until is None


def test_success_resets_counter(guard, db_session, member):
    fail(guard, db_session, member, times=4)

    assert guard.authenticate(db_session, member, "correct-password") is LoginOutcome.SUCCESS
    assert member.failed_login_attempts == 0

    # A fresh run of failures is needed to lock again
    outcomes = fail(guard, db_session, member, times=4)
    assert LoginOutcome.ACCOUNT_LOCKED not in outcomes


def test_locked_attempt_skips_verification(clock, db_session, member):
    calls = []

    def recording_verify(password, stored):
        calls.append(password)
        return plain_verify(password, stored)

    guard = AccountLockGuard(
        max_failed_attempts=2, lock_seconds=60, verify_secret=recording_verify, clock=clock
    )
    fail(guard, db_session, member, times=2)
    calls.clear()

    assert guard.authenticate(db_session, member, "correct-password") is LoginOutcome.ACCOUNT_LOCKED
    assert calls == []


def test_locked_attempts_do_not_grow_counter(guard, db_session, member):
    fail(guard, db_session, member, times=8)

    assert member.failed_login_attempts == 5


def test_lock_expires_and_evaluates_attempt(guard, db_session, member, clock):
    fail(guard, db_session, member, times=5)

    clock.advance(seconds=1799)
    assert guard.authenticate(db_session, member, "correct-password") is LoginOutcome.ACCOUNT_LOCKED

    clock.advance(seconds=1)
    assert guard.authenticate(db_session, member, "correct-password") is LoginOutcome.SUCCESS
    assert member.is_locked is False
    assert member.failed_login_attempts == 0
    assert member.locked_until is None


def test_expired_lock_then_wrong_password_counts_from_zero(guard, db_session, member, clock):
    fail(guard, db_session, member, times=5)
    clock.advance(minutes=31)

    assert fail(guard, db_session, member) == [LoginOutcome.INVALID_CREDENTIALS]
    assert member.failed_login_attempts == 1
    assert member.is_locked is False


def test_single_failure_threshold(clock, db_session, member):
    guard = AccountLockGuard(max_failed_attempts=1, verify_secret=plain_verify, clock=clock)

    assert fail(guard, db_session, member) == [LoginOutcome.ACCOUNT_LOCKED]


def test_is_locked(guard, db_session, member, clock):
    assert guard.is_locked(member) is False

    fail(guard, db_session, member, times=5)
    assert guard.is_locked(member) is True

    clock.advance(minutes=30)
    assert guard.is_locked(member) is False


def test_unlock(guard, db_session, member):
    fail(guard, db_session, member, times=5)

    assert guard.unlock(db_session, member.id) is True
    db_session.refresh(member)
    assert member.is_locked is False
    assert member.failed_login_attempts == 0
    assert guard.authenticate(db_session, member, "correct-password") is LoginOutcome.SUCCESS


def test_unlock_unknown_member(guard, db_session):
    assert guard.unlock(db_session, 9999) is False


def test_rejects_non_positive_threshold():
    with pytest.raises(ValueError):
        AccountLockGuard(max_failed_attempts=0)


def test_lock_applied_during_verification_wins(clock, db_session, member):
    factory = get_session_factory()

    def verify_while_locking(password, stored):
        with factory() as other:
            record_failed_attempt(other, member.id, 1, clock.now + timedelta(minutes=30))
        return plain_verify(password, stored)

    guard = AccountLockGuard(verify_secret=verify_while_locking, clock=clock)

    outcome = guard.authenticate(db_session, member, "correct-password")

    assert outcome is LoginOutcome.ACCOUNT_LOCKED
    assert member.is_locked is True


def test_success_clears_failures_added_during_verification(clock, db_session, member):
    factory = get_session_factory()

    def verify_while_failing(password, stored):
        with factory() as other:
            for _ in range(2):
                record_failed_attempt(other, member.id, 5, clock.now + timedelta(minutes=30))
        return plain_verify(password, stored)

    guard = AccountLockGuard(verify_secret=verify_while_failing, clock=clock)

    assert guard.authenticate(db_session, member, "correct-password") is LoginOutcome.SUCCESS
    assert member.failed_login_attempts == 0


def test_storage_failure_raises_persistence_error(guard, db_session, member, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("UPDATE members", {}, Exception("disk I/O error"))

    monkeypatch.setattr(account_lock_module, "record_failed_attempt", broken)

    with pytest.raises(PersistenceError):
        guard.authenticate(db_session, member, "wrong")

    # The session was rolled back and is still usable
    db_session.refresh(member)
    assert member.failed_login_attempts == 0


def test_concurrent_failures_are_not_lost(db_url, member):
    guard = AccountLockGuard(max_failed_attempts=100, verify_secret=plain_verify)
    factory = get_session_factory()
    workers = 8
    barrier = threading.Barrier(workers)
    errors: list[Exception] = []

    def worker():
        with factory() as session:
            own = session.get(Member, member.id)
            barrier.wait()
            try:
                for _ in range(3):
                    guard.authenticate(session, own, "wrong")
            except Exception as exc:  # surfaced below
                errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    with factory() as session:
        assert session.get(Member, member.id).failed_login_attempts == workers * 3


def test_concurrent_failures_lock_exactly_once(db_url, member):
    guard = AccountLockGuard(max_failed_attempts=5, verify_secret=plain_verify)
    factory = get_session_factory()
    workers = 10
    barrier = threading.Barrier(workers)
    outcomes: list[LoginOutcome] = []
    outcomes_lock = threading.Lock()

    def worker():
        with factory() as session:
            own = session.get(Member, member.id)
            barrier.wait()
            outcome = guard.authenticate(session, own, "wrong")
            with outcomes_lock:
                outcomes.append(outcome)

    threads = [threading.Thread(target=worker) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(outcomes) == workers
    assert outcomes.count(LoginOutcome.INVALID_CREDENTIALS) == 4
    assert outcomes.count(LoginOutcome.ACCOUNT_LOCKED) == 6
    with factory() as session:
        stored = session.get(Member, member.id)
        assert stored.is_locked is True
        assert stored.failed_login_attempts == 5
