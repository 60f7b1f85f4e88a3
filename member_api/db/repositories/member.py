"""
Member repository for database operations.

The lock-state helpers at the bottom issue single conditional UPDATE
statements so that concurrent requests against the same account are
serialized by the database's row lock instead of a read-modify-write in
Python.
"""

from datetime import datetime
from typing import NamedTuple

from sqlalchemy import case, literal, null, or_, select, update
from sqlalchemy.orm import Session

from member_api.core.time import utcnow
from member_api.db.models import Member


class LockCounters(NamedTuple):
    """Lock state read back after a failed attempt was recorded."""

    failed_login_attempts: int
    is_locked: bool


def get_member_by_id(db: Session, member_id: int) -> Member | None:
    """Get a non-deleted member by ID."""
    stmt = select(Member).where(Member.id == member_id, Member.is_deleted.is_(False))
    return db.execute(stmt).scalar_one_or_none()


def get_member_by_email(db: Session, email: str) -> Member | None:
    """Get a non-deleted member by email (case-insensitive)."""
    if not email:
        return None
    stmt = select(Member).where(
        Member.email == email.strip().lower(), Member.is_deleted.is_(False)
    )
    return db.execute(stmt).scalar_one_or_none()


def email_exists(db: Session, email: str) -> bool:
    """Check if email is taken, including by soft-deleted members."""
    if not email:
        return False
    stmt = select(Member.id).where(Member.email == email.strip().lower())
    return db.execute(stmt).first() is not None


def list_members(db: Session, limit: int = 50) -> list[Member]:
    """List non-deleted members ordered by ID."""
    stmt = (
        select(Member)
        .where(Member.is_deleted.is_(False))
        .order_by(Member.id)
        .limit(limit)
    )
    return list(db.execute(stmt).scalars())


def create_member(
    db: Session,
    name: str,
    email: str,
    password_hash: str,
    role: str = "member",
    creator_id: int | None = None,
) -> Member:
    """
    Create a new member.

    Args:
        db: Database session.
        name: Display name.
        email: Unique email address (stored lower-case).
        password_hash: Argon2id password hash.
        role: Member role (default "member").
        creator_id: ID of the member creating this one; None for self sign-up.

    Returns:
        Created Member object.
    """
    member = Member(
        name=name,
        email=email.strip().lower(),
        password_hash=password_hash,
        role=role,
        creator_id=creator_id,
    )
    db.add(member)
    db.commit()
    db.refresh(member)
    return member


def update_member(
    db: Session,
    member: Member,
    name: str | None = None,
    email: str | None = None,
    modifier_id: int | None = None,
) -> Member:
    """Update profile fields that were provided."""
    if name is not None:
        member.name = name
    if email is not None:
        member.email = email.strip().lower()
    member.last_modifier_id = modifier_id
    db.commit()
    db.refresh(member)
    return member


def soft_delete_member(db: Session, member_id: int, deleter_id: int | None = None) -> bool:
    """
    Mark a member as deleted.

    Returns:
        True if a live member was deleted, False if none matched.
    """
    now = utcnow()
    stmt = (
        update(Member)
        .where(Member.id == member_id, Member.is_deleted.is_(False))
        .values(
            is_deleted=True,
            deleted_at=now,
            last_modifier_id=deleter_id,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    db.commit()
    return result.rowcount > 0


def update_last_login(db: Session, member: Member) -> None:
    """Update member's last login timestamp."""
    member.last_login = utcnow()
    db.commit()


# ---------------------------------------------------------------------------
# Lock state
# ---------------------------------------------------------------------------


def clear_expired_lock(db: Session, member_id: int, now: datetime) -> bool:
    """
    Clear a lock whose expiry has passed.

    Only matches rows that are still locked with an expired (or missing)
    ``locked_until``, so a lock applied concurrently is left in place.

    Returns:
        True if this call cleared the lock.
    """
    stmt = (
        update(Member)
        .where(
            Member.id == member_id,
            Member.is_locked.is_(True),
            or_(Member.locked_until.is_(None), Member.locked_until <= now),
        )
        .values(is_locked=False, failed_login_attempts=0, locked_until=None)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    db.commit()
    return result.rowcount > 0


def reset_failed_attempts(db: Session, member_id: int) -> bool:
    """
    Zero the failure counter after a good login, if the member is unlocked.

    Returns:
        False if the member is locked (nothing was written).
    """
    stmt = (
        update(Member)
        .where(Member.id == member_id, Member.is_locked.is_(False))
        .values(failed_login_attempts=0)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    db.commit()
    return result.rowcount > 0


def record_failed_attempt(
    db: Session,
    member_id: int,
    max_failed_attempts: int,
    lock_until: datetime,
) -> LockCounters | None:
    """
    Atomically count a failed login and lock the account at the threshold.

    The increment and the threshold comparison happen in one UPDATE, which
    evaluates every SET expression against the pre-update row. The counters
    are read back inside the same transaction, before the row lock is
    released.

    Returns:
        The counters after the update, or None if the account was already
        locked (nothing was written).
    """
    new_count = Member.failed_login_attempts + 1
    reaches_threshold = new_count >= max_failed_attempts
    stmt = (
        update(Member)
        .where(Member.id == member_id, Member.is_locked.is_(False))
        .values(
            failed_login_attempts=new_count,
            is_locked=case((reaches_threshold, True), else_=False),
            locked_until=case(
                (reaches_threshold, literal(lock_until, Member.__table__.c.locked_until.type)),
                else_=null(),
            ),
        )
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    if result.rowcount == 0:
        db.commit()
        return None

    row = db.execute(
        select(Member.failed_login_attempts, Member.is_locked).where(Member.id == member_id)
    ).one()
    db.commit()
    return LockCounters(row.failed_login_attempts, bool(row.is_locked))


def unlock_member(db: Session, member_id: int) -> bool:
    """Administratively clear the lock state of a live member."""
    stmt = (
        update(Member)
        .where(Member.id == member_id, Member.is_deleted.is_(False))
        .values(is_locked=False, failed_login_attempts=0, locked_until=None)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    db.commit()
    return result.rowcount > 0
