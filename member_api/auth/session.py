"""
Session management for authentication.

Sessions are stored server-side with the token hashed (never stored in
plain text). The plain token is returned once to the client, which sends it
back as ``Authorization: Bearer <token>``.
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from member_api.config import get_settings
from member_api.core.time import utcnow
from member_api.db.models import Member, MemberSession


@dataclass
class SessionData:
    """Session data returned from session operations."""

    session_id: str
    member_id: int
    token: str  # Plain token, shown to the client once
    expires_at: datetime


def _hash_token(token: str) -> str:
    """
    Hash a session token for storage.

    SHA-256 is enough here: the token itself carries 32 random bytes.
    """
    return hashlib.sha256(token.encode()).hexdigest()


def generate_session_token() -> str:
    """URL-safe random token string (32 bytes = 43 chars base64)."""
    return secrets.token_urlsafe(32)


def create_session(
    db: Session,
    member: Member,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> SessionData:
    """
    Create a new session for a member.

    Args:
        db: Database session.
        member: Member to create session for.
        ip_address: Client IP address.
        user_agent: Client User-Agent header.

    Returns:
        SessionData with the plain token.
    """
    settings = get_settings()

    token = generate_session_token()
    expires_at = utcnow() + timedelta(seconds=settings.session_ttl_seconds)

    session = MemberSession(
        member_id=member.id,
        token_hash=_hash_token(token),
        expires_at=expires_at,
        ip_address=ip_address,
        user_agent=user_agent[:512] if user_agent else None,
    )
    db.add(session)
    db.commit()

    return SessionData(
        session_id=session.id,
        member_id=member.id,
        token=token,
        expires_at=expires_at,
    )


def validate_session(
    db: Session,
    token: str,
) -> tuple[MemberSession, Member] | None:
    """
    Validate a session token and return session + member.

    Returns:
        Tuple of (MemberSession, Member) if valid and the member is live,
        None otherwise.
    """
    stmt = (
        select(MemberSession)
        .where(MemberSession.token_hash == _hash_token(token))
        .where(MemberSession.expires_at > utcnow())
    )
    session = db.execute(stmt).scalar_one_or_none()
    if not session:
        return None

    member = db.get(Member, session.member_id)
    if not member or member.is_deleted:
        return None

    return session, member


def delete_session(db: Session, session_id: str) -> bool:
    """Delete a session by ID. Returns True if a row was removed."""
    stmt = delete(MemberSession).where(MemberSession.id == session_id)
    result = db.execute(stmt)
    db.commit()
    return result.rowcount > 0


def delete_member_sessions(db: Session, member_id: int) -> int:
    """Delete all sessions for a member. Returns the number removed."""
    stmt = delete(MemberSession).where(MemberSession.member_id == member_id)
    result = db.execute(stmt)
    db.commit()
    return result.rowcount
