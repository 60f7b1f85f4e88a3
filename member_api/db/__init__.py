"""Database models, engine, and session management."""

from member_api.db.base import AuditMixin, Base, TimestampMixin
from member_api.db.engine import dispose_engine, get_engine, verify_database_connection
from member_api.db.models import Member, MemberSession, Product
from member_api.db.session import get_db, get_session_factory, reset_session_factory

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "AuditMixin",
    # Engine
    "get_engine",
    "verify_database_connection",
    "dispose_engine",
    # Session
    "get_db",
    "get_session_factory",
    "reset_session_factory",
    # Models
    "Member",
    "MemberSession",
    "Product",
]
