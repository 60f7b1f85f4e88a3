"""
SQLAlchemy ORM models.

Defines all database tables for the member API.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    false,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from member_api.core.time import utcnow
from member_api.db.base import AuditMixin, Base, TimestampMixin


def generate_uuid() -> str:
    """Generate a UUID string for primary keys."""
    return str(uuid4())


class Member(Base, TimestampMixin, AuditMixin):
    """Member account, including its login lock state."""

    __tablename__ = "members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="member", server_default="member"
    )  # member, admin
    last_login: Mapped[datetime | None] = mapped_column(nullable=True)

    # Account lock state; transitions live in member_api.auth.account_lock
    failed_login_attempts: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    is_locked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    locked_until: Mapped[datetime | None] = mapped_column(nullable=True)

    sessions: Mapped[list[MemberSession]] = relationship(
        back_populates="member", cascade="all, delete-orphan"
    )

    __table_args__ = (
        UniqueConstraint("email"),
        Index("ix_members_is_deleted", "is_deleted"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class MemberSession(Base):
    """Server-side session backing an opaque bearer token."""

    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    member_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("members.id", ondelete="CASCADE"), nullable=False
    )
    token_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)

    member: Mapped[Member] = relationship(back_populates="sessions")

    __table_args__ = (
        UniqueConstraint("token_hash"),
        Index("ix_sessions_member_id", "member_id"),
        Index("ix_sessions_expires_at", "expires_at"),
    )


class Product(Base, TimestampMixin, AuditMixin):
    """Product catalogue entry."""

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    product_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    product_description: Mapped[str] = mapped_column(
        Text, nullable=False, default="", server_default=""
    )
    product_image: Mapped[str] = mapped_column(
        String(512), nullable=False, default="", server_default=""
    )
    product_stock: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    __table_args__ = (Index("ix_products_is_deleted", "is_deleted"),)
