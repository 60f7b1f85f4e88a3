"""
Declarative base and shared column mixins.
"""

from datetime import datetime

from sqlalchemy import Boolean, Integer, MetaData, false
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from member_api.core.time import utcnow

# Constraint names match the ones emitted by the Alembic migrations.
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class TimestampMixin:
    """Adds created_at / updated_at columns (naive UTC)."""

    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, onupdate=utcnow, nullable=False
    )


class AuditMixin:
    """Creator / modifier bookkeeping plus soft delete."""

    creator_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    last_modifier_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    deleted_at: Mapped[datetime | None] = mapped_column(nullable=True)
