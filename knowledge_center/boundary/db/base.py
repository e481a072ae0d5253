"""
Declarative base, shared column mixins and the UTC clock used for timestamps.

Dependencies: sqlalchemy
System role: ORM foundation for documents and chunks
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Registry for every ORM model; Base.metadata drives table creation."""


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UUIDMixin:
    """
    UUID primary key generated client-side.

    Uuid maps to the native UUID type on PostgreSQL and to CHAR(32) on SQLite.
    """

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )


class TimestampMixin:
    """created_at set on insert; updated_at refreshed on every UPDATE statement."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )
