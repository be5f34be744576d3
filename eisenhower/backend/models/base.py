"""
Declarative base and the columns every table shares.
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from eisenhower.backend.core.utils import new_id, utc_now


class Base(DeclarativeBase):
    pass


class UUIDMixin:
    """Text UUID primary key, assigned on insert."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)


class TimestampMixin:
    """created_at on insert; updated_at on insert and on every ORM update."""

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now, nullable=False
    )
