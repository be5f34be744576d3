"""
Note Model.

A note placed in one of the Eisenhower quadrants.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from eisenhower.backend.models.base import Base, TimestampMixin, UUIDMixin

UNCLASSIFIED = 0
QUADRANTS = (0, 1, 2, 3, 4)
QUADRANT_NAMES = {
    0: "Unclassified",
    1: "Do First",
    2: "Schedule",
    3: "Delegate",
    4: "Don't Do",
}


class Note(UUIDMixin, TimestampMixin, Base):
    """
    Note database model.

    quadrant 0 is the unclassified inbox; 1-4 are the priority quadrants.
    position orders notes inside a quadrant and is only meaningful relative
    to the other notes of the same owner and quadrant.
    """

    __tablename__ = "notes"
    __table_args__ = (
        Index("ix_notes_owner_quadrant", "owner_id", "quadrant", "is_archived"),
    )

    owner_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    content: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    quadrant: Mapped[int] = mapped_column(
        Integer,
        default=UNCLASSIFIED,
        nullable=False,
    )
    position: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    due_date: Mapped[datetime | None] = mapped_column(
        DateTime,
        nullable=True,
    )
    is_archived: Mapped[bool] = mapped_column(
        default=False,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, quadrant={self.quadrant}, title={self.title!r})>"
