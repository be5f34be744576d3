"""
User Model.

Credential store record: login nickname, password digest and the single
refresh token slot.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from eisenhower.backend.models.base import Base, TimestampMixin, UUIDMixin


class User(UUIDMixin, TimestampMixin, Base):
    """
    User database model.

    ``refresh_token`` holds at most one outstanding token; issuing a new
    session overwrites it and logout clears it.
    """

    __tablename__ = "users"

    nickname: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
        index=True,
    )
    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    refresh_token: Mapped[str | None] = mapped_column(
        String(255),
        unique=True,
        nullable=True,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, nickname={self.nickname!r})>"
