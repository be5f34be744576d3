"""Database models. Importing this package registers every table on Base.metadata."""

from eisenhower.backend.models.base import Base
from eisenhower.backend.models.note import Note
from eisenhower.backend.models.user import User

__all__ = ["Base", "Note", "User"]
