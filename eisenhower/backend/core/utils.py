"""
Clock and identifier helpers shared by models, services and middleware.

Datetimes are naive UTC everywhere so SQLite and PostgreSQL round-trip
them identically.
"""

from datetime import datetime, timezone
from uuid import uuid4


def utc_now() -> datetime:
    """Current UTC time with tzinfo stripped."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    """Server-assigned identifier: a UUID4 in its 36-character text form."""
    return str(uuid4())


def to_naive_utc(value: datetime | None) -> datetime | None:
    """Convert an offset-aware datetime to naive UTC; naive values are taken as UTC already."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
