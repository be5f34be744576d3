"""
Note Schemas.

Pydantic schemas for note API request/response validation.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from eisenhower.backend.core.utils import to_naive_utc


class NoteCreate(BaseModel):
    """Schema for creating a new note. An empty title is rejected by the service."""

    title: str | None = Field(
        default=None,
        max_length=255,
        description="Note title",
        examples=["File taxes"],
    )
    description: str | None = Field(
        default=None,
        max_length=1000,
        description="Short description",
    )
    content: str | None = Field(
        default=None,
        max_length=10000,
        description="Markdown content",
    )
    quadrant: int = Field(
        default=0,
        description="0 = unclassified, 1-4 = priority quadrants",
    )
    due_date: datetime | None = Field(
        default=None,
        description="Optional due date",
    )

    @field_validator("due_date")
    @classmethod
    def due_date_as_utc(cls, value: datetime | None) -> datetime | None:
        return to_naive_utc(value)


class NoteUpdate(BaseModel):
    """
    Schema for updating an existing note.

    Only fields present in the request body are applied.
    """

    title: str | None = Field(default=None, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    content: str | None = Field(default=None, max_length=10000)
    quadrant: int | None = Field(default=None)
    due_date: datetime | None = Field(default=None)
    is_archived: bool | None = Field(default=None)

    @field_validator("due_date")
    @classmethod
    def due_date_as_utc(cls, value: datetime | None) -> datetime | None:
        return to_naive_utc(value)


class NoteResponse(BaseModel):
    """Schema for note in API responses."""

    id: str = Field(description="Note unique identifier")
    title: str = Field(description="Note title")
    description: str | None = Field(description="Short description")
    content: str | None = Field(description="Markdown content")
    quadrant: int = Field(description="Quadrant the note belongs to")
    position: int = Field(description="Order inside the quadrant")
    due_date: datetime | None = Field(description="Due date")
    is_archived: bool = Field(description="Whether the note is archived")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)


class NoteReorderItem(BaseModel):
    """Target placement of one note in a batch reorder."""

    id: str
    quadrant: int
    position: int


class NoteReorderRequest(BaseModel):
    """Body of a batch reorder. A missing list is rejected by the service."""

    updates: list[NoteReorderItem] | None = None


class NoteReorderResponse(BaseModel):
    """Outcome of a batch reorder."""

    updated: int = Field(description="Number of notes placed")
