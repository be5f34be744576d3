"""
Note Repository.

Data access layer for notes. Every query is scoped by owner.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from eisenhower.backend.core.exceptions import NotFoundError
from eisenhower.backend.models.note import Note
from eisenhower.backend.repositories.base import BaseRepository


class NoteRepository(BaseRepository[Note]):
    """
    Repository for Note model.

    Inherits standard CRUD operations from BaseRepository
    and adds owner-scoped note queries.
    """

    model = Note

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def list_for_owner(
        self,
        owner_id: str,
        archived: bool | None = False,
    ) -> list[Note]:
        """
        List an owner's notes in board order.

        Args:
            owner_id: Owner of the notes
            archived: True/False to filter on archive state, None for all notes

        Returns:
            Notes ordered by quadrant, position, then newest first
        """
        query = select(Note).where(Note.owner_id == owner_id)
        if archived is not None:
            query = query.where(Note.is_archived == archived)

        result = await self.session.execute(
            query.order_by(
                Note.quadrant.asc(),
                Note.position.asc(),
                Note.created_at.desc(),
            )
        )
        return list(result.scalars().all())

    async def get_owned_or_none(self, owner_id: str, note_id: str) -> Note | None:
        """Get a note only if it belongs to the owner."""
        result = await self.session.execute(
            select(Note).where(Note.id == note_id, Note.owner_id == owner_id)
        )
        return result.scalar_one_or_none()

    async def get_owned(self, owner_id: str, note_id: str) -> Note:
        """
        Get a note owned by the caller.

        Raises:
            NotFoundError: If the note does not exist or belongs to someone else
        """
        note = await self.get_owned_or_none(owner_id, note_id)
        if note is None:
            raise NotFoundError("Note not found")
        return note

    async def count_active_in_quadrant(self, owner_id: str, quadrant: int) -> int:
        """Count non-archived notes an owner has in a quadrant."""
        result = await self.session.execute(
            select(func.count())
            .select_from(Note)
            .where(
                Note.owner_id == owner_id,
                Note.quadrant == quadrant,
                Note.is_archived == False,  # noqa: E712
            )
        )
        return result.scalar_one()

    async def max_position(self, owner_id: str, quadrant: int) -> int | None:
        """Highest position used in a quadrant, archived notes included."""
        result = await self.session.execute(
            select(func.max(Note.position)).where(
                Note.owner_id == owner_id,
                Note.quadrant == quadrant,
            )
        )
        return result.scalar_one_or_none()

    async def get_owned_many(self, owner_id: str, note_ids: list[str]) -> dict[str, Note]:
        """Load the subset of the given notes that the owner actually owns."""
        if not note_ids:
            return {}
        result = await self.session.execute(
            select(Note).where(Note.owner_id == owner_id, Note.id.in_(note_ids))
        )
        return {note.id: note for note in result.scalars().all()}

    async def place(self, note: Note, quadrant: int, position: int) -> None:
        """Move a loaded note to a quadrant/position and flush the change."""
        note.quadrant = quadrant
        note.position = position
        await self.session.flush()
