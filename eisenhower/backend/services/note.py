"""
Note Service.

Business logic for the note lifecycle: listing, creation, partial
updates, moves between quadrants, archiving, deletion and batch reorder.

Quadrants 1-4 hold at most `quadrant_capacity` active (non-archived)
notes per owner. Quadrant 0 is the unbounded inbox.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from eisenhower.backend.core.config import get_app_config
from eisenhower.backend.core.exceptions import CapacityExceededError, ValidationError
from eisenhower.backend.models.note import QUADRANTS, UNCLASSIFIED, Note
from eisenhower.backend.repositories.note import NoteRepository
from eisenhower.backend.repositories.user import UserRepository
from eisenhower.backend.schemas.note import NoteCreate, NoteReorderItem, NoteUpdate
from eisenhower.backend.services.base import BaseService

NON_NULLABLE_UPDATE_FIELDS = ("title", "quadrant", "is_archived")


class NoteService(BaseService):
    """
    Service for note-related business logic.

    Every operation is scoped to the owner passed in by the caller;
    a note that belongs to someone else behaves exactly like a missing one.
    """

    def __init__(self, session: AsyncSession, quadrant_capacity: int | None = None) -> None:
        super().__init__(session)
        self.repo = NoteRepository(session)
        self.users = UserRepository(session)
        if quadrant_capacity is None:
            quadrant_capacity = get_app_config().application.notes.quadrant_capacity
        self.quadrant_capacity = quadrant_capacity

    async def list_notes(self, owner_id: str, archived: bool | None = False) -> list[Note]:
        """
        List an owner's notes in board order.

        Args:
            owner_id: Owner of the notes
            archived: False for active notes, True for the archive, None for both
        """
        notes = await self.repo.list_for_owner(owner_id, archived=archived)
        self._log_debug("Listed notes", owner_id=owner_id, archived=archived, count=len(notes))
        return notes

    async def get_note(self, owner_id: str, note_id: str) -> Note:
        """
        Get a note by ID.

        Raises:
            NotFoundError: If the note does not exist or belongs to someone else
        """
        return await self.repo.get_owned(owner_id, note_id)

    async def create_note(self, owner_id: str, data: NoteCreate) -> Note:
        """
        Create a note at the end of its quadrant.

        Raises:
            ValidationError: If the title is empty or the quadrant is out of range
            CapacityExceededError: If the target quadrant is full
        """
        self._validate_required({"title": data.title}, ["title"])
        self._validate_quadrant(data.quadrant)

        if data.quadrant != UNCLASSIFIED:
            await self._ensure_capacity(owner_id, data.quadrant)

        max_position = await self.repo.max_position(owner_id, data.quadrant)
        position = 1 if max_position is None else max_position + 1

        self._log_operation(
            "Creating note",
            owner_id=owner_id,
            quadrant=data.quadrant,
            position=position,
        )

        note = await self._execute_db_operation(
            "create_note",
            self.repo.create(
                owner_id=owner_id,
                title=data.title,
                description=data.description,
                content=data.content,
                quadrant=data.quadrant,
                position=position,
                due_date=data.due_date,
                is_archived=False,
            ),
        )

        self._log_debug("Note created", note_id=note.id)
        return note

    async def update_note(self, owner_id: str, note_id: str, data: NoteUpdate) -> Note:
        """
        Apply a partial update to a note.

        Only fields present in the request are touched. Moving the note to a
        different non-zero quadrant is capacity checked; archiving or
        unarchiving in place is not.

        Raises:
            NotFoundError: If the note does not exist or belongs to someone else
            ValidationError: If a present field carries an invalid value
            CapacityExceededError: If the note moves into a full quadrant
        """
        note = await self.repo.get_owned(owner_id, note_id)

        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            return note

        self._validate_update(update_data)

        target_quadrant = update_data.get("quadrant", note.quadrant)
        if target_quadrant != note.quadrant and target_quadrant != UNCLASSIFIED:
            await self._ensure_capacity(owner_id, target_quadrant)

        self._log_operation(
            "Updating note",
            note_id=note_id,
            fields=sorted(update_data),
        )

        return await self._execute_db_operation(
            "update_note",
            self.repo.update_instance(note, **update_data),
        )

    async def move_note(self, owner_id: str, note_id: str, quadrant: int) -> Note:
        """Move a note to another quadrant, keeping its position."""
        return await self.update_note(owner_id, note_id, NoteUpdate(quadrant=quadrant))

    async def archive_note(self, owner_id: str, note_id: str) -> Note:
        """Archive a note, freeing its slot in the quadrant."""
        return await self.update_note(owner_id, note_id, NoteUpdate(is_archived=True))

    async def unarchive_note(self, owner_id: str, note_id: str) -> Note:
        """Bring a note back from the archive into the quadrant it was in."""
        return await self.update_note(owner_id, note_id, NoteUpdate(is_archived=False))

    async def delete_note(self, owner_id: str, note_id: str) -> None:
        """
        Permanently delete a note.

        Raises:
            NotFoundError: If the note does not exist or belongs to someone else
        """
        note = await self.repo.get_owned(owner_id, note_id)
        self._log_operation("Deleting note", note_id=note_id)
        await self._execute_db_operation("delete_note", self.repo.delete_instance(note))

    async def reorder_notes(
        self,
        owner_id: str,
        updates: list[NoteReorderItem] | None,
    ) -> int:
        """
        Apply a batch of quadrant/position placements atomically.

        Items naming notes the owner does not own are skipped. Either every
        remaining item is applied or none is. Capacity is not checked.

        Returns:
            Number of notes placed

        Raises:
            ValidationError: If the batch is missing or a quadrant is out of range
            DatabaseError: If the batch could not be applied
        """
        if updates is None:
            raise ValidationError("Updates must be a list.", details={"field": "updates"})
        for item in updates:
            self._validate_quadrant(item.quadrant)

        self._log_operation("Reordering notes", owner_id=owner_id, count=len(updates))

        applied = await self._execute_db_operation(
            "reorder_notes",
            self._apply_placements(owner_id, updates),
        )

        self._log_debug("Notes reordered", owner_id=owner_id, applied=applied)
        return applied

    async def _apply_placements(self, owner_id: str, updates: list[NoteReorderItem]) -> int:
        applied = 0
        async with self.session.begin_nested():
            owned = await self.repo.get_owned_many(owner_id, [item.id for item in updates])
            for item in updates:
                note = owned.get(item.id)
                if note is None:
                    continue
                await self.repo.place(note, item.quadrant, item.position)
                applied += 1
        return applied

    async def _ensure_capacity(self, owner_id: str, quadrant: int) -> None:
        """
        Reject the operation if the quadrant already holds its limit.

        The owner row is locked first so concurrent creates and moves by the
        same owner are serialized on databases that support row locks.
        """
        await self.users.lock(owner_id)
        active = await self.repo.count_active_in_quadrant(owner_id, quadrant)
        if active >= self.quadrant_capacity:
            self._logger.warning(
                "Quadrant capacity reached",
                extra={"owner_id": owner_id, "quadrant": quadrant, "active": active},
            )
            raise CapacityExceededError(quadrant, self.quadrant_capacity)

    def _validate_quadrant(self, quadrant: Any) -> None:
        if quadrant not in QUADRANTS:
            raise ValidationError(
                "Quadrant must be between 0 and 4.",
                details={"quadrant": quadrant},
            )

    def _validate_update(self, update_data: dict[str, Any]) -> None:
        nulled = [
            name for name in NON_NULLABLE_UPDATE_FIELDS
            if name in update_data and update_data[name] is None
        ]
        if nulled:
            raise ValidationError(
                "Fields cannot be null",
                details={"null_fields": nulled},
            )

        if "title" in update_data:
            self._validate_required(update_data, ["title"])
        if "quadrant" in update_data:
            self._validate_quadrant(update_data["quadrant"])
