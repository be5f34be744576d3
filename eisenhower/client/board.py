"""
Board.

Keeps the client's copy of the notes in sync with the server.

Mutations are optimistic: the new snapshot is published at once, the
matching request is sent, and the server's answer is folded in. If the
request fails, the notes it touched go back to their pre-mutation
version and the failure is reported through on_error. Other notes keep
whatever happened to them while the request was in flight.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import httpx

from eisenhower.backend.core.config import get_app_config
from eisenhower.backend.core.logging import get_logger, log_with_source
from eisenhower.client import state as board_state
from eisenhower.client.http import APIError, NotesAPIClient
from eisenhower.client.state import BoardState, Transition

logger = get_logger(__name__)

SOURCE = "client"

ErrorCallback = Callable[[str], None]
ChangeCallback = Callable[[BoardState], None]


@dataclass
class DragSession:
    """A drag in progress."""

    note_id: str
    origin_quadrant: int
    snapshot: BoardState


class Board:
    """
    Optimistic notes board.

    Usage:
        board = Board(api, on_error=show_alert)
        await board.load()
        await board.move("note-id", 2)
    """

    def __init__(
        self,
        api: NotesAPIClient,
        on_error: ErrorCallback | None = None,
        on_change: ChangeCallback | None = None,
        capacity: int | None = None,
    ) -> None:
        self.api = api
        self.on_error = on_error
        self.on_change = on_change
        if capacity is None:
            capacity = get_app_config().application.notes.quadrant_capacity
        self.capacity = capacity
        self.state = BoardState()
        self.drag: DragSession | None = None

    def _publish(self, new_state: BoardState) -> None:
        self.state = new_state
        if self.on_change is not None:
            self.on_change(new_state)

    def _rollback(self, before: BoardState, after: BoardState) -> None:
        self._publish(board_state.revert(self.state, before, after))

    def _report(self, message: str) -> None:
        if self.on_error is not None:
            self.on_error(message)

    async def load(self) -> BoardState:
        """
        Load active notes, publish them, then merge in the archive.

        Read failures are logged and leave whatever was loaded so far.
        """
        try:
            active = await self.api.list_notes(archived=False)
        except (APIError, httpx.HTTPError) as e:
            log_with_source(logger, SOURCE, "error", "Failed to load notes", error=str(e))
            return self.state
        self._publish(board_state.load_active(self.state, active))

        try:
            archived = await self.api.list_notes(archived=True)
        except (APIError, httpx.HTTPError) as e:
            log_with_source(logger, SOURCE, "error", "Failed to load archived notes", error=str(e))
            return self.state
        self._publish(board_state.merge_archived(self.state, archived))

        log_with_source(logger, SOURCE, "debug", "Board loaded", notes=len(self.state.notes))
        return self.state

    async def dispatch(self, transition: Transition) -> bool:
        """
        Apply a transition optimistically and make it durable.

        Returns:
            True if the server accepted the change, False if it was rolled back
        """
        snapshot = self.state
        self._publish(transition.state)

        effect = transition.effect
        if effect is None:
            return True

        try:
            data = await self.api.send(effect)
        except APIError as e:
            log_with_source(
                logger,
                SOURCE,
                "warning",
                "Change rejected, restoring board",
                method=effect.method,
                path=effect.path,
                status_code=e.status_code,
                code=e.code,
            )
            self._rollback(snapshot, transition.state)
            self._report(e.message)
            return False
        except httpx.HTTPError as e:
            log_with_source(
                logger,
                SOURCE,
                "error",
                "Change not delivered, restoring board",
                method=effect.method,
                path=effect.path,
                error=str(e),
            )
            self._rollback(snapshot, transition.state)
            self._report("Could not reach the server.")
            return False

        self._publish(board_state.reconcile(self.state, effect, data))
        return True

    # Actions

    async def create(
        self,
        title: str,
        quadrant: int = 0,
        description: str | None = None,
        content: str | None = None,
        due_date: datetime | None = None,
    ) -> bool:
        return await self.dispatch(
            board_state.create_note(
                self.state,
                title,
                quadrant=quadrant,
                description=description,
                content=content,
                due_date=due_date,
            )
        )

    async def edit(self, note_id: str, **changes: Any) -> bool:
        return await self.dispatch(board_state.update_note(self.state, note_id, **changes))

    async def move(self, note_id: str, quadrant: int) -> bool:
        return await self.dispatch(board_state.move_note(self.state, note_id, quadrant))

    async def archive(self, note_id: str) -> bool:
        return await self.dispatch(board_state.archive_note(self.state, note_id))

    async def unarchive(self, note_id: str) -> bool:
        return await self.dispatch(board_state.unarchive_note(self.state, note_id))

    async def delete(self, note_id: str) -> bool:
        return await self.dispatch(board_state.delete_note(self.state, note_id))

    async def reorder(self, quadrant: int, ordered_ids: list[str]) -> bool:
        return await self.dispatch(board_state.reorder_quadrant(self.state, quadrant, ordered_ids))

    # Drag and drop

    def start_drag(self, note_id: str) -> None:
        note = self.state.get(note_id)
        if note is None:
            return
        self.drag = DragSession(note_id, note.quadrant, self.state)

    def drag_over(self, target: int | str) -> None:
        """Preview the dragged note in the hovered quadrant."""
        if self.drag is None:
            return
        self._publish(board_state.preview_drag(self.state, self.drag.note_id, target))

    def cancel_drag(self) -> None:
        """Abandon the drag and restore the board as it was."""
        if self.drag is None:
            return
        self._publish(self.drag.snapshot)
        self.drag = None

    async def drop(self, target: int | str) -> bool:
        """
        Finish the drag.

        A move is sent only when the note lands in a different quadrant that
        has room for it; otherwise the board returns to its pre-drag state.

        Returns:
            True if the move was accepted by the server
        """
        drag = self.drag
        self.drag = None
        if drag is None:
            return False

        quadrant = board_state.resolve_drop_quadrant(self.state, drag.note_id, target)
        if quadrant is None or quadrant == drag.origin_quadrant:
            self._publish(drag.snapshot)
            return False

        if not board_state.can_place(drag.snapshot, drag.note_id, quadrant, self.capacity):
            self._publish(drag.snapshot)
            self._report(f"Maximum {self.capacity} notes allowed per quadrant.")
            return False

        self._publish(drag.snapshot)
        return await self.dispatch(board_state.move_note(drag.snapshot, drag.note_id, quadrant))
