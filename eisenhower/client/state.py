"""
Board State.

Immutable snapshot of the notes board and the pure reducers that change it.

Every mutating reducer returns a Transition: the next snapshot plus a
NoteEffect describing the request that makes the same change on the
server. Reducers never touch their input snapshot, so the caller can keep
it around and restore it if the request fails.
"""

import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from eisenhower.backend.models.note import QUADRANTS, UNCLASSIFIED

LOCAL_ID_PREFIX = "local-"
DEFAULT_QUADRANT_CAPACITY = 10

EDITABLE_FIELDS = frozenset({
    "title",
    "description",
    "content",
    "quadrant",
    "due_date",
    "is_archived",
})


class UnknownNoteError(LookupError):
    """Raised when a reducer is asked to change a note the board does not hold."""


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _to_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


@dataclass(frozen=True)
class NoteItem:
    """Client-side copy of a note."""

    id: str
    title: str
    quadrant: int = UNCLASSIFIED
    position: int = 0
    description: str | None = None
    content: str | None = None
    due_date: datetime | None = None
    is_archived: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "NoteItem":
        """Build a note from the `data` of a note response."""
        return cls(
            id=payload["id"],
            title=payload["title"],
            quadrant=payload.get("quadrant", UNCLASSIFIED),
            position=payload.get("position", 0),
            description=payload.get("description"),
            content=payload.get("content"),
            due_date=_parse_datetime(payload.get("due_date")),
            is_archived=bool(payload.get("is_archived", False)),
            created_at=_parse_datetime(payload.get("created_at")),
            updated_at=_parse_datetime(payload.get("updated_at")),
        )

    @property
    def is_local(self) -> bool:
        """True until the server has assigned a real id."""
        return self.id.startswith(LOCAL_ID_PREFIX)


@dataclass(frozen=True)
class BoardState:
    """Snapshot of every note the board knows about, active and archived."""

    notes: tuple[NoteItem, ...] = ()

    def get(self, note_id: str) -> NoteItem | None:
        for note in self.notes:
            if note.id == note_id:
                return note
        return None

    def require(self, note_id: str) -> NoteItem:
        note = self.get(note_id)
        if note is None:
            raise UnknownNoteError(note_id)
        return note

    def ids(self) -> set[str]:
        return {note.id for note in self.notes}

    def replacing(self, note_id: str, new_note: NoteItem) -> "BoardState":
        return BoardState(tuple(new_note if n.id == note_id else n for n in self.notes))

    def without(self, note_id: str) -> "BoardState":
        return BoardState(tuple(n for n in self.notes if n.id != note_id))


@dataclass(frozen=True)
class NoteEffect:
    """
    A request the server must accept for a transition to stick.

    note_id names the local note whose entity the response replaces;
    it is None for effects whose response carries no note.
    """

    method: str
    path: str
    body: dict[str, Any] | None = None
    note_id: str | None = None


@dataclass(frozen=True)
class Transition:
    """Next snapshot plus the request that makes it durable."""

    state: BoardState
    effect: NoteEffect | None = None


@dataclass(frozen=True)
class ReorderEntry:
    id: str
    quadrant: int
    position: int

    def to_json(self) -> dict[str, Any]:
        return {"id": self.id, "quadrant": self.quadrant, "position": self.position}


def new_local_id() -> str:
    return f"{LOCAL_ID_PREFIX}{uuid.uuid4().hex}"


# Loading

def load_active(state: BoardState, payload: list[dict[str, Any]]) -> BoardState:
    """Replace the board with the active notes from the first load."""
    return BoardState(tuple(NoteItem.from_api(item) for item in payload))


def merge_archived(state: BoardState, payload: list[dict[str, Any]]) -> BoardState:
    """Append archived notes from the second load, skipping ids already present."""
    known = state.ids()
    extra = []
    for item in payload:
        if item["id"] in known:
            continue
        known.add(item["id"])
        extra.append(NoteItem.from_api(item))
    return BoardState(state.notes + tuple(extra))


# Mutations

def create_note(
    state: BoardState,
    title: str,
    quadrant: int = UNCLASSIFIED,
    description: str | None = None,
    content: str | None = None,
    due_date: datetime | None = None,
    local_id: str | None = None,
) -> Transition:
    """Add a note under a temporary local id until the server answers."""
    local_id = local_id or new_local_id()
    in_quadrant = [n.position for n in state.notes if n.quadrant == quadrant]
    note = NoteItem(
        id=local_id,
        title=title,
        quadrant=quadrant,
        position=max(in_quadrant, default=0) + 1,
        description=description,
        content=content,
        due_date=_parse_datetime(due_date),
    )
    body = {
        "title": title,
        "description": description,
        "content": content,
        "quadrant": quadrant,
        "due_date": _to_json(due_date),
    }
    return Transition(
        state=BoardState(state.notes + (note,)),
        effect=NoteEffect("POST", "/notes", body=body, note_id=local_id),
    )


def update_note(state: BoardState, note_id: str, **changes: Any) -> Transition:
    """
    Apply a partial edit.

    Raises:
        UnknownNoteError: If the board does not hold the note
        ValueError: If a change names a field that cannot be edited
    """
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Not editable: {', '.join(sorted(unknown))}")

    note = state.require(note_id)
    body = {name: _to_json(value) for name, value in changes.items()}
    if "due_date" in changes:
        changes["due_date"] = _parse_datetime(changes["due_date"])
    return Transition(
        state=state.replacing(note_id, replace(note, **changes)),
        effect=NoteEffect("PUT", f"/notes/{note_id}", body=body, note_id=note_id),
    )


def move_note(state: BoardState, note_id: str, quadrant: int) -> Transition:
    return update_note(state, note_id, quadrant=quadrant)


def archive_note(state: BoardState, note_id: str) -> Transition:
    return update_note(state, note_id, is_archived=True)


def unarchive_note(state: BoardState, note_id: str) -> Transition:
    return update_note(state, note_id, is_archived=False)


def delete_note(state: BoardState, note_id: str) -> Transition:
    """Remove a note from the board."""
    state.require(note_id)
    return Transition(
        state=state.without(note_id),
        effect=NoteEffect("DELETE", f"/notes/{note_id}"),
    )


def reorder_quadrant(state: BoardState, quadrant: int, ordered_ids: list[str]) -> Transition:
    """
    Place the given notes in a quadrant in the given order, positions from 1.

    Raises:
        UnknownNoteError: If any id is not on the board
    """
    entries = [ReorderEntry(note_id, quadrant, index) for index, note_id in enumerate(ordered_ids, start=1)]

    new_state = state
    for entry in entries:
        note = new_state.require(entry.id)
        new_state = new_state.replacing(
            entry.id, replace(note, quadrant=entry.quadrant, position=entry.position)
        )

    return Transition(
        state=new_state,
        effect=NoteEffect(
            "PUT",
            "/notes/reorder/batch",
            body={"updates": [entry.to_json() for entry in entries]},
        ),
    )


def reconcile(state: BoardState, effect: NoteEffect, data: Any) -> BoardState:
    """
    Fold the server's answer into the board.

    The server entity replaces the local one it answers for; for a create
    that is the note carrying the temporary id.
    """
    if effect.note_id is None or not isinstance(data, dict) or "id" not in data:
        return state
    if state.get(effect.note_id) is None:
        return state
    return state.replacing(effect.note_id, NoteItem.from_api(data))


def revert(state: BoardState, before: BoardState, after: BoardState) -> BoardState:
    """
    Undo one transition on the current board.

    Only notes that differ between before and after go back to their
    before version; changes to other notes made since are kept. A note the
    transition added is dropped, one it removed is put back.
    """
    touched = {note.id for note in set(before.notes) ^ set(after.notes)}
    if not touched:
        return state

    kept = []
    for note in state.notes:
        original = before.get(note.id) if note.id in touched else note
        if original is not None:
            kept.append(original)
    present = {note.id for note in kept}
    kept.extend(n for n in before.notes if n.id in touched and n.id not in present)
    return BoardState(tuple(kept))


# Drag and drop

def resolve_drop_quadrant(state: BoardState, note_id: str, target: int | str) -> int | None:
    """
    Work out which quadrant a drag target stands for.

    A target is either a quadrant (0-4, as int or string) or the id of
    another note, in which case that note's quadrant is used.
    """
    if isinstance(target, int):
        return target if target in QUADRANTS else None
    if target.isdigit() and int(target) in QUADRANTS:
        return int(target)
    over = state.get(target)
    if over is None or over.id == note_id:
        return None
    return over.quadrant


def preview_drag(state: BoardState, note_id: str, target: int | str) -> BoardState:
    """Show the dragged note in the quadrant it hovers over."""
    note = state.get(note_id)
    quadrant = resolve_drop_quadrant(state, note_id, target)
    if note is None or quadrant is None or quadrant == note.quadrant:
        return state
    return state.replacing(note_id, replace(note, quadrant=quadrant))


def can_place(
    state: BoardState,
    note_id: str,
    quadrant: int,
    capacity: int = DEFAULT_QUADRANT_CAPACITY,
) -> bool:
    """Local capacity pre-check, not counting the note being moved."""
    if quadrant == UNCLASSIFIED:
        return True
    occupied = sum(
        1 for n in state.notes
        if n.quadrant == quadrant and n.id != note_id and not n.is_archived
    )
    return occupied < capacity


# Views

def notes_in_quadrant(state: BoardState, quadrant: int, archived: bool = False) -> list[NoteItem]:
    """
    Notes of one quadrant in display order.

    Notes with a due date come first, soonest first; the rest follow by position.
    """
    selected = [n for n in state.notes if n.quadrant == quadrant and n.is_archived == archived]
    return sorted(selected, key=_display_key)


def _display_key(note: NoteItem) -> tuple:
    if note.due_date is None:
        return (1, 0.0, note.position)
    return (0, note.due_date.timestamp(), note.position)
