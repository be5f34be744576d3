"""
Notes API Endpoints.

REST API endpoints for the caller's notes. Every route requires a bearer
access token; notes owned by other users answer 404.
"""

from fastapi import APIRouter, Query

from eisenhower.backend.core.dependencies import CurrentUser, DbSession, RequestId
from eisenhower.backend.schemas.base import ApiResponse, MessageResponse, success
from eisenhower.backend.schemas.note import (
    NoteCreate,
    NoteReorderRequest,
    NoteReorderResponse,
    NoteResponse,
    NoteUpdate,
)
from eisenhower.backend.services.note import NoteService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[list[NoteResponse]],
    summary="List notes",
    description="List the caller's notes ordered by quadrant, position, then newest first.",
)
async def list_notes(
    db: DbSession,
    user: CurrentUser,
    request_id: RequestId,
    archived: bool = Query(
        default=False,
        description="List archived notes instead of active ones",
    ),
    include_all: bool = Query(
        default=False,
        alias="all",
        description="List every note regardless of archive state",
    ),
) -> ApiResponse[list[NoteResponse]]:
    """List notes."""
    service = NoteService(db)
    notes = await service.list_notes(user.user_id, archived=None if include_all else archived)
    return success([NoteResponse.model_validate(note) for note in notes], request_id)


@router.post(
    "",
    response_model=ApiResponse[NoteResponse],
    status_code=201,
    summary="Create a note",
    description="Create a note at the end of its quadrant.",
)
async def create_note(
    data: NoteCreate,
    db: DbSession,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Create a new note."""
    service = NoteService(db)
    note = await service.create_note(user.user_id, data)
    return success(NoteResponse.model_validate(note), request_id)


@router.put(
    "/reorder/batch",
    response_model=ApiResponse[NoteReorderResponse],
    summary="Reorder notes",
    description="Apply quadrant and position changes to many notes in one transaction.",
)
async def reorder_notes(
    data: NoteReorderRequest,
    db: DbSession,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[NoteReorderResponse]:
    """Apply a batch reorder."""
    service = NoteService(db)
    updated = await service.reorder_notes(user.user_id, data.updates)
    return success(NoteReorderResponse(updated=updated), request_id)


@router.get(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Get a note",
    description="Get a single note by ID.",
)
async def get_note(
    note_id: str,
    db: DbSession,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Get a note by ID."""
    service = NoteService(db)
    note = await service.get_note(user.user_id, note_id)
    return success(NoteResponse.model_validate(note), request_id)


@router.put(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Update a note",
    description="Update an existing note. Only provided fields are updated.",
)
async def update_note(
    note_id: str,
    data: NoteUpdate,
    db: DbSession,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Update a note."""
    service = NoteService(db)
    note = await service.update_note(user.user_id, note_id, data)
    return success(NoteResponse.model_validate(note), request_id)


@router.delete(
    "/{note_id}",
    response_model=ApiResponse[MessageResponse],
    summary="Delete a note",
    description="Permanently delete a note.",
)
async def delete_note(
    note_id: str,
    db: DbSession,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[MessageResponse]:
    """Delete a note."""
    service = NoteService(db)
    await service.delete_note(user.user_id, note_id)
    return success(MessageResponse(message="Note deleted"), request_id)


@router.post(
    "/{note_id}/archive",
    response_model=ApiResponse[NoteResponse],
    summary="Archive a note",
    description="Archive a note, freeing its slot in the quadrant.",
)
async def archive_note(
    note_id: str,
    db: DbSession,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Archive a note."""
    service = NoteService(db)
    note = await service.archive_note(user.user_id, note_id)
    return success(NoteResponse.model_validate(note), request_id)


@router.post(
    "/{note_id}/unarchive",
    response_model=ApiResponse[NoteResponse],
    summary="Unarchive a note",
    description="Restore an archived note to its quadrant.",
)
async def unarchive_note(
    note_id: str,
    db: DbSession,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Unarchive a note."""
    service = NoteService(db)
    note = await service.unarchive_note(user.user_id, note_id)
    return success(NoteResponse.model_validate(note), request_id)
