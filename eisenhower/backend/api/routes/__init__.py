"""
API Router.

Aggregates the auth and notes routers.
"""

from fastapi import APIRouter

from eisenhower.backend.api.routes import auth, notes

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(notes.router, prefix="/notes", tags=["notes"])
