"""
Unit test fixtures. Nothing here opens a database or a socket.
"""

from contextlib import asynccontextmanager
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """
    Mock database session for unit tests.

    begin_nested() works as an async context manager so that services
    using savepoints can run against the mock.

    Usage:
        def test_repository(mock_db_session: AsyncMock):
            repo = UserRepository(mock_db_session)
    """
    session = AsyncMock()
    # Synchronous on the real AsyncSession.
    session.add = MagicMock()

    @asynccontextmanager
    async def begin_nested():
        yield MagicMock()

    session.begin_nested = MagicMock(side_effect=begin_nested)
    return session


@pytest.fixture
def mock_db_result() -> MagicMock:
    """
    Mock database query result.

    Usage:
        def test_query(mock_db_session, mock_db_result):
            mock_db_result.scalar_one_or_none.return_value = user
            mock_db_session.execute.return_value = mock_db_result
    """
    result = MagicMock()
    result.scalar_one_or_none = MagicMock(return_value=None)
    result.scalar_one = MagicMock(return_value=0)
    result.scalars = MagicMock()
    result.scalars.return_value.all = MagicMock(return_value=[])
    result.rowcount = 0
    return result


@pytest.fixture
def api_response():
    """
    Factory for real httpx responses carrying the API envelope.

    Usage:
        api_response(200, data={"token": "t"})
        api_response(404, error=("RES_NOT_FOUND", "Note not found"))
    """

    def _make(
        status_code: int,
        data: Any = None,
        error: tuple[str, str] | None = None,
    ) -> httpx.Response:
        if error is None:
            body = {"success": True, "data": data, "error": None, "metadata": {}}
        else:
            code, message = error
            body = {
                "success": False,
                "data": None,
                "error": {"code": code, "message": message, "details": None},
                "metadata": {},
            }
        return httpx.Response(
            status_code,
            json=body,
            request=httpx.Request("GET", "http://test"),
        )

    return _make


@pytest.fixture
def note_payload():
    """Factory for note entities as the API returns them."""

    def _make(note_id: str = "n1", **overrides: Any) -> dict[str, Any]:
        payload = {
            "id": note_id,
            "title": f"Note {note_id}",
            "description": None,
            "content": None,
            "quadrant": 0,
            "position": 1,
            "due_date": None,
            "is_archived": False,
            "created_at": "2026-01-01T09:00:00",
            "updated_at": "2026-01-01T09:00:00",
        }
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture
def mock_logger() -> MagicMock:
    """Stands in for a structlog logger; calls are recorded per level."""
    return MagicMock(spec=["debug", "info", "warning", "error", "exception", "critical"])
