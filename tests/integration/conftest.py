"""
Integration fixtures: the real application on the per-test database,
driven through httpx over ASGI, plus envelope assertions and logged-in users.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient, Response
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from eisenhower.backend.core.database import get_db_session
from eisenhower.backend.main import create_app

SignupAndLogin = Callable[..., Awaitable[dict[str, Any]]]


@pytest.fixture
def app(db_session_factory: async_sessionmaker[AsyncSession]) -> FastAPI:
    """create_app() with the session dependency pointed at the test engine."""

    async def session_per_request() -> AsyncGenerator[AsyncSession, None]:
        async with db_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application = create_app()
    application.dependency_overrides[get_db_session] = session_per_request
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http


class ApiAssertions:
    """Checks on the {success, data, error, metadata} envelope."""

    @staticmethod
    def _status(response: Response, expected: int) -> dict[str, Any]:
        assert response.status_code == expected, (
            f"expected {expected}, got {response.status_code}: {response.text}"
        )
        return response.json()

    def assert_success(self, response: Response, expected_status: int = 200) -> dict[str, Any]:
        body = self._status(response, expected_status)
        assert body["success"] is True, body
        assert body["error"] is None, body
        return body

    def assert_error(
        self,
        response: Response,
        expected_status: int,
        expected_code: str | None = None,
    ) -> dict[str, Any]:
        body = self._status(response, expected_status)
        assert body["success"] is False, body
        assert body["data"] is None, body
        if expected_code is not None:
            assert body["error"]["code"] == expected_code, body
        return body

    def assert_validation_error(self, response: Response, field: str | None = None) -> dict[str, Any]:
        """422 from request parsing; `field` matches part of a reported location."""
        body = self.assert_error(response, 422, "VAL_REQUEST_INVALID")
        if field is not None:
            reported = [e["field"] for e in body["error"]["details"]["validation_errors"]]
            assert any(field in name for name in reported), reported
        return body


@pytest.fixture
def api() -> ApiAssertions:
    return ApiAssertions()


@pytest.fixture
def signup_and_login(client: AsyncClient) -> SignupAndLogin:
    """
    Register and log in through the API.

    Returns the login payload (token, refresh_token, user) with an extra
    "headers" entry holding the bearer header.

    Usage:
        alice = await signup_and_login("alice")
        await client.get("/notes", headers=alice["headers"])
    """

    async def _signup_and_login(nickname: str, password: str = "pw1") -> dict[str, Any]:
        credentials = {"nickname": nickname, "password": password}
        signup = await client.post("/auth/signup", json=credentials)
        assert signup.status_code == 201, signup.text
        login = await client.post("/auth/login", json=credentials)
        assert login.status_code == 200, login.text

        session = login.json()["data"]
        session["headers"] = {"Authorization": f"Bearer {session['token']}"}
        return session

    return _signup_and_login


@pytest.fixture
async def auth_headers(signup_and_login: SignupAndLogin) -> dict[str, str]:
    user = await signup_and_login("tester")
    return user["headers"]
