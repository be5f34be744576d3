"""
Unit Tests for the Notes API Client.

Requests go through httpx.MockTransport, so the real request and response
machinery runs without a server.
"""

import json

import httpx
import pytest

from eisenhower.client.http import APIError, NotesAPIClient, Session, SessionExpiredError
from eisenhower.client.state import NoteEffect


class Recorder:
    """MockTransport handler that answers from a script and records requests."""

    def __init__(self, *responses: httpx.Response):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def body(self, index: int) -> dict:
        return json.loads(self.requests[index].content)


def _client(recorder: Recorder) -> NotesAPIClient:
    return NotesAPIClient(
        base_url="http://test",
        timeout=5,
        transport=httpx.MockTransport(recorder),
    )


def _logged_in(api: NotesAPIClient) -> NotesAPIClient:
    api.session = Session(token="old-access", refresh_token="refresh-1", user={"id": "u1"})
    return api


class TestRequest:
    """Tests for envelope handling."""

    async def test_returns_data_and_sends_frontend_id(self, api_response):
        recorder = Recorder(api_response(200, data=[{"id": "n1"}]))
        api = _client(recorder)

        data = await api.list_notes()

        assert data == [{"id": "n1"}]
        request = recorder.requests[0]
        assert request.headers["X-Frontend-ID"] == "client"
        assert request.url.params["archived"] == "false"
        assert "Authorization" not in request.headers
        await api.close()

    async def test_list_all_uses_all_flag(self, api_response):
        recorder = Recorder(api_response(200, data=[]))
        api = _client(recorder)

        await api.list_notes(archived=None)

        assert recorder.requests[0].url.params["all"] == "true"
        assert "archived" not in recorder.requests[0].url.params

    async def test_error_envelope_becomes_api_error(self, api_response):
        recorder = Recorder(
            api_response(409, error=("NOTE_CAPACITY_EXCEEDED", "Maximum 10 notes allowed per quadrant."))
        )
        api = _logged_in(_client(recorder))

        with pytest.raises(APIError) as exc_info:
            await api.create_note(title="x", quadrant=1)

        assert exc_info.value.status_code == 409
        assert exc_info.value.code == "NOTE_CAPACITY_EXCEEDED"
        assert exc_info.value.message == "Maximum 10 notes allowed per quadrant."

    async def test_non_envelope_error_uses_reason_phrase(self):
        recorder = Recorder(httpx.Response(502, text="bad gateway"))
        api = _logged_in(_client(recorder))

        with pytest.raises(APIError) as exc_info:
            await api.delete_note("n1")

        assert exc_info.value.code == "HTTP_ERROR"
        assert exc_info.value.message == "Bad Gateway"

    async def test_transport_failure_propagates(self):
        recorder = Recorder(httpx.ConnectError("refused"))
        api = _logged_in(_client(recorder))

        with pytest.raises(httpx.ConnectError):
            await api.list_notes()

    async def test_send_performs_effect(self, api_response):
        recorder = Recorder(api_response(200, data={"updated": 1}))
        api = _logged_in(_client(recorder))

        data = await api.send(
            NoteEffect("PUT", "/notes/reorder/batch", body={"updates": [{"id": "a", "quadrant": 1, "position": 1}]})
        )

        assert data == {"updated": 1}
        request = recorder.requests[0]
        assert request.method == "PUT"
        assert request.url.path == "/notes/reorder/batch"
        assert request.headers["Authorization"] == "Bearer old-access"
        assert recorder.body(0)["updates"][0]["id"] == "a"

    async def test_send_without_body_has_no_content(self, api_response):
        recorder = Recorder(api_response(200, data={"message": "Note deleted"}))
        api = _logged_in(_client(recorder))

        await api.send(NoteEffect("DELETE", "/notes/n1"))

        assert recorder.requests[0].content == b""


class TestAuth:
    """Tests for login, logout and silent token refresh."""

    async def test_login_keeps_session(self, api_response):
        recorder = Recorder(
            api_response(200, data={"token": "t1", "refreshToken": "r1", "user": {"id": "u1", "nickname": "al"}})
        )
        api = _client(recorder)

        await api.login("al", "pw1")

        assert api.session.token == "t1"
        assert api.session.refresh_token == "r1"
        assert api.session.is_authenticated
        assert recorder.body(0) == {"nickname": "al", "password": "pw1"}

    async def test_failed_login_is_not_retried(self, api_response):
        recorder = Recorder(api_response(401, error=("AUTH_INVALID_CREDENTIALS", "Invalid credentials.")))
        api = _client(recorder)

        with pytest.raises(APIError) as exc_info:
            await api.login("al", "wrong")

        assert exc_info.value.status_code == 401
        assert len(recorder.requests) == 1
        assert not api.session.is_authenticated

    async def test_401_refreshes_and_retries_once(self, api_response):
        recorder = Recorder(
            api_response(401, error=("AUTH_INVALID_TOKEN", "Token has expired")),
            api_response(200, data={"token": "new-access"}),
            api_response(200, data=[{"id": "n1"}]),
        )
        api = _logged_in(_client(recorder))

        data = await api.list_notes()

        assert data == [{"id": "n1"}]
        assert [r.url.path for r in recorder.requests] == ["/notes", "/auth/refresh", "/notes"]
        assert recorder.body(1) == {"refreshToken": "refresh-1"}
        assert "Authorization" not in recorder.requests[1].headers
        assert recorder.requests[2].headers["Authorization"] == "Bearer new-access"
        assert api.session.token == "new-access"

    async def test_second_401_is_not_retried_again(self, api_response):
        recorder = Recorder(
            api_response(401, error=("AUTH_INVALID_TOKEN", "Token has expired")),
            api_response(200, data={"token": "new-access"}),
            api_response(401, error=("AUTH_INVALID_TOKEN", "Token has expired")),
        )
        api = _logged_in(_client(recorder))

        with pytest.raises(APIError) as exc_info:
            await api.list_notes()

        assert exc_info.value.status_code == 401
        assert len(recorder.requests) == 3

    async def test_rejected_refresh_clears_session(self, api_response):
        recorder = Recorder(
            api_response(401, error=("AUTH_INVALID_TOKEN", "Token has expired")),
            api_response(403, error=("AUTH_FORBIDDEN", "Invalid refresh token.")),
        )
        api = _logged_in(_client(recorder))

        with pytest.raises(SessionExpiredError) as exc_info:
            await api.list_notes()

        assert exc_info.value.status_code == 401
        assert exc_info.value.code == "AUTH_SESSION_EXPIRED"
        assert api.session == Session()

    async def test_unreachable_refresh_clears_session(self, api_response):
        recorder = Recorder(
            api_response(401, error=("AUTH_INVALID_TOKEN", "Token has expired")),
            httpx.ConnectError("refused"),
        )
        api = _logged_in(_client(recorder))

        with pytest.raises(SessionExpiredError):
            await api.list_notes()

        assert not api.session.is_authenticated

    async def test_401_without_refresh_token_expires_session(self, api_response):
        recorder = Recorder(api_response(401, error=("AUTH_NOT_AUTHENTICATED", "Not authenticated")))
        api = _client(recorder)

        with pytest.raises(SessionExpiredError):
            await api.list_notes()

        assert len(recorder.requests) == 1

    async def test_logout_revokes_and_clears(self, api_response):
        recorder = Recorder(api_response(200, data={"message": "Logged out"}))
        api = _logged_in(_client(recorder))

        await api.logout()

        assert recorder.requests[0].url.path == "/auth/logout"
        assert recorder.body(0) == {"refreshToken": "refresh-1"}
        assert not api.session.is_authenticated

    async def test_logout_clears_even_when_request_fails(self):
        recorder = Recorder(httpx.ConnectError("refused"))
        api = _logged_in(_client(recorder))

        await api.logout()

        assert api.session == Session()

    async def test_logout_without_session_sends_nothing(self):
        recorder = Recorder()
        api = _client(recorder)

        await api.logout()

        assert recorder.requests == []
