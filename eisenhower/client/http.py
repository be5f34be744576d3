"""
HTTP Client for the notes API.

Async client used by the board. Holds the login session and sends
X-Frontend-ID: client on every request for log routing.

On a 401 for any authenticated request the client refreshes the access
token once and retries. When that is impossible the session is cleared
and SessionExpiredError forces the user to log in again.
"""

from dataclasses import dataclass
from typing import Any

import httpx

from eisenhower.backend.core.config import get_server_base_url
from eisenhower.backend.core.logging import get_logger, log_with_source
from eisenhower.client.state import NoteEffect

logger = get_logger(__name__)

SOURCE = "client"


class APIError(Exception):
    """Non-2xx answer from the API, carrying the error envelope."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"{status_code} {code}: {message}")


class SessionExpiredError(APIError):
    """The access token could not be refreshed; log in again."""

    def __init__(self, message: str = "Session expired, please log in again.") -> None:
        super().__init__(401, "AUTH_SESSION_EXPIRED", message)


@dataclass
class Session:
    """Tokens and user returned by login."""

    token: str | None = None
    refresh_token: str | None = None
    user: dict[str, Any] | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None


class NotesAPIClient:
    """
    HTTP client for the auth and notes endpoints.

    Usage:
        async with NotesAPIClient() as api:
            await api.login("alice", "pw1")
            notes = await api.list_notes()
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the API client.

        Args:
            base_url: API base URL. If None, reads from config/settings/application.yaml.
            timeout: Request timeout in seconds. If None, reads from config/settings/application.yaml.
            transport: Optional httpx transport (e.g. ASGITransport for in-process use)
        """
        if base_url is None or timeout is None:
            config_base_url, config_timeout = get_server_base_url()
            base_url = base_url or config_base_url
            timeout = timeout if timeout is not None else config_timeout

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = Session()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "NotesAPIClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"X-Frontend-ID": SOURCE},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def clear_session(self) -> None:
        """Forget tokens and user."""
        self.session = Session()

    async def _send(
        self,
        method: str,
        path: str,
        authenticated: bool,
        **kwargs: Any,
    ) -> httpx.Response:
        client = await self._get_client()
        headers = {}
        if authenticated and self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"

        log_with_source(logger, SOURCE, "debug", "API request", method=method, path=path)

        try:
            response = await client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            log_with_source(
                logger,
                SOURCE,
                "error",
                "API request failed",
                method=method,
                path=path,
                error=str(e),
            )
            raise

        log_with_source(
            logger,
            SOURCE,
            "debug",
            "API response",
            method=method,
            path=path,
            status_code=response.status_code,
        )
        return response

    async def request(
        self,
        method: str,
        path: str,
        authenticated: bool = True,
        **kwargs: Any,
    ) -> Any:
        """
        Make a request and return the `data` of the response envelope.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: API path (e.g., /notes)
            authenticated: Send the access token and refresh it on 401
            **kwargs: Additional arguments for httpx (json, params)

        Raises:
            APIError: On a non-2xx answer
            SessionExpiredError: If a 401 could not be recovered by refreshing
            httpx.HTTPError: On transport failure
        """
        response = await self._send(method, path, authenticated, **kwargs)

        if response.status_code == 401 and authenticated:
            await self._refresh_access_token()
            response = await self._send(method, path, authenticated, **kwargs)

        return self._unwrap(response)

    async def _refresh_access_token(self) -> None:
        refresh_token = self.session.refresh_token
        if not refresh_token:
            self.clear_session()
            raise SessionExpiredError()

        try:
            response = await self._send(
                "POST",
                "/auth/refresh",
                authenticated=False,
                json={"refreshToken": refresh_token},
            )
        except httpx.HTTPError:
            self.clear_session()
            raise SessionExpiredError()

        if not response.is_success:
            log_with_source(
                logger,
                SOURCE,
                "warning",
                "Token refresh rejected",
                status_code=response.status_code,
            )
            self.clear_session()
            raise SessionExpiredError()

        self.session.token = response.json()["data"]["token"]
        log_with_source(logger, SOURCE, "debug", "Access token refreshed")

    @staticmethod
    def _unwrap(response: httpx.Response) -> Any:
        if response.is_success:
            return response.json().get("data")

        try:
            error = response.json().get("error") or {}
        except ValueError:
            error = {}

        raise APIError(
            response.status_code,
            error.get("code", "HTTP_ERROR"),
            error.get("message", response.reason_phrase),
            error.get("details"),
        )

    # Auth

    async def signup(self, nickname: str, password: str) -> dict[str, Any]:
        """Register a user. Does not log in."""
        return await self.request(
            "POST",
            "/auth/signup",
            authenticated=False,
            json={"nickname": nickname, "password": password},
        )

    async def login(self, nickname: str, password: str) -> dict[str, Any]:
        """Log in and keep the returned session."""
        data = await self.request(
            "POST",
            "/auth/login",
            authenticated=False,
            json={"nickname": nickname, "password": password},
        )
        self.session = Session(
            token=data["token"],
            refresh_token=data["refreshToken"],
            user=data["user"],
        )
        log_with_source(logger, SOURCE, "info", "Logged in", user_id=data["user"]["id"])
        return data

    async def logout(self) -> None:
        """Revoke the refresh token. Local session state is cleared regardless."""
        refresh_token = self.session.refresh_token
        try:
            if refresh_token:
                await self.request(
                    "POST",
                    "/auth/logout",
                    authenticated=False,
                    json={"refreshToken": refresh_token},
                )
        except (APIError, httpx.HTTPError) as e:
            log_with_source(logger, SOURCE, "warning", "Logout request failed", error=str(e))
        finally:
            self.clear_session()

    # Notes

    async def list_notes(self, archived: bool | None = False) -> list[dict[str, Any]]:
        """List notes; archived=None lists every note."""
        if archived is None:
            params = {"all": "true"}
        else:
            params = {"archived": "true" if archived else "false"}
        return await self.request("GET", "/notes", params=params)

    async def create_note(self, **fields: Any) -> dict[str, Any]:
        return await self.request("POST", "/notes", json=fields)

    async def update_note(self, note_id: str, **fields: Any) -> dict[str, Any]:
        return await self.request("PUT", f"/notes/{note_id}", json=fields)

    async def delete_note(self, note_id: str) -> dict[str, Any]:
        return await self.request("DELETE", f"/notes/{note_id}")

    async def reorder_notes(self, updates: list[dict[str, Any]]) -> dict[str, Any]:
        return await self.request("PUT", "/notes/reorder/batch", json={"updates": updates})

    async def send(self, effect: NoteEffect) -> Any:
        """Perform the request described by a board transition."""
        kwargs: dict[str, Any] = {}
        if effect.body is not None:
            kwargs["json"] = effect.body
        return await self.request(effect.method, effect.path, **kwargs)
