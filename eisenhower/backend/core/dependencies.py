"""
FastAPI Dependencies.

Shared dependencies for request handling.
"""

from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from eisenhower.backend.core.database import get_db_session
from eisenhower.backend.core.exceptions import AuthenticationError
from eisenhower.backend.core.logging import get_logger
from eisenhower.backend.core.utils import new_id
from eisenhower.backend.schemas.auth import TokenClaims
from eisenhower.backend.services.auth import verify_access_token

logger = get_logger(__name__)

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_db_session)]


async def get_request_id(request: Request) -> str:
    """
    The id RequestContextMiddleware assigned to this request.

    Falls back to the X-Request-ID header, then a fresh id, when the app
    runs without the middleware.
    """
    request_id = getattr(request.state, "request_id", None)
    return request_id or request.headers.get("X-Request-ID") or new_id()


RequestId = Annotated[str, Depends(get_request_id)]


async def get_current_user(authorization: str | None = Header(None)) -> TokenClaims:
    """
    Resolve the caller from the bearer access token.

    The identity comes from the token claims alone; no database lookup.

    Raises:
        AuthenticationError: If the header is missing or the token is invalid
    """
    if not authorization:
        raise AuthenticationError("Not authenticated")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        logger.debug("Malformed authorization header")
        raise AuthenticationError("Not authenticated")

    return verify_access_token(token.strip())


CurrentUser = Annotated[TokenClaims, Depends(get_current_user)]
