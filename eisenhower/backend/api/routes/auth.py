"""
Auth API Endpoints.

Signup, login, access token refresh and logout.
"""

from fastapi import APIRouter

from eisenhower.backend.core.dependencies import DbSession, RequestId
from eisenhower.backend.schemas.auth import (
    AccessTokenResponse,
    CredentialsRequest,
    LoginResponse,
    RefreshTokenRequest,
    UserResponse,
)
from eisenhower.backend.schemas.base import ApiResponse, MessageResponse, success
from eisenhower.backend.services.auth import AuthService

router = APIRouter()


@router.post(
    "/signup",
    response_model=ApiResponse[UserResponse],
    status_code=201,
    summary="Register a user",
    description="Create an account with a unique nickname and a password.",
)
async def signup(
    data: CredentialsRequest,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[UserResponse]:
    """Register a new user."""
    service = AuthService(db)
    user = await service.signup(data.nickname, data.password)
    return success(UserResponse.model_validate(user), request_id)


@router.post(
    "/login",
    response_model=ApiResponse[LoginResponse],
    summary="Log in",
    description="Exchange credentials for an access token and a refresh token.",
)
async def login(
    data: CredentialsRequest,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[LoginResponse]:
    """Authenticate and open a session."""
    service = AuthService(db)
    user, access_token, refresh_token = await service.login(data.nickname, data.password)
    payload = LoginResponse(
        token=access_token,
        refresh_token=refresh_token,
        user=UserResponse.model_validate(user),
    )
    return success(payload, request_id)


@router.post(
    "/refresh",
    response_model=ApiResponse[AccessTokenResponse],
    summary="Refresh the access token",
    description="Issue a new access token for a stored refresh token.",
)
async def refresh(
    data: RefreshTokenRequest,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[AccessTokenResponse]:
    """Refresh the access token."""
    service = AuthService(db)
    token = await service.refresh(data.refresh_token)
    return success(AccessTokenResponse(token=token), request_id)


@router.post(
    "/logout",
    response_model=ApiResponse[MessageResponse],
    summary="Log out",
    description="Revoke the refresh token. Unknown tokens are accepted silently.",
)
async def logout(
    data: RefreshTokenRequest,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[MessageResponse]:
    """Revoke the refresh token."""
    service = AuthService(db)
    await service.revoke(data.refresh_token)
    return success(MessageResponse(message="Logged out"), request_id)
