"""
Auth Schemas.

Pydantic schemas for signup, login, refresh and logout.

Credential fields are optional at the schema level so that a missing
field is reported by the auth service as a 400 validation error.
"""

from pydantic import BaseModel, ConfigDict, Field


class CredentialsRequest(BaseModel):
    """Body of signup and login requests."""

    nickname: str | None = Field(
        default=None,
        max_length=64,
        description="Unique login nickname",
        examples=["alice"],
    )
    password: str | None = Field(
        default=None,
        max_length=128,
        description="Plain-text password",
    )


class RefreshTokenRequest(BaseModel):
    """Body of refresh and logout requests."""

    refresh_token: str | None = Field(
        default=None,
        alias="refreshToken",
        description="Opaque refresh token issued at login",
    )

    model_config = ConfigDict(populate_by_name=True)


class UserResponse(BaseModel):
    """Public view of a user."""

    id: str = Field(description="User unique identifier")
    nickname: str = Field(description="Login nickname")

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    """Tokens returned by a successful login."""

    token: str = Field(description="Signed short-lived access token")
    refresh_token: str = Field(alias="refreshToken", description="Opaque refresh token")
    user: UserResponse

    model_config = ConfigDict(populate_by_name=True)


class AccessTokenResponse(BaseModel):
    """Access token returned by a refresh."""

    token: str = Field(description="Signed short-lived access token")


class TokenClaims(BaseModel):
    """Identity carried by a verified access token."""

    user_id: str
    nickname: str
