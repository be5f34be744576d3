"""
Auth Service.

Credential store and token service: signup, login, access token
verification, refresh and logout.

One refresh token slot per user: issuing a session overwrites the slot,
so a second login invalidates the first login's refresh token.
Refresh tokens are not rotated on use.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from eisenhower.backend.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ValidationError,
)
from eisenhower.backend.core.security import (
    MAX_PASSWORD_BYTES,
    create_access_token,
    decode_access_token,
    generate_refresh_token,
    hash_password,
    verify_password,
)
from eisenhower.backend.models.user import User
from eisenhower.backend.repositories.user import UserRepository
from eisenhower.backend.schemas.auth import TokenClaims
from eisenhower.backend.services.base import BaseService

INVALID_CREDENTIALS = "Invalid credentials."


def verify_access_token(token: str) -> TokenClaims:
    """
    Verify an access token and return the identity it carries.

    Raises:
        AuthenticationError: On any malformed, expired or forged token
    """
    payload = decode_access_token(token)
    return TokenClaims(user_id=payload["sub"], nickname=payload.get("nickname", ""))


def _access_token_for(user: User) -> str:
    return create_access_token({"sub": user.id, "nickname": user.nickname})


class AuthService(BaseService):
    """Service for user registration and session tokens."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.users = UserRepository(session)

    async def signup(self, nickname: str | None, password: str | None) -> User:
        """
        Register a new user.

        Raises:
            ValidationError: If nickname or password is missing, or the
                password is longer than bcrypt accepts
            ConflictError: If the nickname is already taken
        """
        self._validate_required(
            {"nickname": nickname, "password": password},
            ["nickname", "password"],
        )
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes.",
                details={"max_bytes": MAX_PASSWORD_BYTES},
            )

        if await self.users.exists_by_nickname(nickname):
            raise ConflictError("Nickname already exists.")

        self._log_operation("Creating user", nickname=nickname)
        user = await self._execute_db_operation(
            "signup",
            self.users.create(nickname=nickname, hashed_password=hash_password(password)),
            conflict_message="Nickname already exists.",
        )
        self._log_debug("User created", user_id=user.id)
        return user

    async def login(self, nickname: str | None, password: str | None) -> tuple[User, str, str]:
        """
        Authenticate a user and open a new session.

        Returns:
            Tuple of (user, access_token, refresh_token)

        Raises:
            ValidationError: If nickname or password is missing
            AuthenticationError: If the credentials do not match
        """
        self._validate_required(
            {"nickname": nickname, "password": password},
            ["nickname", "password"],
        )

        user = await self.users.get_by_nickname(nickname)
        if user is None or not self._password_matches(password, user.hashed_password):
            self._logger.warning("Login rejected", extra={"nickname": nickname})
            raise AuthenticationError(INVALID_CREDENTIALS)

        access_token, refresh_token = await self.issue_session(user)
        self._log_operation("User logged in", user_id=user.id)
        return user, access_token, refresh_token

    async def issue_session(self, user: User) -> tuple[str, str]:
        """
        Sign an access token and store a fresh refresh token for the user.

        Any refresh token the user held before stops working.

        Returns:
            Tuple of (access_token, refresh_token)
        """
        refresh_token = generate_refresh_token()
        await self._execute_db_operation(
            "issue_session",
            self.users.set_refresh_token(user, refresh_token),
        )
        return _access_token_for(user), refresh_token

    async def refresh(self, refresh_token: str | None) -> str:
        """
        Exchange a stored refresh token for a new access token.

        Raises:
            ValidationError: If no refresh token is given
            AuthorizationError: If the token is not held by any user
        """
        self._validate_required({"refreshToken": refresh_token}, ["refreshToken"])

        user = await self.users.get_by_refresh_token(refresh_token)
        if user is None:
            self._logger.warning("Refresh rejected")
            raise AuthorizationError("Invalid refresh token.")

        self._log_debug("Access token refreshed", user_id=user.id)
        return _access_token_for(user)

    async def revoke(self, refresh_token: str | None) -> None:
        """
        Log out by clearing the stored refresh token.

        Unknown tokens are ignored.

        Raises:
            ValidationError: If no refresh token is given
        """
        self._validate_required({"refreshToken": refresh_token}, ["refreshToken"])

        cleared = await self._execute_db_operation(
            "revoke",
            self.users.clear_refresh_token(refresh_token),
        )
        self._log_operation("Refresh token revoked", cleared=cleared)

    @staticmethod
    def _password_matches(password: str, hashed_password: str) -> bool:
        try:
            return verify_password(password, hashed_password)
        except ValueError:
            # Unparseable digest in storage
            return False
