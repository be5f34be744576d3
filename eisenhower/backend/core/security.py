"""
Security Utilities.

Password hashing, access token signing/verification and refresh token
generation. Callers treat these as opaque primitives; every verification
failure surfaces as the same AuthenticationError.
"""

import secrets
from datetime import timedelta
from typing import Any

import bcrypt
from jose import JWTError, jwt

from eisenhower.backend.core.config import get_app_config, get_settings
from eisenhower.backend.core.exceptions import AuthenticationError
from eisenhower.backend.core.logging import get_logger
from eisenhower.backend.core.utils import utc_now

logger = get_logger(__name__)

ACCESS_TOKEN_TYPE = "access"

# bcrypt only reads this many bytes of input; longer passwords are refused.
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    password_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password_bytes, salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    if len(plain_password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return False
    return bcrypt.checkpw(
        plain_password.encode("utf-8"),
        hashed_password.encode("utf-8"),
    )


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """
    Create a signed JWT access token.

    Args:
        data: Claims to encode (at least "sub")
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token
    """
    settings = get_settings()
    jwt_config = get_app_config().security.jwt
    to_encode = data.copy()

    if expires_delta:
        expire = utc_now() + expires_delta
    else:
        expire = utc_now() + timedelta(minutes=jwt_config.access_token_expire_minutes)

    to_encode.update({"exp": expire, "type": ACCESS_TOKEN_TYPE, "aud": jwt_config.audience})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=jwt_config.algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a JWT access token.

    Checks signature, audience, expiry and token type.

    Raises:
        AuthenticationError: If the token is invalid for any reason
    """
    settings = get_settings()
    jwt_config = get_app_config().security.jwt
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[jwt_config.algorithm],
            audience=jwt_config.audience,
        )
    except JWTError as e:
        logger.warning("Token decode failed", extra={"error": str(e)})
        raise AuthenticationError("Invalid or expired token")

    if payload.get("type") != ACCESS_TOKEN_TYPE or not payload.get("sub"):
        logger.warning("Token rejected", extra={"reason": "wrong type or subject"})
        raise AuthenticationError("Invalid or expired token")

    return payload


def generate_refresh_token() -> str:
    """Generate an opaque, unguessable refresh token."""
    num_bytes = get_app_config().security.refresh_token.num_bytes
    return secrets.token_urlsafe(num_bytes)
