"""
Unit Tests for Security Module.

Black box tests against the public interface of security.py.
All cryptographic operations (bcrypt, JWT) execute for real.
Only the config boundary is stubbed with real Pydantic schema objects.
"""

from calendar import timegm
from datetime import datetime, timedelta
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from jose import jwt as jose_jwt

from eisenhower.backend.core.config_schema import JwtSchema, RefreshTokenSchema
from eisenhower.backend.core.exceptions import AuthenticationError
from eisenhower.backend.core.security import (
    create_access_token,
    decode_access_token,
    generate_refresh_token,
    hash_password,
    verify_password,
)

TEST_JWT_SECRET = "test-secret-key-that-is-long-enough-for-testing-purposes"


@pytest.fixture
def jwt_config():
    """Real Pydantic JwtSchema with test values."""
    return JwtSchema(
        algorithm="HS256",
        access_token_expire_minutes=15,
        audience="test-api",
    )


@pytest.fixture
def _stub_config(jwt_config):
    """Stub the config boundary so security functions can resolve settings."""
    settings = SimpleNamespace(jwt_secret=TEST_JWT_SECRET)
    app_config = SimpleNamespace(
        security=SimpleNamespace(
            jwt=jwt_config,
            refresh_token=RefreshTokenSchema(num_bytes=32),
        )
    )
    with (
        patch("eisenhower.backend.core.security.get_settings", return_value=settings),
        patch("eisenhower.backend.core.security.get_app_config", return_value=app_config),
    ):
        yield


def _claims(token: str) -> dict:
    """Read claims without verification."""
    return jose_jwt.get_unverified_claims(token)


# =============================================================================
# Password Hashing
# =============================================================================


class TestHashPassword:
    """Tests for password hashing."""

    def test_returns_bcrypt_formatted_hash(self):
        result = hash_password("pw1")
        assert result != "pw1"
        assert result.startswith("$2b$")

    def test_same_password_produces_different_hashes(self):
        assert hash_password("identical") != hash_password("identical")


class TestVerifyPassword:
    """Tests for password verification."""

    def test_correct_password_verifies(self):
        hashed = hash_password("correct-horse-battery-staple")
        assert verify_password("correct-horse-battery-staple", hashed) is True

    def test_wrong_password_fails(self):
        hashed = hash_password("correct-horse-battery-staple")
        assert verify_password("wrong-password", hashed) is False

    def test_round_trip_with_unicode(self):
        password = "contraseña-пароль"
        assert verify_password(password, hash_password(password)) is True

    def test_password_longer_than_bcrypt_input_fails(self):
        hashed = hash_password("p" * 72)
        assert verify_password("p" * 100, hashed) is False


# =============================================================================
# Access Tokens
# =============================================================================


@pytest.mark.usefixtures("_stub_config")
class TestCreateAccessToken:
    """Tests for access token creation."""

    def test_round_trip_preserves_claims(self):
        token = create_access_token({"sub": "user-42", "nickname": "alice"})
        payload = decode_access_token(token)
        assert payload["sub"] == "user-42"
        assert payload["nickname"] == "alice"

    def test_token_carries_access_type_and_audience(self):
        claims = _claims(create_access_token({"sub": "user-1"}))
        assert claims["type"] == "access"
        assert claims["aud"] == "test-api"

    def test_default_expiry_is_fifteen_minutes(self):
        issued = datetime(2026, 1, 1, 12, 0, 0)
        with patch("eisenhower.backend.core.security.utc_now", return_value=issued):
            claims = _claims(create_access_token({"sub": "user-1"}))

        assert claims["exp"] == timegm((issued + timedelta(minutes=15)).utctimetuple())

    def test_does_not_mutate_input_data(self):
        data = {"sub": "user-1"}
        create_access_token(data)
        assert data == {"sub": "user-1"}


@pytest.mark.usefixtures("_stub_config")
class TestDecodeAccessToken:
    """Every verification failure surfaces as the same AuthenticationError."""

    def test_garbage_token_rejected(self):
        with pytest.raises(AuthenticationError) as exc_info:
            decode_access_token("not-a-jwt-token")
        assert exc_info.value.message == "Invalid or expired token"

    def test_tampered_token_rejected(self):
        token = create_access_token({"sub": "user-1"})
        with pytest.raises(AuthenticationError):
            decode_access_token(token[:-4] + "XXXX")

    def test_wrong_secret_rejected(self):
        token = jose_jwt.encode(
            {"sub": "user-1", "type": "access", "aud": "test-api"},
            "completely-different-secret",
            algorithm="HS256",
        )
        with pytest.raises(AuthenticationError):
            decode_access_token(token)

    def test_expired_token_rejected(self):
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-1))
        with pytest.raises(AuthenticationError) as exc_info:
            decode_access_token(token)
        assert exc_info.value.message == "Invalid or expired token"

    def test_wrong_audience_rejected(self):
        token = jose_jwt.encode(
            {"sub": "user-1", "type": "access", "aud": "another-api"},
            TEST_JWT_SECRET,
            algorithm="HS256",
        )
        with pytest.raises(AuthenticationError):
            decode_access_token(token)

    def test_non_access_type_rejected(self):
        token = jose_jwt.encode(
            {"sub": "user-1", "type": "refresh", "aud": "test-api"},
            TEST_JWT_SECRET,
            algorithm="HS256",
        )
        with pytest.raises(AuthenticationError):
            decode_access_token(token)

    def test_missing_subject_rejected(self):
        token = jose_jwt.encode(
            {"type": "access", "aud": "test-api"},
            TEST_JWT_SECRET,
            algorithm="HS256",
        )
        with pytest.raises(AuthenticationError):
            decode_access_token(token)


# =============================================================================
# Refresh Tokens
# =============================================================================


@pytest.mark.usefixtures("_stub_config")
class TestGenerateRefreshToken:
    """Tests for opaque refresh token generation."""

    def test_tokens_are_unique(self):
        assert generate_refresh_token() != generate_refresh_token()

    def test_token_is_url_safe_and_long(self):
        token = generate_refresh_token()
        assert len(token) >= 43
        assert all(c.isalnum() or c in "-_" for c in token)
