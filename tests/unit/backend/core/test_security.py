"""
Unit Tests for password hashing and token issuing.

bcrypt and python-jose run for real; only get_settings and
get_app_config are replaced, with a real JwtSchema.
"""

from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from jose import jwt as jose_jwt

from snack.backend.core.config_schema import JwtSchema
from snack.backend.core.exceptions import AuthenticationError
from snack.backend.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    generate_auth_code,
    generate_opaque_token,
    hash_password,
    verify_password,
)

TEST_JWT_SECRET = "test-secret-key-that-is-long-enough-for-testing-purposes"


@pytest.fixture
def jwt_config():
    """Real Pydantic JwtSchema with test values."""
    return JwtSchema(
        algorithm="HS256",
        access_token_expire_minutes=60,
        refresh_token_expire_days=30,
        audience="snack-test",
    )


@pytest.fixture
def _stub_config(jwt_config):
    """Stub the config boundary so security functions can resolve settings."""
    settings = SimpleNamespace(jwt_secret=TEST_JWT_SECRET)
    app_config = SimpleNamespace(security=SimpleNamespace(jwt=jwt_config))
    with (
        patch("snack.backend.core.security.get_settings", return_value=settings),
        patch("snack.backend.core.security.get_app_config", return_value=app_config),
    ):
        yield


# =============================================================================
# Password Hashing
# =============================================================================


class TestPasswords:
    """bcrypt hashing and verification, no mocks."""

    def test_hash_is_bcrypt_and_salted(self):
        first = hash_password("correct-horse-battery")
        second = hash_password("correct-horse-battery")
        assert first.startswith("$2b$")
        assert first != second

    def test_correct_password_verifies(self):
        hashed = hash_password("correct-horse-battery")
        assert verify_password("correct-horse-battery", hashed) is True

    def test_wrong_password_fails(self):
        hashed = hash_password("correct-horse-battery")
        assert verify_password("wrong-password", hashed) is False

    def test_unicode_round_trip(self):
        hashed = hash_password("contraseña-пароль")
        assert verify_password("contraseña-пароль", hashed) is True

    def test_passwords_longer_than_bcrypt_limit(self):
        long_password = "p" * 100
        hashed = hash_password(long_password)
        assert verify_password(long_password, hashed) is True

    def test_malformed_hash_fails_closed(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False


# =============================================================================
# Session JWTs
# =============================================================================


@pytest.mark.usefixtures("_stub_config")
class TestSessionTokens:
    """Access and refresh JWTs, real signing and decoding."""

    def test_access_token_round_trip(self):
        payload = decode_token(create_access_token({"sub": "user-42"}))
        assert payload["sub"] == "user-42"
        assert payload["type"] == "access"
        assert payload["aud"] == "snack-test"

    def test_refresh_token_round_trip(self):
        payload = decode_token(create_refresh_token({"sub": "user-42"}))
        assert payload["type"] == "refresh"

    def test_refresh_outlives_access(self):
        access = decode_token(create_access_token({"sub": "u"}))
        refresh = decode_token(create_refresh_token({"sub": "u"}))
        assert refresh["exp"] > access["exp"]

    def test_does_not_mutate_input_data(self):
        data = {"sub": "user-1"}
        create_access_token(data)
        create_refresh_token(data)
        assert data == {"sub": "user-1"}

    def test_expected_type_enforced(self):
        refresh = create_refresh_token({"sub": "user-1"})
        with pytest.raises(AuthenticationError, match="Invalid token type"):
            decode_token(refresh, expected_type="access")

    def test_expected_type_accepted(self):
        access = create_access_token({"sub": "user-1"})
        assert decode_token(access, expected_type="access")["sub"] == "user-1"


@pytest.mark.usefixtures("_stub_config")
class TestDecodeTokenFailures:
    """Every malformed token surfaces as AuthenticationError."""

    @pytest.mark.parametrize("token", ["", "not-a-jwt-token"])
    def test_garbage(self, token):
        with pytest.raises(AuthenticationError):
            decode_token(token)

    def test_tampered_signature(self):
        token = create_access_token({"sub": "user-1"})
        with pytest.raises(AuthenticationError):
            decode_token(token[:-4] + "XXXX")

    def test_wrong_secret(self):
        token = jose_jwt.encode(
            {"sub": "user-1", "type": "access", "aud": "snack-test"},
            "completely-different-secret",
            algorithm="HS256",
        )
        with pytest.raises(AuthenticationError):
            decode_token(token)

    def test_wrong_audience(self):
        token = jose_jwt.encode(
            {"sub": "user-1", "type": "access", "aud": "someone-else"},
            TEST_JWT_SECRET,
            algorithm="HS256",
        )
        with pytest.raises(AuthenticationError):
            decode_token(token)

    def test_expired(self):
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-1))
        with pytest.raises(AuthenticationError):
            decode_token(token)


# =============================================================================
# Extension tokens
# =============================================================================


class TestOpaqueTokens:
    def test_opaque_tokens_are_unique_url_safe(self):
        tokens = {generate_opaque_token() for _ in range(20)}
        assert len(tokens) == 20
        assert all(len(t) >= 43 for t in tokens)
        assert all("/" not in t and "+" not in t for t in tokens)

    def test_auth_code_length(self):
        assert len(generate_auth_code()) == 32
        assert len(generate_auth_code(16)) == 16
