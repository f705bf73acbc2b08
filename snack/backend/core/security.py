"""
Security Utilities.

Password hashing, session JWTs, and opaque token generation.

Session tokens (web and mobile) are signed JWTs carrying ``sub``, ``type``
("access" or "refresh"), ``aud``, ``iat`` and ``exp``. Extension tokens are
opaque random strings stored server-side so they can be revoked.
"""

import secrets
from datetime import timedelta
from typing import Any

import bcrypt
from jose import JWTError, jwt

from snack.backend.core.config import get_app_config, get_settings
from snack.backend.core.exceptions import AuthenticationError
from snack.backend.core.logging import get_logger
from snack.backend.core.utils import utc_now

logger = get_logger(__name__)

# bcrypt only reads the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """False for a wrong password and for a malformed stored hash."""
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def _encode(claims: dict[str, Any], token_type: str, lifetime: timedelta) -> str:
    jwt_config = get_app_config().security.jwt
    now = utc_now()
    payload = {
        **claims,
        "type": token_type,
        "aud": jwt_config.audience,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(payload, get_settings().jwt_secret, algorithm=jwt_config.algorithm)


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """
    Sign an access token for ``data`` (must include "sub").

    expires_delta overrides security.jwt.access_token_expire_minutes.
    """
    minutes = get_app_config().security.jwt.access_token_expire_minutes
    return _encode(data, "access", expires_delta or timedelta(minutes=minutes))


def create_refresh_token(data: dict[str, Any]) -> str:
    days = get_app_config().security.jwt.refresh_token_expire_days
    return _encode(data, "refresh", timedelta(days=days))


def decode_token(token: str, expected_type: str | None = None) -> dict[str, Any]:
    """
    Verify signature, audience, and expiry, then return the claims.

    Raises:
        AuthenticationError: If the token is invalid, expired, or not of expected_type
    """
    jwt_config = get_app_config().security.jwt
    try:
        payload = jwt.decode(
            token,
            get_settings().jwt_secret,
            algorithms=[jwt_config.algorithm],
            audience=jwt_config.audience,
        )
    except JWTError as e:
        logger.warning("Token decode failed", extra={"error": str(e)})
        raise AuthenticationError("Invalid or expired token") from e

    if expected_type is not None and payload.get("type") != expected_type:
        raise AuthenticationError("Invalid token type")
    return payload


def generate_opaque_token() -> str:
    """32 random bytes, URL-safe. Used for extension access and refresh tokens."""
    return secrets.token_urlsafe(32)


def generate_auth_code(length: int = 32) -> str:
    return secrets.token_urlsafe(length)[:length]
