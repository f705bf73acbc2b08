"""
FastAPI Dependencies.

Shared dependencies for request handling: database session, request ID,
session users (JWT), and extension users (opaque bearer tokens).
"""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from snack.backend.core.config import get_app_config
from snack.backend.core.database import get_db_session
from snack.backend.core.exceptions import AuthenticationError, NotFoundError
from snack.backend.core.logging import get_logger
from snack.backend.core.middleware import resolve_request_id
from snack.backend.core.utils import get_client_ip
from snack.backend.models.user import User
from snack.backend.services.auth import AuthService
from snack.backend.services.extension import ExtensionService

logger = get_logger(__name__)

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_db_session)]

_bearer = HTTPBearer(auto_error=False)
BearerCredentials = Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)]


async def get_request_id(request: Request) -> str:
    """The id RequestContextMiddleware resolved, so envelopes match the X-Request-ID header."""
    return getattr(request.state, "request_id", None) or resolve_request_id(request)


RequestId = Annotated[str, Depends(get_request_id)]


async def get_client_address(request: Request) -> str:
    """Caller IP resolved from proxy headers, falling back to the socket."""
    fallback = request.client.host if request.client else None
    return get_client_ip(request.headers, fallback=fallback)


ClientIp = Annotated[str, Depends(get_client_address)]


async def get_optional_user(db: DbSession, credentials: BearerCredentials) -> User | None:
    """
    Session user from a bearer JWT, or None for anonymous callers.

    An invalid token is treated the same as no token.
    """
    if credentials is None:
        return None
    try:
        return await AuthService(db).get_user_for_token(credentials.credentials)
    except AuthenticationError:
        return None


async def get_current_user(db: DbSession, credentials: BearerCredentials) -> User:
    """
    Session user from a bearer JWT.

    Raises:
        AuthenticationError: If no valid session token is present
    """
    if credentials is None:
        raise AuthenticationError("Authentication required")
    return await AuthService(db).get_user_for_token(credentials.credentials)


async def get_extension_user(db: DbSession, credentials: BearerCredentials) -> User:
    """
    Extension user from an opaque bearer access token.

    Raises:
        AuthenticationError: If the token is missing, unknown, revoked, or expired
    """
    if credentials is None:
        raise AuthenticationError("Unauthorized")
    return await ExtensionService(db).authenticate(credentials.credentials)


OptionalUser = Annotated[User | None, Depends(get_optional_user)]
CurrentUser = Annotated[User, Depends(get_current_user)]
ExtensionUser = Annotated[User, Depends(get_extension_user)]


def require_feature(flag: str) -> Callable:
    """
    Build a dependency that hides an endpoint when a features.yaml flag is off.

    Usage:
        @router.post("/checkout", dependencies=[Depends(require_feature("payments_enabled"))])
    """

    async def _check() -> None:
        if not getattr(get_app_config().features, flag):
            raise NotFoundError("This feature is not available")

    return _check
