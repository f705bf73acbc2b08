"""
Extension Service.

The browser extension's auth bridge: a signed-in web user authorizes
the extension, which exchanges the one-time code for an opaque token
pair. Tokens are stored server-side and can be revoked.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from snack.backend.core.config import get_app_config
from snack.backend.core.exceptions import AuthenticationError, ValidationError
from snack.backend.core.security import generate_auth_code, generate_opaque_token
from snack.backend.core.utils import utc_now
from snack.backend.integrations.opengraph import LinkPreviewClient
from snack.backend.models.extension import ExtensionToken
from snack.backend.models.list import List
from snack.backend.models.user import User
from snack.backend.repositories.extension import ExtensionAuthCodeRepository, ExtensionTokenRepository
from snack.backend.repositories.list import ListRepository
from snack.backend.repositories.user import UserRepository
from snack.backend.schemas.extension import ExtensionLinkData, ExtensionListCreate
from snack.backend.schemas.list import ListCreate
from snack.backend.services.base import BaseService
from snack.backend.services.link import LinkService
from snack.backend.services.list import ListService

EXTENSION_LIST_LIMIT = 500


@dataclass
class IssuedTokens:
    token: ExtensionToken
    user: User


def allowed_callback_prefixes() -> list[str]:
    """Configured prefixes plus the site's own extension callback page."""
    app_config = get_app_config()
    prefixes = list(app_config.security.extension.allowed_callback_prefixes)
    own = f"{app_config.application.public_url.rstrip('/')}/extension/callback"
    if own not in prefixes:
        prefixes.append(own)
    return prefixes


def is_allowed_callback(callback_url: str) -> bool:
    return any(callback_url.startswith(prefix) for prefix in allowed_callback_prefixes())


class ExtensionService(BaseService):
    """Auth codes, token pairs, and the extension's list operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.codes = ExtensionAuthCodeRepository(session)
        self.tokens = ExtensionTokenRepository(session)
        self.users = UserRepository(session)
        self.lists = ListRepository(session)
        self.list_service = ListService(session)

    async def create_auth_code(self, user_id: str, callback_url: str | None) -> str:
        """
        Issue a single-use authorization code for the extension.

        Raises:
            ValidationError: If callback_url is missing or not allowed
        """
        if not callback_url:
            raise ValidationError("callback_url is required")
        if not is_allowed_callback(callback_url):
            raise ValidationError("Invalid callback URL")

        lifetime = get_app_config().security.extension.auth_code_expire_minutes
        code = generate_auth_code()
        await self._execute_db_operation(
            "create_auth_code",
            self.codes.create(
                code=code,
                user_id=user_id,
                callback_url=callback_url,
                expires_at=utc_now() + timedelta(minutes=lifetime),
            ),
        )
        self._log_operation("Extension auth code issued", user_id=user_id)
        return code

    async def exchange_code(self, code: str | None) -> IssuedTokens:
        """
        Trade an auth code for a token pair. The code is marked used.

        Raises:
            ValidationError: If the code is missing, unknown, used, or expired
        """
        if not code:
            raise ValidationError("code is required")

        now = utc_now()
        auth_code = await self.codes.get_usable(code, now)
        if auth_code is None:
            raise ValidationError("Invalid or expired code")

        auth_code.used_at = now
        await self.session.flush()

        user = await self.users.get_by_id(auth_code.user_id)
        config = get_app_config().security.extension
        token = await self._execute_db_operation(
            "issue_extension_tokens",
            self.tokens.create(
                user_id=user.id,
                access_token=generate_opaque_token(),
                refresh_token=generate_opaque_token(),
                access_token_expires_at=now + timedelta(hours=config.access_token_expire_hours),
                refresh_token_expires_at=now + timedelta(days=config.refresh_token_expire_days),
            ),
        )
        self._log_operation("Extension tokens issued", user_id=user.id)
        return IssuedTokens(token=token, user=user)

    async def refresh_access_token(self, refresh_token: str | None) -> ExtensionToken:
        """
        Re-issue the access token on the same token row.

        Raises:
            ValidationError: If refresh_token is missing
            AuthenticationError: If it is unknown, revoked, or expired
        """
        if not refresh_token:
            raise ValidationError("refresh_token is required")

        now = utc_now()
        token = await self.tokens.get_by_refresh_token(refresh_token, now)
        if token is None:
            raise AuthenticationError("Invalid or expired refresh token")

        hours = get_app_config().security.extension.access_token_expire_hours
        token.access_token = generate_opaque_token()
        token.access_token_expires_at = now + timedelta(hours=hours)
        token.last_used_at = now
        await self.session.flush()

        self._log_debug("Extension access token refreshed", user_id=token.user_id)
        return token

    async def revoke(self, refresh_token: str | None) -> None:
        """Revoke a token pair. Unknown or already revoked tokens are ignored."""
        if not refresh_token:
            raise ValidationError("refresh_token is required")
        revoked = await self.tokens.revoke_refresh_token(refresh_token, utc_now())
        if revoked:
            self._log_operation("Extension token revoked")

    async def authenticate(self, access_token: str) -> User:
        """
        Resolve a bearer access token to its user and mark it used.

        Raises:
            AuthenticationError: If the token is unknown, revoked, or expired
        """
        now = utc_now()
        token = await self.tokens.get_by_access_token(access_token, now)
        if token is None:
            raise AuthenticationError("Unauthorized")

        token.last_used_at = now
        await self.session.flush()

        user = await self.users.get_by_id_or_none(token.user_id)
        if user is None:
            raise AuthenticationError("Unauthorized")
        return user

    async def list_lists(self, user_id: str) -> list[tuple[List, int]]:
        """The user's lists, most recently updated first."""
        return await self.lists.list_by_owner(user_id, limit=EXTENSION_LIST_LIMIT, order_by="updated_at")

    async def create_list(self, user_id: str, data: ExtensionListCreate) -> List:
        return await self.list_service.create_list(
            user_id,
            ListCreate(title=data.title, emoji=data.emoji, is_public=data.is_public),
        )

    async def add_links(
        self,
        list_id: str,
        user_id: str,
        links: Sequence[ExtensionLinkData],
        previews: LinkPreviewClient | None = None,
    ) -> tuple[int, int]:
        """
        Add links to the top of one of the user's lists.

        Returns:
            Tuple of (links added, links submitted). Invalid URLs are skipped.

        Raises:
            NotFoundError: If the list does not exist
            AuthorizationError: If user_id is not the owner
        """
        lst = await self.list_service.get_owned(list_id, user_id)
        link_service = LinkService(self.session, previews=previews)
        added = await link_service.prepend_links(lst, links)
        return added, len(links)
