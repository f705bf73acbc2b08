"""
Extension Auth Repositories.

Data access for extension authorization codes and tokens.
"""

from datetime import datetime

from sqlalchemy import select, update

from snack.backend.models.extension import ExtensionAuthCode, ExtensionToken
from snack.backend.repositories.base import BaseRepository


class ExtensionAuthCodeRepository(BaseRepository[ExtensionAuthCode]):
    model = ExtensionAuthCode

    async def get_usable(self, code: str, now: datetime) -> ExtensionAuthCode | None:
        """A code that exists, has not been used, and has not expired."""
        return await self._one_or_none(
            select(ExtensionAuthCode)
            .where(ExtensionAuthCode.code == code)
            .where(ExtensionAuthCode.used_at.is_(None))
            .where(ExtensionAuthCode.expires_at > now)
        )


class ExtensionTokenRepository(BaseRepository[ExtensionToken]):
    model = ExtensionToken

    async def get_by_access_token(self, token: str, now: datetime) -> ExtensionToken | None:
        """A valid (unrevoked, unexpired) access token row."""
        return await self._one_or_none(
            select(ExtensionToken)
            .where(ExtensionToken.access_token == token)
            .where(ExtensionToken.revoked_at.is_(None))
            .where(ExtensionToken.access_token_expires_at > now)
        )

    async def get_by_refresh_token(self, token: str, now: datetime) -> ExtensionToken | None:
        """A valid (unrevoked, unexpired) refresh token row."""
        return await self._one_or_none(
            select(ExtensionToken)
            .where(ExtensionToken.refresh_token == token)
            .where(ExtensionToken.revoked_at.is_(None))
            .where(ExtensionToken.refresh_token_expires_at > now)
        )

    async def revoke_refresh_token(self, token: str, now: datetime) -> int:
        result = await self.session.execute(
            update(ExtensionToken)
            .where(ExtensionToken.refresh_token == token)
            .where(ExtensionToken.revoked_at.is_(None))
            .values(revoked_at=now)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    async def revoke_all_for_user(self, user_id: str, now: datetime) -> int:
        result = await self.session.execute(
            update(ExtensionToken)
            .where(ExtensionToken.user_id == user_id)
            .where(ExtensionToken.revoked_at.is_(None))
            .values(revoked_at=now)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount
