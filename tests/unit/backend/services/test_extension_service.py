"""
Unit Tests for Extension Service.

Callback allow-list, the single-use code exchange, and opaque token
authentication.
"""

from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from snack.backend.core.exceptions import AuthenticationError, ValidationError
from snack.backend.core.utils import utc_now
from snack.backend.services.extension import (
    ExtensionService,
    allowed_callback_prefixes,
    is_allowed_callback,
)


@pytest.fixture(autouse=True)
def _config(mock_app_config):
    with patch("snack.backend.services.extension.get_app_config", return_value=mock_app_config):
        yield


@pytest.fixture
def service(mock_db_session):
    service = ExtensionService(mock_db_session)
    service.codes.create = AsyncMock()
    service.codes.get_usable = AsyncMock(return_value=None)
    service.tokens.create = AsyncMock(side_effect=lambda **fields: SimpleNamespace(id="token-1", **fields))
    service.tokens.get_by_refresh_token = AsyncMock(return_value=None)
    service.tokens.get_by_access_token = AsyncMock(return_value=None)
    service.tokens.revoke_refresh_token = AsyncMock(return_value=1)
    service.users.get_by_id = AsyncMock(return_value=SimpleNamespace(id="user-1", email="ada@example.com"))
    service.users.get_by_id_or_none = AsyncMock(return_value=SimpleNamespace(id="user-1"))
    return service


class TestCallbackAllowList:
    def test_site_callback_page_is_always_allowed(self):
        assert "https://snack.xyz/extension/callback" in allowed_callback_prefixes()

    @pytest.mark.parametrize(
        "url",
        [
            "chrome-extension://abcdef/callback.html",
            "http://localhost:5173/cb",
            "https://snack.xyz/extension/callback?state=1",
        ],
    )
    def test_allowed(self, url):
        assert is_allowed_callback(url) is True

    @pytest.mark.parametrize("url", ["https://evil.example/cb", "https://snack.xyz/other"])
    def test_rejected(self, url):
        assert is_allowed_callback(url) is False


class TestCreateAuthCode:
    @pytest.mark.asyncio
    async def test_issues_code_with_short_expiry(self, service):
        code = await service.create_auth_code("user-1", "chrome-extension://abc/cb")

        kwargs = service.codes.create.await_args.kwargs
        assert kwargs["code"] == code
        assert kwargs["user_id"] == "user-1"
        assert kwargs["expires_at"] - utc_now() <= timedelta(minutes=5)

    @pytest.mark.asyncio
    async def test_callback_required(self, service):
        with pytest.raises(ValidationError, match="callback_url is required"):
            await service.create_auth_code("user-1", None)

    @pytest.mark.asyncio
    async def test_disallowed_callback(self, service):
        with pytest.raises(ValidationError, match="Invalid callback URL"):
            await service.create_auth_code("user-1", "https://evil.example/cb")

        service.codes.create.assert_not_called()


class TestExchangeCode:
    @pytest.mark.asyncio
    async def test_code_required(self, service):
        with pytest.raises(ValidationError, match="code is required"):
            await service.exchange_code("")

    @pytest.mark.asyncio
    async def test_unusable_code(self, service):
        with pytest.raises(ValidationError, match="Invalid or expired code"):
            await service.exchange_code("used-or-expired")

        service.tokens.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_marks_code_used_and_issues_pair(self, service):
        auth_code = SimpleNamespace(user_id="user-1", used_at=None)
        service.codes.get_usable.return_value = auth_code

        issued = await service.exchange_code("good-code")

        assert auth_code.used_at is not None
        assert issued.user.id == "user-1"
        token = issued.token
        assert token.access_token != token.refresh_token
        assert token.refresh_token_expires_at - token.access_token_expires_at > timedelta(days=29)


class TestRefreshAndRevoke:
    @pytest.mark.asyncio
    async def test_refresh_required(self, service):
        with pytest.raises(ValidationError):
            await service.refresh_access_token(None)

    @pytest.mark.asyncio
    async def test_unknown_refresh_token(self, service):
        with pytest.raises(AuthenticationError, match="Invalid or expired refresh token"):
            await service.refresh_access_token("nope")

    @pytest.mark.asyncio
    async def test_rotates_access_token_on_same_row(self, service):
        token = SimpleNamespace(user_id="user-1", access_token="old", access_token_expires_at=None, last_used_at=None)
        service.tokens.get_by_refresh_token.return_value = token

        refreshed = await service.refresh_access_token("refresh-1")

        assert refreshed is token
        assert token.access_token != "old"
        assert token.access_token_expires_at is not None

    @pytest.mark.asyncio
    async def test_revoke_unknown_token_is_silent(self, service):
        service.tokens.revoke_refresh_token.return_value = 0

        await service.revoke("unknown")

    @pytest.mark.asyncio
    async def test_revoke_requires_token(self, service):
        with pytest.raises(ValidationError):
            await service.revoke(None)


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_unknown_token(self, service):
        with pytest.raises(AuthenticationError, match="Unauthorized"):
            await service.authenticate("bogus")

    @pytest.mark.asyncio
    async def test_valid_token_marks_last_use(self, service):
        token = SimpleNamespace(user_id="user-1", last_used_at=None)
        service.tokens.get_by_access_token.return_value = token

        user = await service.authenticate("access-1")

        assert user.id == "user-1"
        assert token.last_used_at is not None

    @pytest.mark.asyncio
    async def test_deleted_user(self, service):
        service.tokens.get_by_access_token.return_value = SimpleNamespace(user_id="gone", last_used_at=None)
        service.users.get_by_id_or_none.return_value = None

        with pytest.raises(AuthenticationError):
            await service.authenticate("access-1")
