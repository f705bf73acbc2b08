"""
Unit Test Fixtures.

Fixtures for unit tests - all external dependencies are mocked.
Unit tests should be fast and isolated, never touching real databases.
"""

from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from snack.backend.core.config_schema import (
    AiSummarySchema,
    AvatarStorageSchema,
    EmailSchema,
    ExtensionAuthSchema,
    IntegrationsSchema,
    OpenGraphSchema,
    PaymentsSchema,
)


# =============================================================================
# Database Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """
    Mock database session for unit tests.

    Usage:
        def test_service(mock_db_session: AsyncMock):
            service = ListService(mock_db_session)
    """
    session = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.execute = AsyncMock()
    session.add = MagicMock()
    session.delete = AsyncMock()
    session.get = AsyncMock()
    return session


# =============================================================================
# Config Stub Fixtures
# =============================================================================


@pytest.fixture
def payments_config() -> PaymentsSchema:
    """Real PaymentsSchema with production values."""
    return PaymentsSchema(
        platform_fee_percentage=0.20,
        min_price_cents=99,
        max_price_cents=99900,
        min_payout_cents=1000,
        default_currency="usd",
        statement_descriptor="SNACK",
        currencies={
            "usd": {"symbol": "$", "name": "US Dollar", "decimals": 2},
            "eur": {"symbol": "€", "name": "Euro", "decimals": 2},
            "jpy": {"symbol": "¥", "name": "Japanese Yen", "decimals": 0},
        },
    )


@pytest.fixture
def integrations_config() -> IntegrationsSchema:
    return IntegrationsSchema(
        opengraph=OpenGraphSchema(
            user_agent="Mozilla/5.0 (compatible; SnackBot/1.0; +https://snack.com/bot)",
            timeout_seconds=10,
            favicon_service_url="https://www.google.com/s2/favicons?domain={domain}&sz=32",
        ),
        email=EmailSchema(
            api_base_url="https://api.resend.com",
            from_address="Snack <hello@snack.xyz>",
            timeout_seconds=10,
        ),
        avatars=AvatarStorageSchema(
            directory="data/avatars",
            url_path="/media/avatars",
            max_bytes=2 * 1024 * 1024,
            allowed_content_types=["image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"],
        ),
        ai_summary=AiSummarySchema(model="gpt-4o-mini", temperature=0.7, max_tokens=300, max_links=100),
    )


@pytest.fixture
def extension_config() -> ExtensionAuthSchema:
    return ExtensionAuthSchema(
        access_token_expire_hours=1,
        refresh_token_expire_days=30,
        auth_code_expire_minutes=5,
        allowed_callback_prefixes=["chrome-extension://", "http://localhost"],
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )


@pytest.fixture
def mock_app_config(payments_config, integrations_config, extension_config) -> SimpleNamespace:
    """
    Stub of AppConfig built from real schema objects where it matters.

    Usage:
        def test_with_config(mock_app_config):
            with patch("module.get_app_config", return_value=mock_app_config):
                ...
    """
    return SimpleNamespace(
        application=SimpleNamespace(
            public_url="https://snack.xyz",
            environment="test",
            pagination=SimpleNamespace(default_limit=20, max_limit=100),
        ),
        payments=payments_config,
        integrations=integrations_config,
        security=SimpleNamespace(extension=extension_config),
        features=SimpleNamespace(
            payments_enabled=True,
            emails_enabled=True,
            link_previews_enabled=True,
            auth_rate_limit_enabled=True,
            ai_summaries_enabled=True,
        ),
    )


# =============================================================================
# HTTP Mock Fixtures
# =============================================================================


class MockResponse:
    """Mock HTTP response for testing."""

    def __init__(
        self,
        status_code: int,
        json_data: dict[str, Any] | None = None,
        text: str = "",
    ) -> None:
        self.status_code = status_code
        self._json_data = json_data or {}
        self.text = text or str(json_data)

    def json(self) -> dict[str, Any]:
        return self._json_data


@pytest.fixture
def mock_response() -> type[MockResponse]:
    """Provide MockResponse class for creating mock HTTP responses."""
    return MockResponse
