"""
Integration Test Fixtures.

Fixtures for integration tests - uses a real database and the full app.
External providers (Stripe, Resend, RevenueCat, OpenAI, page fetches)
are replaced with fakes, and avatars are written under tmp_path.
These fixtures build on the root conftest.py database fixtures.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from snack.backend.core.database import get_db_session
from snack.backend.core.rate_limiter import get_rate_limiter
from snack.backend.core.security import hash_password
from snack.backend.integrations.ai_summary import ListSummarizer, get_list_summarizer
from snack.backend.integrations.avatars import AvatarStore, get_avatar_store
from snack.backend.integrations.email import Mailer, get_mailer
from snack.backend.integrations.opengraph import LinkPreview, get_link_preview_client
from snack.backend.integrations.revenuecat import RevenueCatVerifier, get_revenuecat_verifier
from snack.backend.integrations.stripe_gateway import CheckoutSession, get_payment_gateway
from snack.backend.models.user import User
from snack.backend.repositories.user import UserRepository

TEST_JWT_SECRET = "integration-test-secret-key-that-is-long-enough"
TEST_REVENUECAT_SECRET = "rc-integration-webhook-secret"
TEST_PASSWORD = "correct-horse-battery"


# =============================================================================
# Provider Fakes
# =============================================================================


class FakePreviewClient:
    """Preview client that never touches the network."""

    def __init__(self) -> None:
        self.fetched: list[str] = []

    async def fetch(self, url: str) -> LinkPreview:
        self.fetched.append(url)
        return LinkPreview(
            url=url,
            title="Fetched title",
            description="Fetched description",
            image="https://cdn.example.com/card.png",
            site_name="Example",
            favicon="https://example.com/favicon.ico",
        )


@pytest.fixture
def fake_previews() -> FakePreviewClient:
    return FakePreviewClient()


@pytest.fixture
def fake_gateway() -> MagicMock:
    """Stripe gateway double with canned Checkout and Connect responses."""
    gateway = MagicMock()
    gateway.create_checkout_session = AsyncMock(
        return_value=CheckoutSession(id="cs_test_123", url="https://checkout.stripe.com/c/cs_test_123"),
    )
    gateway.create_express_account = AsyncMock(return_value="acct_test_123")
    gateway.create_account_link = AsyncMock(return_value="https://connect.stripe.com/setup/acct_test_123")
    gateway.retrieve_account = AsyncMock()
    gateway.construct_event = MagicMock()
    return gateway


@pytest.fixture
def unconfigured_mailer() -> Mailer:
    return Mailer(
        api_key="",
        api_base_url="https://api.resend.com",
        from_address="Snack <hello@snack.xyz>",
        timeout=5,
    )


@pytest.fixture
def revenuecat_headers() -> dict[str, str]:
    """The Authorization header RevenueCat is configured to send."""
    return {"Authorization": f"Bearer {TEST_REVENUECAT_SECRET}"}


@pytest.fixture
def avatar_store(tmp_path) -> AvatarStore:
    return AvatarStore(directory=tmp_path / "avatars", base_url="http://test/media/avatars")


@pytest.fixture(autouse=True)
def _reset_rate_limiter() -> None:
    """Rate limit windows are process-global; start every test clean."""
    get_rate_limiter().reset()


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
async def client(
    db_session: AsyncSession,
    fake_previews: FakePreviewClient,
    fake_gateway: MagicMock,
    unconfigured_mailer: Mailer,
    avatar_store: AvatarStore,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client with database and provider overrides.

    The client uses the test database session, ensuring all API
    operations use the same session that gets rolled back after the test.

    Usage:
        async def test_health_endpoint(client: AsyncClient):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    # No config/.env exists in the test environment
    with patch("snack.backend.core.config.get_settings") as mock_config_settings, \
         patch("snack.backend.core.security.get_settings") as mock_security_settings:
        mock_settings = _create_mock_settings()
        mock_config_settings.return_value = mock_settings
        mock_security_settings.return_value = mock_settings

        from snack.backend.main import create_app

        app = create_app()
        app.dependency_overrides[get_db_session] = override_get_db_session
        app.dependency_overrides[get_link_preview_client] = lambda: fake_previews
        app.dependency_overrides[get_payment_gateway] = lambda: fake_gateway
        app.dependency_overrides[get_mailer] = lambda: unconfigured_mailer
        app.dependency_overrides[get_avatar_store] = lambda: avatar_store
        app.dependency_overrides[get_revenuecat_verifier] = lambda: RevenueCatVerifier(TEST_REVENUECAT_SECRET)
        # Heuristic summaries only; no model is ever called
        app.dependency_overrides[get_list_summarizer] = lambda: ListSummarizer(None)

        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as test_client:
            yield test_client

        app.dependency_overrides.clear()


# =============================================================================
# Mock Settings Helper
# =============================================================================


def _create_mock_settings() -> Any:
    """Create a mock settings object for testing."""
    settings = MagicMock()
    settings.db_password = "test-password"
    settings.jwt_secret = TEST_JWT_SECRET
    settings.stripe_secret_key = ""
    settings.stripe_webhook_secret = ""
    settings.resend_api_key = ""
    settings.openai_api_key = ""
    settings.revenuecat_webhook_secret = TEST_REVENUECAT_SECRET
    settings.database_url = ""
    return settings


# =============================================================================
# API Response Assertion Helpers
# =============================================================================


class ApiAssertions:
    """Helper class for API response assertions."""

    @staticmethod
    def assert_success(response: Any, expected_status: int = 200) -> dict[str, Any]:
        """
        Assert API response is successful.

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is True, f"Response not successful: {data}"
        return data

    @staticmethod
    def assert_error(
        response: Any,
        expected_status: int,
        expected_code: str | None = None,
    ) -> dict[str, Any]:
        """
        Assert API response is an error.

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is False, f"Response should be error: {data}"
        assert data.get("error") is not None, f"Missing error details: {data}"

        if expected_code:
            actual_code = data["error"].get("code")
            assert actual_code == expected_code, (
                f"Expected error code {expected_code}, got {actual_code}"
            )

        return data

    @staticmethod
    def assert_validation_error(
        response: Any,
        field: str | None = None,
    ) -> dict[str, Any]:
        """Assert API response is a request validation error (422)."""
        data = ApiAssertions.assert_error(response, 422, "VAL_REQUEST_INVALID")

        if field:
            errors = data["error"].get("details", {}).get("validation_errors", [])
            fields = [e.get("field", "") for e in errors]
            assert any(field in f for f in fields), (
                f"Expected validation error for field '{field}', "
                f"got errors for: {fields}"
            )

        return data


@pytest.fixture
def api() -> ApiAssertions:
    """Provide API assertion helpers."""
    return ApiAssertions()


# =============================================================================
# User Fixtures
# =============================================================================


UserFactory = Callable[..., Awaitable[User]]


@pytest.fixture
def make_user(db_session: AsyncSession) -> UserFactory:
    """
    Factory creating accounts directly in the test database.

    Usage:
        async def test_something(make_user):
            user = await make_user(username="ada")
    """
    counter = {"n": 0}

    async def _make_user(
        username: str | None = None,
        email: str | None = None,
        password: str = TEST_PASSWORD,
        **fields: Any,
    ) -> User:
        counter["n"] += 1
        email = email or f"user{counter['n']}@example.com"
        return await UserRepository(db_session).create(
            email=email,
            hashed_password=hash_password(password),
            username=username,
            **fields,
        )

    return _make_user


def bearer(user: User) -> dict[str, str]:
    """Session auth headers for a user. Call inside the client fixture's scope."""
    from snack.backend.core.security import create_access_token

    token = create_access_token({"sub": user.id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_for(client: AsyncClient) -> Callable[[User], dict[str, str]]:
    """Bearer header builder for users created inside a test."""
    return bearer


@pytest.fixture
def user_password() -> str:
    return TEST_PASSWORD


@pytest.fixture
async def user(client: AsyncClient, make_user: UserFactory) -> User:
    return await make_user(username="ada", email="ada@example.com")


@pytest.fixture
async def other_user(client: AsyncClient, make_user: UserFactory) -> User:
    return await make_user(username="grace", email="grace@example.com")


@pytest.fixture
def auth_headers(user: User) -> dict[str, str]:
    """
    Provide authentication headers for API requests.

    Usage:
        async def test_protected_endpoint(client: AsyncClient, auth_headers: dict):
            response = await client.get("/api/v1/profile", headers=auth_headers)
            assert response.status_code == 200
    """
    return bearer(user)


@pytest.fixture
def other_headers(other_user: User) -> dict[str, str]:
    return bearer(other_user)
