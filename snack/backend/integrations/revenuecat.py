"""
RevenueCat Webhook Verification.

RevenueCat delivers mobile in-app purchase events with a static
Authorization header configured in its dashboard, compared here in
constant time.
"""

import hmac

from snack.backend.core.config import get_settings
from snack.backend.core.exceptions import AuthenticationError, ExternalServiceError
from snack.backend.core.logging import get_logger

logger = get_logger(__name__)


class RevenueCatVerifier:
    def __init__(self, webhook_secret: str) -> None:
        self._webhook_secret = webhook_secret

    def verify(self, authorization: str | None) -> None:
        """
        Raises:
            ExternalServiceError: If no webhook secret is configured
            AuthenticationError: If the header does not carry the secret
        """
        if not self._webhook_secret:
            raise ExternalServiceError("Webhook secret is not configured", service="revenuecat")

        expected = f"Bearer {self._webhook_secret}"
        if not authorization or not hmac.compare_digest(authorization.encode(), expected.encode()):
            logger.warning("RevenueCat webhook authorization failed")
            raise AuthenticationError("Invalid webhook authorization")


def get_revenuecat_verifier() -> RevenueCatVerifier:
    """FastAPI dependency providing the webhook verifier."""
    return RevenueCatVerifier(webhook_secret=get_settings().revenuecat_webhook_secret)
