"""
Transactional Email.

Sends email through the Resend REST API. Sending is best effort: when
emails are disabled or no API key is configured the send is skipped.
"""

import httpx

from snack.backend.core.config import get_app_config, get_settings
from snack.backend.core.exceptions import ExternalServiceError
from snack.backend.core.logging import get_logger

logger = get_logger(__name__)

WELCOME_SUBJECT = "Welcome to Snack"


def render_welcome_email(username: str | None, public_url: str) -> str:
    greeting = f"Hi {username}," if username else "Hi there,"
    return (
        f"<p>{greeting}</p>"
        "<p>Welcome to Snack. Start your first list, add a few links, "
        "and share it with anyone.</p>"
        f'<p><a href="{public_url}">Open Snack</a></p>'
    )


class Mailer:
    """Resend API client."""

    def __init__(
        self,
        api_key: str,
        api_base_url: str,
        from_address: str,
        timeout: float,
        enabled: bool = True,
    ) -> None:
        self._api_key = api_key
        self._api_base_url = api_base_url.rstrip("/")
        self._from_address = from_address
        self._timeout = timeout
        self._enabled = enabled

    @property
    def is_configured(self) -> bool:
        return self._enabled and bool(self._api_key)

    async def send_email(self, to: str, subject: str, html: str) -> str | None:
        """
        Send a single email.

        Returns:
            The provider message id, or None when sending is skipped

        Raises:
            ExternalServiceError: If the provider rejects the request
        """
        if not self.is_configured:
            logger.info("Email sending skipped", extra={"subject": subject, "reason": "not configured"})
            return None

        try:
            async with httpx.AsyncClient(timeout=httpx.Timeout(self._timeout)) as client:
                response = await client.post(
                    f"{self._api_base_url}/emails",
                    headers={"Authorization": f"Bearer {self._api_key}"},
                    json={
                        "from": self._from_address,
                        "to": [to],
                        "subject": subject,
                        "html": html,
                    },
                )
                response.raise_for_status()
            message_id = response.json().get("id")
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Email send failed", extra={"subject": subject, "error": str(e)})
            raise ExternalServiceError("Email provider error", service="resend") from e

        logger.info("Email sent", extra={"subject": subject, "message_id": message_id})
        return message_id

    async def send_welcome_email(self, to: str, username: str | None) -> bool:
        """Send the signup welcome email. Failures are logged, never raised."""
        html = render_welcome_email(username, get_app_config().application.public_url)
        try:
            return await self.send_email(to, WELCOME_SUBJECT, html) is not None
        except ExternalServiceError:
            logger.warning("Welcome email not delivered", extra={"username": username})
            return False


def get_mailer() -> Mailer:
    """FastAPI dependency providing the mailer."""
    app_config = get_app_config()
    email_config = app_config.integrations.email
    return Mailer(
        api_key=get_settings().resend_api_key,
        api_base_url=email_config.api_base_url,
        from_address=email_config.from_address,
        timeout=email_config.timeout_seconds,
        enabled=app_config.features.emails_enabled,
    )
