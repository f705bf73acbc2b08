"""
Stripe Gateway.

Thin async wrapper around the Stripe SDK for Checkout, Connect Express
accounts, and webhook verification. SDK calls are blocking and run in a
worker thread. Stripe errors surface as ExternalServiceError; webhook
signature failures surface as ValidationError.
"""

import asyncio
from dataclasses import dataclass
from typing import Any

import stripe

from snack.backend.core.config import get_settings
from snack.backend.core.exceptions import ExternalServiceError, ValidationError
from snack.backend.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CheckoutSession:
    id: str
    url: str | None


@dataclass(frozen=True)
class ConnectAccountState:
    account_id: str
    charges_enabled: bool
    payouts_enabled: bool
    details_submitted: bool

    @property
    def is_active(self) -> bool:
        return self.charges_enabled and self.payouts_enabled and self.details_submitted


class StripeGateway:
    """Stripe operations used by checkout, onboarding, and webhooks."""

    def __init__(self, api_key: str, webhook_secret: str) -> None:
        self._api_key = api_key
        self._webhook_secret = webhook_secret

    async def _call(self, operation: str, fn: Any, **params: Any) -> Any:
        if not self._api_key:
            raise ExternalServiceError("Payments are not configured", service="stripe")
        try:
            return await asyncio.to_thread(fn, api_key=self._api_key, **params)
        except stripe.StripeError as e:
            logger.error(
                "Stripe request failed",
                extra={"operation": operation, "error": str(e), "code": getattr(e, "code", None)},
            )
            raise ExternalServiceError(f"Payment provider error: {operation}", service="stripe") from e

    async def create_checkout_session(self, **params: Any) -> CheckoutSession:
        session = await self._call("create_checkout_session", stripe.checkout.Session.create, **params)
        logger.info("Checkout session created", extra={"session_id": session.id})
        return CheckoutSession(id=session.id, url=session.url)

    async def create_express_account(self, email: str, metadata: dict[str, str]) -> str:
        account = await self._call(
            "create_express_account",
            stripe.Account.create,
            type="express",
            email=email,
            capabilities={
                "card_payments": {"requested": True},
                "transfers": {"requested": True},
            },
            business_type="individual",
            metadata=metadata,
        )
        return account.id

    async def create_account_link(self, account_id: str, refresh_url: str, return_url: str) -> str:
        link = await self._call(
            "create_account_link",
            stripe.AccountLink.create,
            account=account_id,
            refresh_url=refresh_url,
            return_url=return_url,
            type="account_onboarding",
        )
        return link.url

    async def retrieve_account(self, account_id: str) -> ConnectAccountState:
        account = await self._call("retrieve_account", stripe.Account.retrieve, id=account_id)
        return ConnectAccountState(
            account_id=account.id,
            charges_enabled=bool(account.charges_enabled),
            payouts_enabled=bool(account.payouts_enabled),
            details_submitted=bool(account.details_submitted),
        )

    def construct_event(self, payload: bytes, signature: str) -> Any:
        """
        Verify a webhook payload against its stripe-signature header.

        Raises:
            ValidationError: If the payload or signature is invalid
        """
        if not self._webhook_secret:
            raise ExternalServiceError("Webhook secret is not configured", service="stripe")
        try:
            return stripe.Webhook.construct_event(payload, signature, self._webhook_secret)
        except ValueError as e:
            logger.warning("Invalid webhook payload", extra={"error": str(e)})
            raise ValidationError("Invalid payload") from e
        except stripe.SignatureVerificationError as e:
            logger.warning("Webhook signature verification failed", extra={"error": str(e)})
            raise ValidationError("Invalid signature") from e


def get_payment_gateway() -> StripeGateway:
    """FastAPI dependency providing the Stripe gateway."""
    settings = get_settings()
    return StripeGateway(
        api_key=settings.stripe_secret_key,
        webhook_secret=settings.stripe_webhook_secret,
    )
