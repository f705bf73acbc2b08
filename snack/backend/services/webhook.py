"""
Stripe Webhook Service.

Applies verified Stripe events to local state. Events are plain
mappings (stripe.Event behaves like a dict).
"""

from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from snack.backend.core.utils import utc_now
from snack.backend.domain.pricing import calculate_pricing
from snack.backend.models.user import StripeAccountStatus
from snack.backend.repositories.purchase import PurchaseRepository
from snack.backend.repositories.user import UserRepository
from snack.backend.services.base import BaseService

DEFAULT_REFUND_REASON = "Refunded via Stripe dashboard"


def _charge_id(payment_intent: Mapping[str, Any]) -> str | None:
    latest = payment_intent.get("latest_charge")
    if isinstance(latest, Mapping):
        return latest.get("id")
    return latest


def _receipt_url(payment_intent: Mapping[str, Any]) -> str | None:
    latest = payment_intent.get("latest_charge")
    if isinstance(latest, Mapping):
        return latest.get("receipt_url")
    charges = (payment_intent.get("charges") or {}).get("data") or []
    return charges[0].get("receipt_url") if charges else None


class StripeWebhookService(BaseService):
    """Dispatches Stripe events to their handlers."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.purchases = PurchaseRepository(session)
        self.users = UserRepository(session)

    async def handle_event(self, event: Mapping[str, Any]) -> None:
        event_type = event["type"]
        obj = event["data"]["object"]

        self._log_operation("Stripe event received", event_type=event_type, event_id=event.get("id"))

        if event_type == "payment_intent.succeeded":
            await self.handle_payment_succeeded(obj)
        elif event_type == "account.updated":
            await self.handle_account_updated(obj)
        elif event_type == "charge.refunded":
            await self.handle_charge_refunded(obj)
        elif event_type == "checkout.session.completed":
            self._log_operation("Checkout completed", session_id=obj.get("id"))
        elif event_type == "payment_intent.payment_failed":
            error = obj.get("last_payment_error") or {}
            self._logger.warning(
                "Payment failed",
                extra={"payment_intent_id": obj.get("id"), "reason": error.get("message")},
            )
        else:
            self._log_debug("Unhandled Stripe event", event_type=event_type)

    async def handle_payment_succeeded(self, payment_intent: Mapping[str, Any]) -> None:
        """Record a list purchase. Idempotent on the payment intent id."""
        metadata = payment_intent.get("metadata") or {}
        if metadata.get("type") != "list_purchase":
            return

        list_id = metadata.get("list_id")
        buyer_id = metadata.get("buyer_id")
        if not list_id or not buyer_id:
            self._logger.error(
                "Payment intent missing purchase metadata",
                extra={"payment_intent_id": payment_intent.get("id")},
            )
            return

        payment_intent_id = payment_intent["id"]
        if await self.purchases.get_by_payment_intent(payment_intent_id) is not None:
            self._log_debug("Purchase already recorded", payment_intent_id=payment_intent_id)
            return

        pricing = calculate_pricing(payment_intent["amount"])
        await self._execute_db_operation(
            "record_purchase",
            self.purchases.create(
                user_id=buyer_id,
                list_id=list_id,
                amount_paid=pricing.amount,
                currency=payment_intent.get("currency", "usd"),
                platform_fee=pricing.platform_fee,
                creator_earnings=pricing.creator_earnings,
                stripe_payment_intent_id=payment_intent_id,
                stripe_charge_id=_charge_id(payment_intent),
                stripe_receipt_url=_receipt_url(payment_intent),
            ),
        )
        self._log_operation("Purchase recorded", list_id=list_id, buyer_id=buyer_id)

    async def handle_account_updated(self, account: Mapping[str, Any]) -> None:
        user = await self.users.get_by_stripe_account(account["id"])
        if user is None:
            self._logger.warning("No user for Connect account", extra={"account_id": account["id"]})
            return

        active = bool(
            account.get("charges_enabled")
            and account.get("payouts_enabled")
            and account.get("details_submitted")
        )
        status = StripeAccountStatus.ACTIVE if active else StripeAccountStatus.PENDING
        await self.users.update(user.id, stripe_account_status=status)
        self._log_operation("Connect account status updated", user_id=user.id, status=status)

    async def handle_charge_refunded(self, charge: Mapping[str, Any]) -> None:
        purchase = await self.purchases.get_by_charge(charge["id"])
        if purchase is None:
            payment_intent_id = charge.get("payment_intent")
            if payment_intent_id:
                purchase = await self.purchases.get_by_payment_intent(payment_intent_id)
        if purchase is None:
            self._logger.warning("No purchase for refunded charge", extra={"charge_id": charge["id"]})
            return

        refunds = (charge.get("refunds") or {}).get("data") or []
        reason = refunds[0].get("reason") if refunds else None
        await self.purchases.update(
            purchase.id,
            refunded_at=utc_now(),
            refund_reason=reason or DEFAULT_REFUND_REASON,
        )
        self._log_operation("Purchase refunded", purchase_id=purchase.id)
