"""
RevenueCat Webhook Service.

Records list purchases made through the mobile app stores. Purchases
share the list_purchases table with Stripe; their idempotency key is the
store transaction id prefixed with "rc_".
"""

from sqlalchemy.ext.asyncio import AsyncSession

from snack.backend.core.config import get_app_config
from snack.backend.domain.pricing import calculate_pricing
from snack.backend.repositories.list import ListRepository
from snack.backend.repositories.purchase import PurchaseRepository
from snack.backend.repositories.user import UserRepository
from snack.backend.schemas.purchase import RevenueCatEvent
from snack.backend.services.base import BaseService

PURCHASE_EVENTS = ("INITIAL_PURCHASE", "NON_RENEWING_PURCHASE")
SUBSCRIPTION_EVENTS = ("RENEWAL", "CANCELLATION", "UNCANCELLATION", "EXPIRATION", "PRODUCT_CHANGE")
TRANSACTION_PREFIX = "rc_"


def amount_in_minor_units(price: float | None, currency: str) -> int:
    """Major units to the smallest unit of currency (yen has none)."""
    if not price:
        return 0
    known = get_app_config().payments.currencies.get(currency)
    decimals = known.decimals if known else 2
    return round(price * 10**decimals)


class RevenueCatWebhookService(BaseService):
    """Dispatches RevenueCat events to their handlers."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.purchases = PurchaseRepository(session)
        self.users = UserRepository(session)
        self.lists = ListRepository(session)

    def should_skip(self, event: RevenueCatEvent) -> str | None:
        """Sandbox events are ignored in production."""
        if event.environment != "PRODUCTION" and get_app_config().application.environment == "production":
            return "sandbox"
        return None

    async def handle_event(self, event: RevenueCatEvent) -> None:
        self._log_operation(
            "RevenueCat event received",
            event_type=event.type,
            event_id=event.id,
            store=event.store,
            environment=event.environment,
        )

        if event.type in PURCHASE_EVENTS:
            await self.handle_purchase(event)
        elif event.type in SUBSCRIPTION_EVENTS:
            # Lists are one-time purchases; subscription lifecycle has nothing to update
            self._log_debug("Subscription event ignored", event_type=event.type, event_id=event.id)
        elif event.type == "BILLING_ISSUE":
            self._logger.warning(
                "RevenueCat billing issue",
                extra={"event_id": event.id, "app_user_id": event.app_user_id},
            )
        else:
            self._log_debug("Unhandled RevenueCat event", event_type=event.type)

    async def handle_purchase(self, event: RevenueCatEvent) -> None:
        """
        Record a store purchase. Idempotent on the transaction id.

        The store keeps its cut first: the creator gets their usual share
        scaled by takehome_percentage, and the platform keeps the rest.
        """
        list_id = event.list_id
        if not list_id:
            self._logger.error("RevenueCat purchase without list_id", extra={"event_id": event.id})
            return

        if await self.users.get_by_id_or_none(event.app_user_id) is None:
            self._logger.error("No user for RevenueCat purchase", extra={"app_user_id": event.app_user_id})
            return
        if await self.lists.get_by_id_or_none(list_id) is None:
            self._logger.error("No list for RevenueCat purchase", extra={"list_id": list_id})
            return

        purchase_key = f"{TRANSACTION_PREFIX}{event.transaction_id or event.id}"
        if await self.purchases.get_by_payment_intent(purchase_key) is not None:
            self._log_debug("Purchase already recorded", purchase_key=purchase_key)
            return

        if event.price_in_purchased_currency:
            price = event.price_in_purchased_currency
            currency = (event.currency or get_app_config().payments.default_currency).lower()
        else:
            # price alone is always USD
            price, currency = event.price, "usd"
        amount = amount_in_minor_units(price, currency)
        if amount <= 0:
            self._logger.error("RevenueCat purchase without a price", extra={"event_id": event.id})
            return

        takehome = event.takehome_percentage
        if takehome is None:
            takehome = get_app_config().payments.store_takehome_percentage
        creator_earnings = round(calculate_pricing(amount).creator_earnings * takehome)

        await self._execute_db_operation(
            "record_store_purchase",
            self.purchases.create(
                user_id=event.app_user_id,
                list_id=list_id,
                amount_paid=amount,
                currency=currency,
                platform_fee=amount - creator_earnings,
                creator_earnings=creator_earnings,
                stripe_payment_intent_id=purchase_key,
                stripe_charge_id=event.original_transaction_id,
                stripe_receipt_url=None,
            ),
        )
        self._log_operation(
            "Store purchase recorded",
            list_id=list_id,
            buyer_id=event.app_user_id,
            amount=amount,
            creator_earnings=creator_earnings,
        )
