"""
Purchase Service.

Checkout for paid lists, access checks, purchase history, and creator
earnings. Refunded purchases never grant access and never count toward
earnings.
"""

import re
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from snack.backend.core.config import get_app_config
from snack.backend.core.exceptions import AuthorizationError, ValidationError
from snack.backend.domain.pricing import calculate_pricing, is_list_free
from snack.backend.integrations.stripe_gateway import CheckoutSession, StripeGateway
from snack.backend.models.list import List
from snack.backend.models.purchase import ListPurchase
from snack.backend.models.user import User
from snack.backend.repositories.purchase import PurchaseRepository
from snack.backend.repositories.user import UserRepository
from snack.backend.services.base import BaseService
from snack.backend.services.list import ListService

STATEMENT_SUFFIX_MAX_LENGTH = 22
_STATEMENT_SUFFIX_DISALLOWED = re.compile(r"[^A-Z0-9 -]")


def statement_descriptor_suffix(username: str | None) -> str | None:
    """Card statement suffix from a username: upper-case, [A-Z0-9 -] only, max 22 chars."""
    if not username:
        return None
    suffix = _STATEMENT_SUFFIX_DISALLOWED.sub("", username[:STATEMENT_SUFFIX_MAX_LENGTH].upper()).strip()
    return suffix or None


@dataclass
class PurchaseStatus:
    is_purchased: bool
    is_owner: bool
    is_free: bool
    purchase: ListPurchase | None = None

    @property
    def has_access(self) -> bool:
        return self.is_owner or self.is_free or self.is_purchased


class PurchaseService(BaseService):
    """Service for paid list checkout and purchase records."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = PurchaseRepository(session)
        self.users = UserRepository(session)
        self.list_service = ListService(session)

    def _checkout_params(
        self,
        lst: List,
        buyer: User,
        creator: User,
        success_url: str | None,
        cancel_url: str | None,
    ) -> dict[str, Any]:
        app_config = get_app_config()
        public_url = app_config.application.public_url.rstrip("/")
        pricing = calculate_pricing(lst.price_cents)
        metadata = {"list_id": lst.id, "buyer_id": buyer.id, "type": "list_purchase"}

        payment_intent_data: dict[str, Any] = {
            "application_fee_amount": pricing.platform_fee,
            "transfer_data": {"destination": creator.stripe_account_id},
            "statement_descriptor": app_config.payments.statement_descriptor,
            "metadata": metadata,
        }
        suffix = statement_descriptor_suffix(creator.username)
        if suffix:
            payment_intent_data["statement_descriptor_suffix"] = suffix

        return {
            "mode": "payment",
            "payment_method_types": ["card"],
            "line_items": [
                {
                    "price_data": {
                        "currency": lst.currency,
                        "product_data": {
                            "name": f"{lst.emoji} {lst.title}",
                            "description": f'One-time access to "{lst.title}"',
                            "metadata": {"list_id": lst.id, "type": "list_purchase"},
                        },
                        "unit_amount": lst.price_cents,
                    },
                    "quantity": 1,
                }
            ],
            "success_url": success_url
            or f"{public_url}/purchase/success?session_id={{CHECKOUT_SESSION_ID}}",
            "cancel_url": cancel_url
            or f"{public_url}/{creator.username}/{lst.public_id}?purchase=cancelled",
            "client_reference_id": buyer.id,
            "metadata": metadata,
            "payment_intent_data": payment_intent_data,
        }

    async def create_checkout(
        self,
        list_id: str,
        buyer: User,
        gateway: StripeGateway,
        success_url: str | None = None,
        cancel_url: str | None = None,
    ) -> CheckoutSession:
        """
        Start a Stripe Checkout for a paid list.

        Raises:
            NotFoundError: If the list does not exist
            AuthorizationError: If the list is not public
            ValidationError: If the list is free, already purchased, the
                buyer's own, or the creator cannot receive payments
            ExternalServiceError: If Stripe rejects the session
        """
        lst = await self.list_service.get_or_404(list_id)

        if not lst.is_public:
            raise AuthorizationError("This list is private")
        if is_list_free(lst.price_cents):
            raise ValidationError("This list is free")
        if await self.repo.get_active(buyer.id, lst.id) is not None:
            raise ValidationError("You already own this list")
        if lst.user_id == buyer.id:
            raise ValidationError("You cannot purchase your own list")

        creator = await self.users.get_by_id(lst.user_id)
        if not creator.stripe_account_id:
            raise ValidationError("The creator has not set up payments yet")

        self._log_operation("Creating checkout", list_id=lst.id, amount=lst.price_cents)
        return await gateway.create_checkout_session(
            **self._checkout_params(lst, buyer, creator, success_url, cancel_url)
        )

    async def get_purchase_status(self, list_id: str, user_id: str | None) -> PurchaseStatus:
        lst = await self.list_service.get_or_404(list_id)
        is_owner = user_id is not None and lst.user_id == user_id
        purchase = None
        if user_id is not None and not is_owner:
            purchase = await self.repo.get_active(user_id, lst.id)
        return PurchaseStatus(
            is_purchased=purchase is not None,
            is_owner=is_owner,
            is_free=is_list_free(lst.price_cents),
            purchase=purchase,
        )

    async def list_purchases(self, user_id: str) -> list[ListPurchase]:
        return await self.repo.list_for_buyer(user_id)

    async def get_earnings(self, creator_id: str) -> dict[str, Any]:
        """Earnings summary with a per-list breakdown."""
        lists = await self.repo.earnings_by_list(creator_id)
        total_earnings = sum(item["total_earnings"] for item in lists)
        min_payout = get_app_config().payments.min_payout_cents
        return {
            "total_earnings": total_earnings,
            "total_purchases": sum(item["total_purchases"] for item in lists),
            "total_platform_fees": sum(item["total_platform_fees"] for item in lists),
            "available_for_payout": total_earnings >= min_payout,
            "min_payout_cents": min_payout,
            "lists": lists,
        }
