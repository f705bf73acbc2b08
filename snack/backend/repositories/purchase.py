"""
Purchase Repository.

Data access for list purchases and creator earnings aggregates.
"""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from snack.backend.models.list import List
from snack.backend.models.purchase import ListPurchase
from snack.backend.repositories.base import BaseRepository


class PurchaseRepository(BaseRepository[ListPurchase]):
    """
    Repository for ListPurchase model.

    "Active" purchases are those without refunded_at.
    """

    model = ListPurchase

    async def get_active(self, user_id: str, list_id: str) -> ListPurchase | None:
        return await self._one_or_none(
            select(ListPurchase)
            .where(ListPurchase.user_id == user_id)
            .where(ListPurchase.list_id == list_id)
            .where(ListPurchase.refunded_at.is_(None))
            .order_by(ListPurchase.purchased_at.desc())
            .limit(1)
        )

    async def get_by_payment_intent(self, payment_intent_id: str) -> ListPurchase | None:
        return await self._one_or_none(
            select(ListPurchase).where(ListPurchase.stripe_payment_intent_id == payment_intent_id)
        )

    async def get_by_charge(self, charge_id: str) -> ListPurchase | None:
        return await self._one_or_none(
            select(ListPurchase).where(ListPurchase.stripe_charge_id == charge_id)
        )

    async def list_for_buyer(self, user_id: str) -> list[ListPurchase]:
        return await self._all(
            select(ListPurchase)
            .where(ListPurchase.user_id == user_id)
            .where(ListPurchase.refunded_at.is_(None))
            .options(selectinload(ListPurchase.list).selectinload(List.owner))
            .order_by(ListPurchase.purchased_at.desc())
        )

    async def earnings_by_list(self, creator_id: str) -> list[dict[str, Any]]:
        """Per-list sales totals for a creator's lists, highest earning first."""
        total_earnings = func.sum(ListPurchase.creator_earnings).label("total_earnings")
        result = await self.session.execute(
            select(
                List.id,
                List.title,
                List.emoji,
                List.currency,
                func.count(ListPurchase.id).label("total_purchases"),
                total_earnings,
                func.sum(ListPurchase.platform_fee).label("total_platform_fees"),
            )
            .join(ListPurchase, ListPurchase.list_id == List.id)
            .where(List.user_id == creator_id)
            .where(ListPurchase.refunded_at.is_(None))
            .group_by(List.id, List.title, List.emoji, List.currency)
            .order_by(total_earnings.desc())
        )
        return [
            {
                "list_id": row.id,
                "title": row.title,
                "emoji": row.emoji,
                "currency": row.currency,
                "total_purchases": row.total_purchases,
                "total_earnings": int(row.total_earnings or 0),
                "total_platform_fees": int(row.total_platform_fees or 0),
            }
            for row in result.all()
        ]
