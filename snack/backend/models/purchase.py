"""
ListPurchase Model.

Record of a buyer paying for access to a priced list.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from snack.backend.core.utils import utc_now
from snack.backend.models.base import Base, TimestampMixin, UUIDMixin


class ListPurchase(UUIDMixin, TimestampMixin, Base):
    """
    Purchase database model.

    Amounts are in the smallest currency unit. A purchase with
    refunded_at set no longer grants access.
    """

    __tablename__ = "list_purchases"

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    list_id: Mapped[str] = mapped_column(
        ForeignKey("lists.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount_paid: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    platform_fee: Mapped[int] = mapped_column(Integer, nullable=False)
    creator_earnings: Mapped[int] = mapped_column(Integer, nullable=False)
    stripe_payment_intent_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    stripe_charge_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    stripe_receipt_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    purchased_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)
    refunded_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    refund_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    list: Mapped["List"] = relationship(lazy="raise")  # noqa: F821

    def __repr__(self) -> str:
        return f"<ListPurchase(id={self.id}, list_id={self.list_id}, user_id={self.user_id})>"
