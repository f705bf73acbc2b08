"""
Purchase Schemas.

Checkout, purchase status, earnings, Stripe Connect, and RevenueCat payloads.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from snack.backend.schemas.list import ListResponse
from snack.backend.schemas.user import OwnerSummary


class CheckoutRequest(BaseModel):
    success_url: str | None = Field(default=None, max_length=2048)
    cancel_url: str | None = Field(default=None, max_length=2048)


class CheckoutResponse(BaseModel):
    session_id: str
    url: str | None


class PurchaseStatusResponse(BaseModel):
    is_purchased: bool
    is_owner: bool
    is_free: bool
    has_access: bool
    purchase_date: datetime | None = None
    amount_paid: int | None = None
    currency: str | None = None


class PurchasedList(ListResponse):
    owner: OwnerSummary


class PurchaseResponse(BaseModel):
    id: str
    list_id: str
    amount_paid: int
    currency: str
    purchased_at: datetime
    stripe_receipt_url: str | None
    list: PurchasedList

    model_config = ConfigDict(from_attributes=True)


class ListEarnings(BaseModel):
    list_id: str
    title: str
    emoji: str
    currency: str
    total_purchases: int
    total_earnings: int
    total_platform_fees: int


class EarningsResponse(BaseModel):
    total_earnings: int
    total_purchases: int
    total_platform_fees: int
    available_for_payout: bool
    min_payout_cents: int
    lists: list[ListEarnings]


class ConnectOnboardRequest(BaseModel):
    return_url: str | None = Field(default=None, max_length=2048)
    refresh_url: str | None = Field(default=None, max_length=2048)


class ConnectOnboardResponse(BaseModel):
    url: str
    account_id: str


class ConnectStatusResponse(BaseModel):
    connected: bool
    status: str
    charges_enabled: bool = False
    payouts_enabled: bool = False
    details_submitted: bool = False


class WebhookAck(BaseModel):
    received: bool = True
    skipped: str | None = None


class SubscriberAttribute(BaseModel):
    value: str

    model_config = ConfigDict(extra="ignore")


class RevenueCatEvent(BaseModel):
    """
    The fields of a RevenueCat webhook event Snack uses.

    Prices are in major units of the purchase currency. The list being
    bought travels in the list_id subscriber attribute set by the app.
    """

    type: str
    id: str
    app_user_id: str
    product_id: str | None = None
    environment: str = "PRODUCTION"
    store: str | None = None
    currency: str | None = None
    price: float | None = None
    price_in_purchased_currency: float | None = None
    takehome_percentage: float | None = None
    transaction_id: str | None = None
    original_transaction_id: str | None = None
    subscriber_attributes: dict[str, SubscriberAttribute] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")

    @property
    def list_id(self) -> str | None:
        attribute = self.subscriber_attributes.get("list_id")
        return attribute.value if attribute else None


class RevenueCatWebhook(BaseModel):
    api_version: str | None = None
    event: RevenueCatEvent

    model_config = ConfigDict(extra="ignore")
