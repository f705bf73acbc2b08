"""
Stripe API Endpoints.

The signed webhook receiver and Stripe Connect onboarding for creators.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request

from snack.backend.core.dependencies import CurrentUser, DbSession, RequestId, require_feature
from snack.backend.core.exceptions import ValidationError
from snack.backend.core.logging import get_logger, log_with_source
from snack.backend.integrations.stripe_gateway import StripeGateway, get_payment_gateway
from snack.backend.schemas.base import ApiResponse, ResponseMetadata
from snack.backend.schemas.purchase import (
    ConnectOnboardRequest,
    ConnectOnboardResponse,
    ConnectStatusResponse,
    WebhookAck,
)
from snack.backend.services.stripe_connect import StripeConnectService
from snack.backend.services.webhook import StripeWebhookService

logger = get_logger(__name__)

router = APIRouter()

PaymentGateway = Annotated[StripeGateway, Depends(get_payment_gateway)]


@router.post(
    "/webhooks/stripe",
    response_model=ApiResponse[WebhookAck],
    summary="Stripe webhook receiver",
    description="Verifies the stripe-signature header against the raw body before handling the event.",
)
async def stripe_webhook(
    request: Request,
    db: DbSession,
    gateway: PaymentGateway,
    request_id: RequestId,
    stripe_signature: str | None = Header(None),
) -> ApiResponse[WebhookAck]:
    if not stripe_signature:
        raise ValidationError("Missing stripe-signature header")

    payload = await request.body()
    event = gateway.construct_event(payload, stripe_signature)
    await StripeWebhookService(db).handle_event(event)
    log_with_source(logger, "webhook", "info", "Stripe webhook processed", event_type=event["type"])

    return ApiResponse(
        data=WebhookAck(received=True),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.post(
    "/stripe/connect/onboard",
    response_model=ApiResponse[ConnectOnboardResponse],
    summary="Start Stripe Connect onboarding",
    dependencies=[Depends(require_feature("payments_enabled"))],
)
async def connect_onboard(
    user: CurrentUser,
    db: DbSession,
    gateway: PaymentGateway,
    request_id: RequestId,
    data: ConnectOnboardRequest | None = None,
) -> ApiResponse[ConnectOnboardResponse]:
    url, account_id = await StripeConnectService(db).start_onboarding(
        user,
        gateway,
        return_url=data.return_url if data else None,
        refresh_url=data.refresh_url if data else None,
    )
    return ApiResponse(
        data=ConnectOnboardResponse(url=url, account_id=account_id),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.get(
    "/stripe/connect/status",
    response_model=ApiResponse[ConnectStatusResponse],
    summary="Get Stripe Connect status",
)
async def connect_status(
    user: CurrentUser,
    db: DbSession,
    gateway: PaymentGateway,
    request_id: RequestId,
) -> ApiResponse[ConnectStatusResponse]:
    status = await StripeConnectService(db).get_status(user, gateway)
    return ApiResponse(
        data=ConnectStatusResponse(**status),
        metadata=ResponseMetadata(request_id=request_id),
    )
