"""
RevenueCat Webhook Endpoint.

Mobile in-app purchases of paid lists.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Header

from snack.backend.core.dependencies import DbSession, RequestId
from snack.backend.core.logging import get_logger, log_with_source
from snack.backend.integrations.revenuecat import RevenueCatVerifier, get_revenuecat_verifier
from snack.backend.schemas.base import ApiResponse, ResponseMetadata
from snack.backend.schemas.purchase import RevenueCatWebhook, WebhookAck
from snack.backend.services.revenuecat import RevenueCatWebhookService

logger = get_logger(__name__)

router = APIRouter()


def verify_revenuecat_authorization(
    verifier: Annotated[RevenueCatVerifier, Depends(get_revenuecat_verifier)],
    authorization: str | None = Header(None),
) -> None:
    """Runs before body validation, so unauthenticated calls get 401 rather than 422."""
    verifier.verify(authorization)


@router.post(
    "/webhooks/revenuecat",
    response_model=ApiResponse[WebhookAck],
    summary="RevenueCat webhook receiver",
    description="Requires the Authorization header configured in the RevenueCat dashboard.",
    dependencies=[Depends(verify_revenuecat_authorization)],
)
async def revenuecat_webhook(
    payload: RevenueCatWebhook,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[WebhookAck]:
    service = RevenueCatWebhookService(db)
    skipped = service.should_skip(payload.event)
    if skipped is None:
        await service.handle_event(payload.event)
    log_with_source(
        logger,
        "webhook",
        "info",
        "RevenueCat webhook processed",
        event_type=payload.event.type,
        skipped=skipped,
    )

    return ApiResponse(
        data=WebhookAck(received=True, skipped=skipped),
        metadata=ResponseMetadata(request_id=request_id),
    )
