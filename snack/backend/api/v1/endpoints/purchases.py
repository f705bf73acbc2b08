"""
Purchases API Endpoints.

Buyer purchase history and creator earnings.
"""

from fastapi import APIRouter

from snack.backend.core.dependencies import CurrentUser, DbSession, RequestId
from snack.backend.schemas.base import ApiResponse, ResponseMetadata
from snack.backend.schemas.purchase import EarningsResponse, PurchaseResponse
from snack.backend.services.purchase import PurchaseService

router = APIRouter()


@router.get(
    "/purchases",
    response_model=ApiResponse[list[PurchaseResponse]],
    summary="List my purchases",
    description="Non-refunded purchases with list details, newest first.",
)
async def list_purchases(
    user: CurrentUser,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[list[PurchaseResponse]]:
    purchases = await PurchaseService(db).list_purchases(user.id)
    return ApiResponse(
        data=[PurchaseResponse.model_validate(purchase) for purchase in purchases],
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.get(
    "/earnings",
    response_model=ApiResponse[EarningsResponse],
    summary="Get my earnings",
    description="Creator earnings with a per-list breakdown. Refunds are excluded.",
)
async def get_earnings(
    user: CurrentUser,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[EarningsResponse]:
    earnings = await PurchaseService(db).get_earnings(user.id)
    return ApiResponse(
        data=EarningsResponse(**earnings),
        metadata=ResponseMetadata(request_id=request_id),
    )
