"""
Analytics API Endpoints.

Click tracking for public list pages and creator statistics.
"""

from fastapi import APIRouter, Request

from snack.backend.core.config import get_app_config
from snack.backend.core.dependencies import ClientIp, CurrentUser, DbSession, OptionalUser, RequestId
from snack.backend.core.exceptions import ValidationError
from snack.backend.schemas.analytics import ClickRequest, ClickResponse, CreatorStatsResponse
from snack.backend.schemas.base import ApiResponse, ResponseMetadata
from snack.backend.services.analytics import AnalyticsService

router = APIRouter()


@router.post(
    "/click",
    response_model=ApiResponse[ClickResponse],
    summary="Record a link click",
    description="Succeeds even when the click cannot be recorded.",
)
async def track_click(
    data: ClickRequest,
    request: Request,
    user: OptionalUser,
    db: DbSession,
    client_ip: ClientIp,
    request_id: RequestId,
) -> ApiResponse[ClickResponse]:
    if not data.link_id or not data.list_id:
        raise ValidationError("link_id and list_id are required")

    if not get_app_config().features.analytics_enabled:
        return ApiResponse(
            data=ClickResponse(recorded=False),
            metadata=ResponseMetadata(request_id=request_id),
        )

    recorded = await AnalyticsService(db).track_click(
        link_id=data.link_id,
        list_id=data.list_id,
        clicker_id=user.id if user else None,
        clicker_ip=client_ip,
        user_agent=request.headers.get("user-agent"),
        referrer=request.headers.get("referer"),
    )
    return ApiResponse(
        data=ClickResponse(recorded=recorded),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.get(
    "/stats",
    response_model=ApiResponse[CreatorStatsResponse],
    summary="Get my list statistics",
)
async def get_stats(
    user: CurrentUser,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[CreatorStatsResponse]:
    stats = await AnalyticsService(db).get_creator_stats(user.id)
    return ApiResponse(
        data=CreatorStatsResponse(**stats),
        metadata=ResponseMetadata(request_id=request_id),
    )
