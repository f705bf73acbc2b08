"""
Link Preview API Endpoint.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from snack.backend.core.dependencies import CurrentUser, RequestId
from snack.backend.core.exceptions import ValidationError
from snack.backend.core.rate_limiter import rate_limit
from snack.backend.domain.urls import validate_and_normalize_url
from snack.backend.integrations.opengraph import LinkPreviewClient, get_link_preview_client
from snack.backend.schemas.analytics import LinkPreviewResponse
from snack.backend.schemas.base import ApiResponse, ResponseMetadata

router = APIRouter()


@router.get(
    "/og-data",
    response_model=ApiResponse[LinkPreviewResponse],
    summary="Fetch a link preview",
    description="Open Graph title, description, image, and favicon for a URL. Requires a session.",
    dependencies=[Depends(rate_limit("read"))],
)
async def get_og_data(
    user: CurrentUser,
    previews: Annotated[LinkPreviewClient, Depends(get_link_preview_client)],
    request_id: RequestId,
    url: str = Query(..., max_length=2048),
) -> ApiResponse[LinkPreviewResponse]:
    normalized, reason = validate_and_normalize_url(url)
    if reason:
        raise ValidationError(reason, details={"url": url})

    preview = await previews.fetch(normalized)
    return ApiResponse(
        data=LinkPreviewResponse(**preview.to_dict()),
        metadata=ResponseMetadata(request_id=request_id),
    )
