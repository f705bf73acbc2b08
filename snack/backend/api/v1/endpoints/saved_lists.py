"""
Saved Lists API Endpoints.
"""

from fastapi import APIRouter

from snack.backend.core.dependencies import CurrentUser, DbSession, RequestId
from snack.backend.schemas.base import ApiResponse, ResponseMetadata
from snack.backend.schemas.saved import SavedListItem
from snack.backend.services.saved_list import SavedListService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[list[SavedListItem]],
    summary="List my saved lists",
    description="Saved lists with details and owner, most recent saves first.",
)
async def list_saved_lists(
    user: CurrentUser,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[list[SavedListItem]]:
    saved = await SavedListService(db).list_saved(user.id)
    return ApiResponse(
        data=[SavedListItem.model_validate(item) for item in saved],
        metadata=ResponseMetadata(request_id=request_id),
    )
