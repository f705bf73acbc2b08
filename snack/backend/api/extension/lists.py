"""
Extension List Endpoints.

Bearer-authenticated list access for the browser extension. Payloads
use camelCase keys.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from snack.backend.core.dependencies import DbSession, ExtensionUser, RequestId
from snack.backend.integrations.opengraph import LinkPreviewClient, get_link_preview_client
from snack.backend.schemas.base import ApiResponse, ResponseMetadata
from snack.backend.schemas.extension import (
    ExtensionList,
    ExtensionListCreate,
    ExtensionLinksRequest,
    ExtensionLinksResult,
)
from snack.backend.services.extension import ExtensionService

router = APIRouter()


def _to_extension_list(lst, link_count: int) -> ExtensionList:
    return ExtensionList(
        id=lst.id,
        public_id=lst.public_id,
        title=lst.title,
        emoji=lst.emoji,
        is_public=lst.is_public,
        link_count=link_count or 0,
        updated_at=lst.updated_at,
    )


@router.get(
    "",
    response_model=ApiResponse[list[ExtensionList]],
    response_model_by_alias=True,
    summary="List my lists",
)
async def list_lists(
    user: ExtensionUser,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[list[ExtensionList]]:
    rows = await ExtensionService(db).list_lists(user.id)
    return ApiResponse(
        data=[_to_extension_list(lst, count) for lst, count in rows],
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.post(
    "",
    response_model=ApiResponse[ExtensionList],
    status_code=201,
    summary="Create a list",
)
async def create_list(
    data: ExtensionListCreate,
    user: ExtensionUser,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[ExtensionList]:
    lst = await ExtensionService(db).create_list(user.id, data)
    return ApiResponse(
        data=_to_extension_list(lst, 0),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.post(
    "/{list_id}/links",
    response_model=ApiResponse[ExtensionLinksResult],
    summary="Add links to a list",
    description="Links are added at the top of the list in the order given.",
)
async def add_links(
    list_id: str,
    data: ExtensionLinksRequest,
    user: ExtensionUser,
    db: DbSession,
    previews: Annotated[LinkPreviewClient, Depends(get_link_preview_client)],
    request_id: RequestId,
) -> ApiResponse[ExtensionLinksResult]:
    added, total = await ExtensionService(db).add_links(list_id, user.id, data.links, previews=previews)
    return ApiResponse(
        data=ExtensionLinksResult(added=added, total=total),
        metadata=ResponseMetadata(request_id=request_id),
    )
