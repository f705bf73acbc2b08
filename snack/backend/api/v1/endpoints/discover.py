"""
Discover API Endpoints.

Public browsing: the explore grid, the discover feed, and platform totals.
Private lists never appear here.
"""

from fastapi import APIRouter, Depends, Query

from snack.backend.core.dependencies import DbSession, RequestId
from snack.backend.core.pagination import (
    PaginationParams,
    create_paginated_response,
    get_pagination_params,
)
from snack.backend.schemas.base import ApiResponse, PaginatedResponse, ResponseMetadata
from snack.backend.schemas.list import (
    DiscoverListItem,
    ExploreListItem,
    ExploreSort,
    PlatformStatsResponse,
    SortOrder,
)
from snack.backend.services.discover import DiscoverService

router = APIRouter()


@router.get(
    "/explore",
    response_model=PaginatedResponse[ExploreListItem],
    summary="Explore public lists",
    description="Public lists with owner and link count. Search matches title or description.",
)
async def explore(
    db: DbSession,
    request_id: RequestId,
    pagination: PaginationParams = Depends(get_pagination_params),
    sort: ExploreSort = Query(default="updated_at"),
    order: SortOrder = Query(default="desc"),
    search: str | None = Query(default=None, max_length=200),
) -> dict:
    rows, total = await DiscoverService(db).get_explore_lists(
        limit=pagination.limit,
        offset=pagination.offset,
        sort=sort,
        order=order,
        search=search,
    )
    return create_paginated_response(
        items=[ExploreListItem.from_row(lst, count) for lst, count in rows],
        total=total,
        pagination=pagination,
        request_id=request_id,
    )


@router.get(
    "/discover",
    response_model=ApiResponse[list[DiscoverListItem]],
    summary="Latest public lists",
)
async def discover(db: DbSession, request_id: RequestId) -> ApiResponse[list[DiscoverListItem]]:
    lists = await DiscoverService(db).get_discover_lists()
    return ApiResponse(
        data=[DiscoverListItem.model_validate(lst) for lst in lists],
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.get(
    "/stats",
    response_model=ApiResponse[PlatformStatsResponse],
    summary="Platform totals",
)
async def platform_stats(db: DbSession, request_id: RequestId) -> ApiResponse[PlatformStatsResponse]:
    stats = await DiscoverService(db).get_platform_stats()
    return ApiResponse(
        data=PlatformStatsResponse(**stats),
        metadata=ResponseMetadata(request_id=request_id),
    )
