"""
Offset Pagination.

List endpoints take ``limit`` and ``offset`` query parameters. An omitted
limit falls back to application.yaml's pagination.default_limit and any
limit is capped at pagination.max_limit.
"""

from dataclasses import dataclass
from typing import Any

from fastapi import Query
from pydantic import BaseModel

from snack.backend.core.config import get_app_config
from snack.backend.schemas.base import PaginatedResponse, PaginationInfo, ResponseMetadata


@dataclass(frozen=True)
class PaginationParams:
    limit: int
    offset: int

    def has_more(self, returned: int, total: int | None) -> bool:
        return total is not None and self.offset + returned < total


def get_pagination_params(
    limit: int | None = Query(default=None, ge=1, description="Maximum number of items to return"),
    offset: int = Query(default=0, ge=0, description="Number of items to skip"),
) -> PaginationParams:
    """
    FastAPI dependency for pagination parameters.

    Usage:
        pagination: PaginationParams = Depends(get_pagination_params)
    """
    settings = get_app_config().application.pagination
    if limit is None:
        limit = settings.default_limit
    return PaginationParams(limit=min(limit, settings.max_limit), offset=offset)


def create_paginated_response(
    items: list[BaseModel],
    total: int | None,
    pagination: PaginationParams,
    request_id: str | None = None,
) -> dict[str, Any]:
    """Build the paginated envelope for already-serialised page items."""
    response = PaginatedResponse(
        data=[item.model_dump(mode="json") for item in items],
        pagination=PaginationInfo(
            total=total,
            limit=pagination.limit,
            offset=pagination.offset,
            has_more=pagination.has_more(len(items), total),
        ),
        metadata=ResponseMetadata(request_id=request_id),
    )
    return response.model_dump(mode="json")
