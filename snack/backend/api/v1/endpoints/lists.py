"""
Lists API Endpoints.

List CRUD plus the per-list link, save, and checkout operations.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from snack.backend.core.dependencies import (
    ClientIp,
    CurrentUser,
    DbSession,
    OptionalUser,
    RequestId,
    require_feature,
)
from snack.backend.core.pagination import (
    PaginationParams,
    create_paginated_response,
    get_pagination_params,
)
from snack.backend.core.rate_limiter import rate_limit
from snack.backend.integrations.ai_summary import ListSummarizer, get_list_summarizer
from snack.backend.integrations.opengraph import LinkPreviewClient, get_link_preview_client
from snack.backend.integrations.stripe_gateway import StripeGateway, get_payment_gateway
from snack.backend.schemas.base import ApiResponse, PaginatedResponse, ResponseMetadata
from snack.backend.schemas.link import LinkCreate, LinkReorder, LinkResponse, LinkUpdate
from snack.backend.schemas.list import (
    ListAiSummaryResponse,
    ListCreate,
    ListDetailResponse,
    ListResponse,
    ListSummary,
    ListUpdate,
)
from snack.backend.schemas.purchase import CheckoutRequest, CheckoutResponse, PurchaseStatusResponse
from snack.backend.schemas.saved import (
    SaveCountResponse,
    SavedListResponse,
    SaveRequest,
    SaveResult,
    SaveStatusResponse,
)
from snack.backend.services.link import LinkService
from snack.backend.services.list import ListService
from snack.backend.services.purchase import PurchaseService
from snack.backend.services.saved_list import SavedListService

router = APIRouter()

PreviewClient = Annotated[LinkPreviewClient, Depends(get_link_preview_client)]
PaymentGateway = Annotated[StripeGateway, Depends(get_payment_gateway)]


@router.post(
    "",
    response_model=ApiResponse[ListResponse],
    status_code=201,
    summary="Create a list",
    dependencies=[Depends(rate_limit("write"))],
)
async def create_list(
    data: ListCreate,
    user: CurrentUser,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[ListResponse]:
    lst = await ListService(db).create_list(user.id, data)
    return ApiResponse(
        data=ListResponse.model_validate(lst),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.get(
    "",
    response_model=PaginatedResponse[ListSummary],
    summary="List my lists",
    description="The caller's lists with link counts, newest first.",
)
async def list_lists(
    user: CurrentUser,
    db: DbSession,
    request_id: RequestId,
    pagination: PaginationParams = Depends(get_pagination_params),
) -> dict:
    rows, total = await ListService(db).list_own(
        user.id,
        limit=pagination.limit,
        offset=pagination.offset,
    )
    return create_paginated_response(
        items=[ListSummary.from_row(lst, count) for lst, count in rows],
        total=total,
        pagination=pagination,
        request_id=request_id,
    )


@router.get(
    "/{list_id}",
    response_model=ApiResponse[ListDetailResponse],
    summary="Get a list",
    description="Accepts a public id or a primary key. Private lists are visible to their owner only.",
)
async def get_list(
    list_id: str,
    user: OptionalUser,
    db: DbSession,
    client_ip: ClientIp,
    request_id: RequestId,
) -> ApiResponse[ListDetailResponse]:
    lst = await ListService(db).view_list(
        list_id,
        viewer_id=user.id if user else None,
        viewer_ip=client_ip,
    )
    return ApiResponse(
        data=ListDetailResponse.model_validate(lst),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.patch(
    "/{list_id}",
    response_model=ApiResponse[ListDetailResponse],
    summary="Update a list",
)
async def update_list(
    list_id: str,
    data: ListUpdate,
    user: CurrentUser,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[ListDetailResponse]:
    lst = await ListService(db).update_list(list_id, user.id, data)
    return ApiResponse(
        data=ListDetailResponse.model_validate(lst),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.delete("/{list_id}", status_code=204, summary="Delete a list")
async def delete_list(list_id: str, user: CurrentUser, db: DbSession) -> None:
    await ListService(db).delete_list(list_id, user.id)


# AI summary


@router.get(
    "/{list_id}/summary",
    response_model=ApiResponse[ListAiSummaryResponse],
    summary="Get a list's AI summary",
    description="Fields are null until a summary has been generated.",
)
async def get_list_summary(
    list_id: str,
    user: OptionalUser,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[ListAiSummaryResponse]:
    lst = await ListService(db).get_summary(list_id, viewer_id=user.id if user else None)
    return ApiResponse(
        data=ListAiSummaryResponse.model_validate(lst),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.post(
    "/{list_id}/summary",
    response_model=ApiResponse[ListAiSummaryResponse],
    summary="Generate a list's AI summary",
    description="Summarizes the list's links and stores the result, replacing any earlier summary.",
    dependencies=[Depends(require_feature("ai_summaries_enabled")), Depends(rate_limit("write"))],
)
async def generate_list_summary(
    list_id: str,
    user: CurrentUser,
    db: DbSession,
    summarizer: Annotated[ListSummarizer, Depends(get_list_summarizer)],
    request_id: RequestId,
) -> ApiResponse[ListAiSummaryResponse]:
    lst = await ListService(db).generate_summary(list_id, user.id, summarizer)
    return ApiResponse(
        data=ListAiSummaryResponse.model_validate(lst),
        metadata=ResponseMetadata(request_id=request_id),
    )


# Links


@router.post(
    "/{list_id}/links",
    response_model=ApiResponse[LinkResponse],
    status_code=201,
    summary="Add a link",
    description="Inserts at the given position, or appends when none is given.",
    dependencies=[Depends(rate_limit("write"))],
)
async def add_link(
    list_id: str,
    data: LinkCreate,
    user: CurrentUser,
    db: DbSession,
    previews: PreviewClient,
    request_id: RequestId,
) -> ApiResponse[LinkResponse]:
    link = await LinkService(db, previews=previews).add_link(list_id, user.id, data)
    return ApiResponse(
        data=LinkResponse.model_validate(link),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.patch(
    "/{list_id}/links",
    response_model=ApiResponse[list[LinkResponse]],
    summary="Reorder links",
    description="link_ids must contain exactly the list's link ids.",
)
async def reorder_links(
    list_id: str,
    data: LinkReorder,
    user: CurrentUser,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[list[LinkResponse]]:
    links = await LinkService(db).reorder_links(list_id, user.id, data.link_ids)
    return ApiResponse(
        data=[LinkResponse.model_validate(link) for link in links],
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.patch(
    "/{list_id}/links/{link_id}",
    response_model=ApiResponse[LinkResponse],
    summary="Update a link",
)
async def update_link(
    list_id: str,
    link_id: str,
    data: LinkUpdate,
    user: CurrentUser,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[LinkResponse]:
    link = await LinkService(db).update_link(list_id, user.id, link_id, data)
    return ApiResponse(
        data=LinkResponse.model_validate(link),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.delete("/{list_id}/links/{link_id}", status_code=204, summary="Delete a link")
async def delete_link(list_id: str, link_id: str, user: CurrentUser, db: DbSession) -> None:
    await LinkService(db).delete_link(list_id, user.id, link_id)


# Saves


@router.post(
    "/{list_id}/save",
    response_model=ApiResponse[SaveResult],
    status_code=201,
    summary="Save a list",
)
async def save_list(
    list_id: str,
    user: CurrentUser,
    db: DbSession,
    request_id: RequestId,
    data: SaveRequest | None = None,
) -> ApiResponse[SaveResult]:
    saved, save_count = await SavedListService(db).save_list(
        list_id,
        user.id,
        notes=data.notes if data else None,
    )
    return ApiResponse(
        data=SaveResult(saved=SavedListResponse.model_validate(saved), save_count=save_count),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.delete(
    "/{list_id}/save",
    response_model=ApiResponse[SaveCountResponse],
    summary="Unsave a list",
)
async def unsave_list(
    list_id: str,
    user: CurrentUser,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[SaveCountResponse]:
    save_count = await SavedListService(db).unsave_list(list_id, user.id)
    return ApiResponse(
        data=SaveCountResponse(save_count=save_count),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.get(
    "/{list_id}/save",
    response_model=ApiResponse[SaveStatusResponse],
    summary="Check whether I saved a list",
)
async def get_save_status(
    list_id: str,
    user: OptionalUser,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[SaveStatusResponse]:
    is_saved = await SavedListService(db).is_saved(list_id, user.id if user else None)
    return ApiResponse(
        data=SaveStatusResponse(is_saved=is_saved),
        metadata=ResponseMetadata(request_id=request_id),
    )


# Purchases


@router.post(
    "/{list_id}/checkout",
    response_model=ApiResponse[CheckoutResponse],
    summary="Start checkout for a paid list",
    dependencies=[
        Depends(require_feature("payments_enabled")),
        Depends(rate_limit("write")),
    ],
)
async def create_checkout(
    list_id: str,
    user: CurrentUser,
    db: DbSession,
    gateway: PaymentGateway,
    request_id: RequestId,
    data: CheckoutRequest | None = None,
) -> ApiResponse[CheckoutResponse]:
    session = await PurchaseService(db).create_checkout(
        list_id,
        user,
        gateway,
        success_url=data.success_url if data else None,
        cancel_url=data.cancel_url if data else None,
    )
    return ApiResponse(
        data=CheckoutResponse(session_id=session.id, url=session.url),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.get(
    "/{list_id}/purchase-status",
    response_model=ApiResponse[PurchaseStatusResponse],
    summary="Check access to a list",
)
async def get_purchase_status(
    list_id: str,
    user: OptionalUser,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[PurchaseStatusResponse]:
    status = await PurchaseService(db).get_purchase_status(list_id, user.id if user else None)
    purchase = status.purchase
    return ApiResponse(
        data=PurchaseStatusResponse(
            is_purchased=status.is_purchased,
            is_owner=status.is_owner,
            is_free=status.is_free,
            has_access=status.has_access,
            purchase_date=purchase.purchased_at if purchase else None,
            amount_paid=purchase.amount_paid if purchase else None,
            currency=purchase.currency if purchase else None,
        ),
        metadata=ResponseMetadata(request_id=request_id),
    )
