"""
Extension Auth Endpoints.

The code-for-token bridge used by the browser extension. A signed-in web
user authorizes the extension, which then trades the one-time code for
an opaque access/refresh token pair.
"""

from fastapi import APIRouter, Depends

from snack.backend.core.dependencies import CurrentUser, DbSession, RequestId
from snack.backend.core.rate_limiter import rate_limit
from snack.backend.core.utils import to_epoch_ms
from snack.backend.schemas.base import ApiResponse, ResponseMetadata
from snack.backend.schemas.extension import (
    AuthorizeRequest,
    AuthorizeResponse,
    ExtensionUserInfo,
    RefreshTokenRequest,
    RefreshTokenResponse,
    RevokeResponse,
    TokenRequest,
    TokenResponse,
)
from snack.backend.services.extension import ExtensionService

router = APIRouter()


@router.post(
    "/authorize",
    response_model=ApiResponse[AuthorizeResponse],
    summary="Authorize the extension",
    description="Issues a one-time code for an allowed callback URL.",
)
async def authorize(
    data: AuthorizeRequest,
    user: CurrentUser,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[AuthorizeResponse]:
    code = await ExtensionService(db).create_auth_code(user.id, data.callback_url)
    return ApiResponse(
        data=AuthorizeResponse(code=code),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.post(
    "/token",
    response_model=ApiResponse[TokenResponse],
    summary="Exchange a code for tokens",
    dependencies=[Depends(rate_limit("auth"))],
)
async def exchange_token(
    data: TokenRequest,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[TokenResponse]:
    issued = await ExtensionService(db).exchange_code(data.code)
    token = issued.token
    return ApiResponse(
        data=TokenResponse(
            access_token=token.access_token,
            refresh_token=token.refresh_token,
            access_token_expires_at=to_epoch_ms(token.access_token_expires_at),
            refresh_token_expires_at=to_epoch_ms(token.refresh_token_expires_at),
            user=ExtensionUserInfo.model_validate(issued.user),
        ),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.post(
    "/refresh",
    response_model=ApiResponse[RefreshTokenResponse],
    summary="Refresh the access token",
    dependencies=[Depends(rate_limit("auth"))],
)
async def refresh_token(
    data: RefreshTokenRequest,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[RefreshTokenResponse]:
    token = await ExtensionService(db).refresh_access_token(data.refresh_token)
    return ApiResponse(
        data=RefreshTokenResponse(
            access_token=token.access_token,
            access_token_expires_at=to_epoch_ms(token.access_token_expires_at),
        ),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.post(
    "/revoke",
    response_model=ApiResponse[RevokeResponse],
    summary="Revoke a token pair",
    dependencies=[Depends(rate_limit("auth"))],
)
async def revoke_token(
    data: RefreshTokenRequest,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[RevokeResponse]:
    await ExtensionService(db).revoke(data.refresh_token)
    return ApiResponse(
        data=RevokeResponse(success=True),
        metadata=ResponseMetadata(request_id=request_id),
    )
