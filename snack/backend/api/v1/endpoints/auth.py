"""
Auth API Endpoints.

Signup, signin, token refresh, and session check for web and mobile.
"""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends

from snack.backend.core.dependencies import DbSession, OptionalUser, RequestId
from snack.backend.core.rate_limiter import rate_limit
from snack.backend.integrations.email import Mailer, get_mailer
from snack.backend.schemas.auth import (
    AccessTokenResponse,
    AuthCheckResponse,
    AuthResponse,
    RefreshRequest,
    SigninRequest,
    SignupRequest,
)
from snack.backend.schemas.base import ApiResponse, ResponseMetadata
from snack.backend.schemas.user import UserResponse
from snack.backend.services.auth import AuthService

router = APIRouter()


@router.post(
    "/signup",
    response_model=ApiResponse[AuthResponse],
    status_code=201,
    summary="Create an account",
    dependencies=[Depends(rate_limit("auth"))],
)
async def signup(
    data: SignupRequest,
    db: DbSession,
    request_id: RequestId,
    mailer: Annotated[Mailer, Depends(get_mailer)],
    background_tasks: BackgroundTasks,
) -> ApiResponse[AuthResponse]:
    """Create an account, return session tokens, and send the welcome email once committed."""
    user, tokens = await AuthService(db).signup(data)
    # The email must never announce an account that was rolled back
    await db.commit()
    background_tasks.add_task(mailer.send_welcome_email, user.email, user.username)
    return ApiResponse(
        data=AuthResponse(user=UserResponse.model_validate(user), tokens=tokens),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.post(
    "/signin",
    response_model=ApiResponse[AuthResponse],
    summary="Sign in",
    dependencies=[Depends(rate_limit("auth"))],
)
async def signin(
    data: SigninRequest,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[AuthResponse]:
    user, tokens = await AuthService(db).signin(data.email, data.password)
    return ApiResponse(
        data=AuthResponse(user=UserResponse.model_validate(user), tokens=tokens),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.post(
    "/refresh",
    response_model=ApiResponse[AccessTokenResponse],
    summary="Refresh the access token",
    dependencies=[Depends(rate_limit("auth"))],
)
async def refresh(
    data: RefreshRequest,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[AccessTokenResponse]:
    access_token = await AuthService(db).refresh(data.refresh_token)
    return ApiResponse(
        data=AccessTokenResponse(access_token=access_token),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.get(
    "/check",
    response_model=ApiResponse[AuthCheckResponse],
    summary="Check the session",
    description="Never fails: anonymous callers get authenticated=false.",
)
async def check(user: OptionalUser, request_id: RequestId) -> ApiResponse[AuthCheckResponse]:
    return ApiResponse(
        data=AuthCheckResponse(
            authenticated=user is not None,
            user=UserResponse.model_validate(user) if user else None,
        ),
        metadata=ResponseMetadata(request_id=request_id),
    )
