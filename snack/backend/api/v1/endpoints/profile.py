"""
Profile API Endpoints.

The signed-in user's profile, email and picture, username availability,
and public profiles.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Query, UploadFile

from snack.backend.core.config import get_app_config
from snack.backend.core.dependencies import CurrentUser, DbSession, OptionalUser, RequestId
from snack.backend.core.rate_limiter import rate_limit
from snack.backend.integrations.avatars import AvatarStore, get_avatar_store
from snack.backend.schemas.base import ApiResponse, ResponseMetadata
from snack.backend.schemas.list import ListSummary, PublicProfileResponse
from snack.backend.schemas.user import (
    EmailUpdate,
    ProfilePictureResponse,
    ProfileUpdate,
    PublicUserResponse,
    UsernameCheckResponse,
    UserResponse,
)
from snack.backend.services.user import UserService

router = APIRouter()


@router.get("/profile", response_model=ApiResponse[UserResponse], summary="Get my profile")
async def get_profile(user: CurrentUser, request_id: RequestId) -> ApiResponse[UserResponse]:
    return ApiResponse(
        data=UserResponse.model_validate(user),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.patch(
    "/profile",
    response_model=ApiResponse[UserResponse],
    summary="Update my profile",
    description="Update profile fields. Only provided fields are updated.",
)
async def update_profile(
    data: ProfileUpdate,
    user: CurrentUser,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[UserResponse]:
    updated = await UserService(db).update_profile(user, data)
    return ApiResponse(
        data=UserResponse.model_validate(updated),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.patch(
    "/profile/email",
    response_model=ApiResponse[UserResponse],
    summary="Change my email",
    description="The current password is required. Takes effect immediately.",
    dependencies=[Depends(rate_limit("auth"))],
)
async def update_email(
    data: EmailUpdate,
    user: CurrentUser,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[UserResponse]:
    updated = await UserService(db).update_email(user, data)
    return ApiResponse(
        data=UserResponse.model_validate(updated),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.post(
    "/profile/picture",
    response_model=ApiResponse[ProfilePictureResponse],
    summary="Upload my profile picture",
    description="JPG, PNG, GIF, or WebP, at most 2 MB, sent as multipart field `file`.",
    dependencies=[Depends(rate_limit("upload"))],
)
async def upload_profile_picture(
    user: CurrentUser,
    db: DbSession,
    store: Annotated[AvatarStore, Depends(get_avatar_store)],
    request_id: RequestId,
    file: UploadFile = File(...),
) -> ApiResponse[ProfilePictureResponse]:
    # One byte over the limit is enough to reject without reading the rest
    data = await file.read(get_app_config().integrations.avatars.max_bytes + 1)
    updated = await UserService(db).set_profile_picture(user, data, file.content_type, store)
    return ApiResponse(
        data=ProfilePictureResponse(
            profile_picture_url=updated.profile_picture_url,
            user=UserResponse.model_validate(updated),
        ),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.delete(
    "/profile/picture",
    response_model=ApiResponse[UserResponse],
    summary="Remove my profile picture",
)
async def delete_profile_picture(
    user: CurrentUser,
    db: DbSession,
    store: Annotated[AvatarStore, Depends(get_avatar_store)],
    request_id: RequestId,
) -> ApiResponse[UserResponse]:
    updated = await UserService(db).remove_profile_picture(user, store)
    return ApiResponse(
        data=UserResponse.model_validate(updated),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.delete(
    "/profile",
    status_code=204,
    summary="Delete my account",
    description="Permanently delete the account with its lists, links, and saves.",
)
async def delete_profile(user: CurrentUser, db: DbSession) -> None:
    await UserService(db).delete_account(user)


@router.get(
    "/username/check",
    response_model=ApiResponse[UsernameCheckResponse],
    summary="Check username availability",
)
async def check_username(
    db: DbSession,
    user: OptionalUser,
    request_id: RequestId,
    username: str = Query(..., max_length=100),
) -> ApiResponse[UsernameCheckResponse]:
    available, reason = await UserService(db).check_username(
        username,
        current_user_id=user.id if user else None,
    )
    return ApiResponse(
        data=UsernameCheckResponse(available=available, reason=reason),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.get(
    "/public-profile/{username}",
    response_model=ApiResponse[PublicProfileResponse],
    summary="Get a public profile",
)
async def get_public_profile(
    username: str,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[PublicProfileResponse]:
    profile = await UserService(db).get_public_profile(username)
    return ApiResponse(
        data=PublicProfileResponse(
            user=PublicUserResponse.model_validate(profile.user),
            lists=[ListSummary.from_row(lst, count) for lst, count in profile.lists],
            stats=profile.stats,
        ),
        metadata=ResponseMetadata(request_id=request_id),
    )
