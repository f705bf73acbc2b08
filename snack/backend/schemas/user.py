"""
User Schemas.

Pydantic schemas for accounts, profiles, and username checks.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserResponse(BaseModel):
    """The signed-in user's own account."""

    id: str = Field(description="User unique identifier")
    email: str
    username: str | None
    first_name: str | None
    last_name: str | None
    bio: str | None
    profile_picture_url: str | None
    profile_is_public: bool
    stripe_account_status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OwnerSummary(BaseModel):
    """List owner as shown on list pages and cards."""

    id: str
    username: str | None
    profile_picture_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdate(BaseModel):
    """Schema for updating the signed-in user's profile."""

    username: str | None = Field(default=None, max_length=30)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    bio: str | None = Field(default=None, max_length=500)
    profile_picture_url: str | None = Field(default=None, max_length=2048)
    profile_is_public: bool | None = None


class UsernameCheckResponse(BaseModel):
    available: bool
    reason: str | None = None


class PublicUserResponse(BaseModel):
    """Profile fields visible to everyone."""

    id: str
    username: str | None
    first_name: str | None
    last_name: str | None
    bio: str | None
    profile_picture_url: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PublicProfileStats(BaseModel):
    total_public_lists: int
    total_saves_received: int
    total_links: int
    total_views: int


class EmailUpdate(BaseModel):
    """New sign-in email, confirmed with the current password."""

    email: str = Field(..., max_length=320, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=1, max_length=128)


class ProfilePictureResponse(BaseModel):
    profile_picture_url: str | None
    user: UserResponse
