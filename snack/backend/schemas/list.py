"""
List Schemas.

Pydantic schemas for list API request/response validation, including
the public explore and discover views.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from snack.backend.schemas.link import LinkResponse
from snack.backend.schemas.user import OwnerSummary, PublicProfileStats, PublicUserResponse

ViewModeLiteral = Literal["LIST", "GALLERY"]
ExploreSort = Literal["updated_at", "created_at", "save_count", "view_count", "title"]
SortOrder = Literal["asc", "desc"]


class ListCreate(BaseModel):
    """Schema for creating a list."""

    title: str = Field(..., min_length=1, max_length=255, examples=["Best ramen in Tokyo"])
    description: str | None = Field(default=None, max_length=5000)
    emoji: str | None = Field(default=None, max_length=16, examples=["🍜"])
    is_public: bool = True
    price_cents: int | None = Field(default=None, ge=0, description="Null or 0 means free")
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    view_mode: ViewModeLiteral | None = None


class ListUpdate(BaseModel):
    """Schema for updating a list. Only provided fields change."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=5000)
    emoji: str | None = Field(default=None, max_length=16)
    is_public: bool | None = None
    price_cents: int | None = Field(default=None, ge=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    view_mode: ViewModeLiteral | None = None


class ListResponse(BaseModel):
    """Schema for a list in API responses."""

    id: str
    public_id: str
    user_id: str
    title: str
    description: str | None
    emoji: str
    is_public: bool
    price_cents: int | None
    currency: str
    view_mode: str
    save_count: int
    view_count: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ListSummary(ListResponse):
    """List card with its link count."""

    link_count: int = 0

    @classmethod
    def from_row(cls, lst: Any, link_count: int) -> "ListSummary":
        data = ListResponse.model_validate(lst).model_dump()
        return cls(**data, link_count=link_count or 0)


class ExploreListItem(ListSummary):
    """Public list card with its owner."""

    owner: OwnerSummary

    @classmethod
    def from_row(cls, lst: Any, link_count: int) -> "ExploreListItem":
        data = ListResponse.model_validate(lst).model_dump()
        return cls(**data, link_count=link_count or 0, owner=OwnerSummary.model_validate(lst.owner))


class ListDetailResponse(ListResponse):
    """A single list with owner and links ordered by position."""

    owner: OwnerSummary
    links: list[LinkResponse]


class DiscoverListItem(ListResponse):
    owner: OwnerSummary
    links: list[LinkResponse]


class PlatformStatsResponse(BaseModel):
    lists: int = Field(description="Number of public lists")
    links: int = Field(description="Number of links")
    updated_at: datetime


class PublicProfileResponse(BaseModel):
    user: PublicUserResponse
    lists: list[ListSummary]
    stats: PublicProfileStats


class ListAiSummaryResponse(BaseModel):
    """Stored AI summary of a list; all fields are null until one is generated."""

    summary: str | None = Field(default=None, validation_alias="ai_summary")
    themes: list[str] | None = Field(default=None, validation_alias="ai_themes")
    generated_at: datetime | None = Field(default=None, validation_alias="ai_generated_at")

    model_config = ConfigDict(from_attributes=True)
