"""
Link Schemas.

Pydantic schemas for link API request/response validation.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class LinkCreate(BaseModel):
    """Schema for adding a link to a list."""

    url: str = Field(..., min_length=1, max_length=2048, examples=["example.com/article"])
    title: str | None = Field(default=None, max_length=500)
    description: str | None = Field(default=None, max_length=5000)
    image_url: str | None = Field(default=None, max_length=2048)
    favicon_url: str | None = Field(default=None, max_length=2048)
    position: int | None = Field(
        default=None,
        ge=0,
        description="Insert position; omitted appends to the end",
    )


class LinkUpdate(BaseModel):
    """Schema for updating a link. Only provided fields change."""

    url: str | None = Field(default=None, min_length=1, max_length=2048)
    title: str | None = Field(default=None, max_length=500)
    description: str | None = Field(default=None, max_length=5000)
    image_url: str | None = Field(default=None, max_length=2048)
    favicon_url: str | None = Field(default=None, max_length=2048)


class LinkReorder(BaseModel):
    """New order for all links of a list."""

    link_ids: list[str] = Field(..., description="Every link id of the list, in the new order")


class LinkResponse(BaseModel):
    """Schema for a link in API responses."""

    id: str
    list_id: str
    url: str
    title: str | None
    description: str | None
    image_url: str | None
    favicon_url: str | None
    position: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
