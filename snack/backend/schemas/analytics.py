"""
Analytics and Link Preview Schemas.
"""

from pydantic import BaseModel


class ClickRequest(BaseModel):
    link_id: str | None = None
    list_id: str | None = None


class ClickResponse(BaseModel):
    recorded: bool


class ListStats(BaseModel):
    id: str
    public_id: str
    title: str
    emoji: str
    view_count: int
    click_count: int
    save_count: int


class CreatorStatsResponse(BaseModel):
    total_views: int
    total_clicks: int
    total_saves: int
    top_lists: list[ListStats]


class LinkPreviewResponse(BaseModel):
    url: str
    title: str | None
    description: str | None
    image: str | None
    site_name: str | None
    favicon: str | None
