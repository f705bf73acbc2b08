"""
Saved List Schemas.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from snack.backend.schemas.list import ListResponse
from snack.backend.schemas.user import OwnerSummary


class SaveRequest(BaseModel):
    notes: str | None = Field(default=None, max_length=2000)


class SavedListResponse(BaseModel):
    id: str
    user_id: str
    list_id: str
    notes: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SaveResult(BaseModel):
    saved: SavedListResponse
    save_count: int


class SaveCountResponse(BaseModel):
    save_count: int


class SaveStatusResponse(BaseModel):
    is_saved: bool


class SavedListWithOwner(ListResponse):
    owner: OwnerSummary


class SavedListItem(BaseModel):
    """A saved list with its details, most recent saves first."""

    id: str
    notes: str | None
    saved_at: datetime = Field(validation_alias="created_at")
    list: SavedListWithOwner

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
