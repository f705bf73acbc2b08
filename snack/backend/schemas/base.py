"""
Response Envelope.

Every endpoint answers with {success, data, error, metadata}; paginated
endpoints add a pagination block.
"""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from snack.backend.core.utils import utc_now

DataT = TypeVar("DataT")


class ResponseMetadata(BaseModel):
    timestamp: datetime = Field(default_factory=utc_now)
    request_id: str | None = None


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class _Envelope(BaseModel):
    success: bool
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)


class ApiResponse(_Envelope, Generic[DataT]):
    success: bool = True
    data: DataT | None = None
    error: ErrorDetail | None = None

    model_config = ConfigDict(from_attributes=True)


class ErrorResponse(_Envelope):
    success: bool = False
    data: None = None
    error: ErrorDetail


class PaginationInfo(BaseModel):
    total: int | None = None
    limit: int
    offset: int = 0
    has_more: bool = False


class PaginatedResponse(_Envelope, Generic[DataT]):
    success: bool = True
    data: list[DataT]
    error: None = None
    pagination: PaginationInfo
