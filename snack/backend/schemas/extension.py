"""
Extension Schemas.

Payloads for the browser extension bridge. Token endpoints use
snake_case keys; list payloads use camelCase, matching the extension.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from snack.backend.models.list import DEFAULT_EMOJI


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AuthorizeRequest(BaseModel):
    callback_url: str | None = None


class AuthorizeResponse(BaseModel):
    code: str


class TokenRequest(BaseModel):
    code: str | None = None


class RefreshTokenRequest(BaseModel):
    refresh_token: str | None = None


class ExtensionUserInfo(BaseModel):
    id: str
    email: str
    username: str | None
    profile_picture_url: str | None

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    """Expiry times are epoch milliseconds."""

    access_token: str
    refresh_token: str
    access_token_expires_at: int
    refresh_token_expires_at: int
    user: ExtensionUserInfo


class RefreshTokenResponse(BaseModel):
    access_token: str
    access_token_expires_at: int


class RevokeResponse(BaseModel):
    success: bool = True


class ExtensionList(_CamelModel):
    id: str
    public_id: str
    title: str
    emoji: str
    is_public: bool
    link_count: int
    updated_at: datetime


class ExtensionListCreate(_CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    emoji: str = Field(default=DEFAULT_EMOJI, max_length=16)
    is_public: bool = True


class ExtensionLinkData(_CamelModel):
    url: str = Field(..., min_length=1, max_length=2048)
    title: str | None = None
    description: str | None = None
    image_url: str | None = None
    favicon_url: str | None = None


class ExtensionLinksRequest(_CamelModel):
    links: list[ExtensionLinkData] = Field(..., min_length=1)


class ExtensionLinksResult(_CamelModel):
    added: int
    total: int
