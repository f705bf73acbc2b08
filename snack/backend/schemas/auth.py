"""
Auth Schemas.

Request and response bodies for signup, signin, and token refresh.
"""

from pydantic import BaseModel, Field

from snack.backend.schemas.user import UserResponse

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class SignupRequest(BaseModel):
    """Schema for creating an account."""

    email: str = Field(
        ...,
        max_length=320,
        pattern=EMAIL_PATTERN,
        examples=["ada@example.com"],
    )
    password: str = Field(..., min_length=8, max_length=128)
    username: str | None = Field(default=None, max_length=30, examples=["ada"])


class SigninRequest(BaseModel):
    email: str = Field(..., max_length=320)
    password: str = Field(..., min_length=1, max_length=128)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class AuthResponse(BaseModel):
    """User plus session tokens, returned by signup and signin."""

    user: UserResponse
    tokens: TokenPair


class AuthCheckResponse(BaseModel):
    authenticated: bool
    user: UserResponse | None = None
