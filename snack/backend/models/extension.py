"""
Extension Auth Models.

One-time authorization codes and the opaque access/refresh token pairs
issued to the browser extension.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from snack.backend.models.base import Base, CreatedAtMixin, UUIDMixin


class ExtensionAuthCode(UUIDMixin, CreatedAtMixin, Base):
    """Single-use code exchanged by the extension for a token pair."""

    __tablename__ = "extension_auth_codes"

    code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    callback_url: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    used_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


class ExtensionToken(UUIDMixin, CreatedAtMixin, Base):
    """Access/refresh token pair. Revocation sets revoked_at."""

    __tablename__ = "extension_tokens"

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    access_token: Mapped[str] = mapped_column(String(128), unique=True, nullable=False, index=True)
    refresh_token: Mapped[str] = mapped_column(String(128), unique=True, nullable=False, index=True)
    access_token_expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    refresh_token_expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
