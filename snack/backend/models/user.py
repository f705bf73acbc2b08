"""
User Model.

Account, public profile, and Stripe Connect payout account.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from snack.backend.models.base import Base, TimestampMixin, UUIDMixin


class StripeAccountStatus:
    NOT_CONNECTED = "not_connected"
    PENDING = "pending"
    ACTIVE = "active"


class User(UUIDMixin, TimestampMixin, Base):
    """A Snack account. Usernames are stored normalised (lower-case)."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    username: Mapped[str | None] = mapped_column(String(30), unique=True, nullable=True, index=True)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    profile_picture_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    profile_is_public: Mapped[bool] = mapped_column(default=True, nullable=False)

    stripe_account_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    stripe_account_status: Mapped[str] = mapped_column(
        String(20),
        default=StripeAccountStatus.NOT_CONNECTED,
        nullable=False,
    )
    stripe_connected_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username!r})>"
