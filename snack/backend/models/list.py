"""
List Model.

A named, emoji-tagged collection of links owned by a user.
"""

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from snack.backend.models.base import Base, TimestampMixin, UUIDMixin

DEFAULT_EMOJI = "🎯"


class ViewMode:
    LIST = "LIST"
    GALLERY = "GALLERY"


class List(UUIDMixin, TimestampMixin, Base):
    """
    List database model.

    public_id is the short identifier used in shareable URLs.
    save_count and view_count are maintained by the services alongside
    the saved_lists and list_views rows they count. The ai_* columns hold
    the last generated summary and are empty until one is requested.
    """

    __tablename__ = "lists"

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    public_id: Mapped[str] = mapped_column(String(16), unique=True, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    emoji: Mapped[str] = mapped_column(String(16), default=DEFAULT_EMOJI, nullable=False)
    is_public: Mapped[bool] = mapped_column(default=True, nullable=False, index=True)
    price_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    currency: Mapped[str] = mapped_column(String(3), default="usd", nullable=False)
    view_mode: Mapped[str] = mapped_column(String(10), default=ViewMode.LIST, nullable=False)
    save_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    view_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    ai_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    ai_themes: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    ai_generated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    owner: Mapped["User"] = relationship(lazy="raise")  # noqa: F821
    links: Mapped[list["Link"]] = relationship(  # noqa: F821
        back_populates="list",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Link.position",
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<List(id={self.id}, public_id={self.public_id!r}, title={self.title!r})>"
