"""
Analytics Models.

Raw click and view events for creator statistics.
"""

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from snack.backend.models.base import Base, CreatedAtMixin, UUIDMixin


class LinkClick(UUIDMixin, CreatedAtMixin, Base):
    __tablename__ = "link_clicks"

    link_id: Mapped[str] = mapped_column(
        ForeignKey("links.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    list_id: Mapped[str] = mapped_column(
        ForeignKey("lists.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    clicker_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    clicker_ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
    clicker_user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    referrer: Mapped[str | None] = mapped_column(Text, nullable=True)


class ListView(UUIDMixin, CreatedAtMixin, Base):
    __tablename__ = "list_views"

    list_id: Mapped[str] = mapped_column(
        ForeignKey("lists.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    viewer_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    viewer_ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
