"""
Link Model.

A URL entry in a list with its preview metadata and ordering position.
"""

from sqlalchemy import ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from snack.backend.models.base import Base, TimestampMixin, UUIDMixin


class Link(UUIDMixin, TimestampMixin, Base):
    """
    Link database model.

    Positions within a list are kept unique and contiguous (0..n-1) by
    LinkService; shifts happen in bulk, so there is no unique index.
    """

    __tablename__ = "links"
    __table_args__ = (Index("ix_links_list_id_position", "list_id", "position"),)

    list_id: Mapped[str] = mapped_column(
        ForeignKey("lists.id", ondelete="CASCADE"),
        nullable=False,
    )
    url: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    favicon_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    list: Mapped["List"] = relationship(back_populates="links", lazy="raise")  # noqa: F821

    def __repr__(self) -> str:
        return f"<Link(id={self.id}, list_id={self.list_id}, position={self.position})>"
