"""
SavedList Model.

Bookmark relationship between a user and someone else's list.
"""

from sqlalchemy import ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from snack.backend.models.base import Base, CreatedAtMixin, UUIDMixin


class SavedList(UUIDMixin, CreatedAtMixin, Base):
    """A save. created_at is the moment the list was saved."""

    __tablename__ = "saved_lists"
    __table_args__ = (UniqueConstraint("user_id", "list_id", name="uq_saved_lists_user_list"),)

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    list_id: Mapped[str] = mapped_column(
        ForeignKey("lists.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    list: Mapped["List"] = relationship(lazy="raise")  # noqa: F821

    def __repr__(self) -> str:
        return f"<SavedList(user_id={self.user_id}, list_id={self.list_id})>"
