"""
Link Repository.

Data access for links and the bulk position shifts that keep a list's
positions contiguous.
"""

from sqlalchemy import select, update

from snack.backend.models.link import Link
from snack.backend.repositories.base import BaseRepository


class LinkRepository(BaseRepository[Link]):
    model = Link
    not_found_message = "Link not found"

    async def get_for_list(self, list_id: str) -> list[Link]:
        """All links of a list ordered by position."""
        return await self._all(
            select(Link)
            .where(Link.list_id == list_id)
            .order_by(Link.position, Link.created_at)
            .execution_options(populate_existing=True)
        )

    async def get_in_list(self, list_id: str, link_id: str) -> Link | None:
        return await self._one_or_none(
            select(Link).where(Link.id == link_id).where(Link.list_id == list_id)
        )

    async def count_for_list(self, list_id: str) -> int:
        return await self._count(Link.list_id == list_id)

    async def shift_positions(self, list_id: str, from_position: int, delta: int) -> None:
        """Add delta to the position of every link at or after from_position."""
        await self.session.execute(
            update(Link)
            .where(Link.list_id == list_id)
            .where(Link.position >= from_position)
            .values(position=Link.position + delta)
            .execution_options(synchronize_session="fetch")
        )

    async def set_position(self, link_id: str, position: int) -> None:
        await self.session.execute(
            update(Link)
            .where(Link.id == link_id)
            .values(position=position)
            .execution_options(synchronize_session="fetch")
        )
