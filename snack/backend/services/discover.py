"""
Discover Service.

Read-only public views: explore search, the discover feed, and
platform totals. None of them can return a private list.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from snack.backend.core.utils import utc_now
from snack.backend.models.list import List
from snack.backend.repositories.link import LinkRepository
from snack.backend.repositories.list import EXPLORE_SORT_COLUMNS, ListRepository
from snack.backend.services.base import BaseService

DISCOVER_LIMIT = 50


class DiscoverService(BaseService):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.lists = ListRepository(session)
        self.links = LinkRepository(session)

    async def get_explore_lists(
        self,
        limit: int = 20,
        offset: int = 0,
        sort: str = "updated_at",
        order: str = "desc",
        search: str | None = None,
    ) -> tuple[list[tuple[List, int]], int]:
        """
        Public lists with owner and link count, plus the filtered total.

        Unknown sort keys fall back to updated_at; any order other than
        "asc" sorts descending.
        """
        if sort not in EXPLORE_SORT_COLUMNS:
            sort = "updated_at"
        search = search.strip() if search else None

        self._log_debug("Explore query", sort=sort, order=order, search=search)
        return await self.lists.explore(
            limit=limit,
            offset=offset,
            sort=sort,
            order="asc" if order == "asc" else "desc",
            search=search or None,
        )

    async def get_discover_lists(self) -> list[List]:
        return await self.lists.discover(limit=DISCOVER_LIMIT)

    async def get_platform_stats(self) -> dict:
        return {
            "lists": await self.lists.count_public(),
            "links": await self.links.count(),
            "updated_at": utc_now(),
        }
