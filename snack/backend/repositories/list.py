"""
List Repository.

Data access for lists, including the public explore/discover queries
and the counter maintenance statements.
"""

from typing import Any

from sqlalchemy import Select, func, or_, select, update
from sqlalchemy.orm import selectinload

from snack.backend.core.utils import utc_now
from snack.backend.models.analytics import ListView
from snack.backend.models.link import Link
from snack.backend.models.list import List
from snack.backend.models.saved_list import SavedList
from snack.backend.repositories.base import BaseRepository

EXPLORE_SORT_COLUMNS = {
    "updated_at": List.updated_at,
    "created_at": List.created_at,
    "save_count": List.save_count,
    "view_count": List.view_count,
    "title": List.title,
}


def link_count_column() -> Any:
    """Correlated subquery counting a list's links."""
    return (
        select(func.count(Link.id))
        .where(Link.list_id == List.id)
        .correlate(List)
        .scalar_subquery()
        .label("link_count")
    )


class ListRepository(BaseRepository[List]):
    """
    Repository for List model.

    Methods returning (List, link_count) rows use a correlated count so
    that links are never loaded just to be counted.
    """

    model = List
    not_found_message = "List not found"

    async def get_by_public_id(self, public_id: str) -> List | None:
        return await self._one_or_none(
            select(List).where(List.public_id == public_id)
        )

    async def get_with_details(self, *, list_id: str | None = None, public_id: str | None = None) -> List | None:
        """Load a list with its owner and ordered links."""
        await self.session.flush()
        query = select(List).options(selectinload(List.owner), selectinload(List.links))
        if public_id is not None:
            query = query.where(List.public_id == public_id)
        else:
            query = query.where(List.id == list_id)
        return await self._one_or_none(query.execution_options(populate_existing=True))

    async def public_id_exists(self, public_id: str) -> bool:
        return await self._exists(select(List.id).where(List.public_id == public_id))

    async def list_by_owner(
        self,
        user_id: str,
        limit: int = 20,
        offset: int = 0,
        order_by: str = "created_at",
    ) -> list[tuple[List, int]]:
        """Get a user's lists with link counts, newest first."""
        column = List.updated_at if order_by == "updated_at" else List.created_at
        result = await self.session.execute(
            select(List, link_count_column())
            .where(List.user_id == user_id)
            .order_by(column.desc())
            .limit(limit)
            .offset(offset)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def count_by_owner(self, user_id: str) -> int:
        return await self._count(List.user_id == user_id)

    def _explore_query(self, search: str | None) -> Select:
        query = select(List).where(List.is_public.is_(True))
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(
                or_(List.title.ilike(pattern), List.description.ilike(pattern))
            )
        return query

    async def explore(
        self,
        limit: int = 20,
        offset: int = 0,
        sort: str = "updated_at",
        order: str = "desc",
        search: str | None = None,
    ) -> tuple[list[tuple[List, int]], int]:
        """
        Public lists matching an optional title/description search.

        Private lists are excluded in the base query, so no combination
        of sort, order, or search can return them.

        Returns:
            Tuple of ((list, link_count) rows, total matching count)
        """
        base = self._explore_query(search)

        column = EXPLORE_SORT_COLUMNS.get(sort, List.updated_at)
        ordering = column.asc() if order == "asc" else column.desc()

        rows = await self.session.execute(
            base.add_columns(link_count_column())
            .options(selectinload(List.owner))
            .order_by(ordering, List.id)
            .limit(limit)
            .offset(offset)
        )
        total = await self.session.execute(
            select(func.count()).select_from(base.subquery())
        )
        return [(row[0], row[1]) for row in rows.all()], total.scalar_one()

    async def discover(self, limit: int = 50) -> list[List]:
        """Most recently created public lists with owner and links."""
        return await self._all(
            select(List)
            .where(List.is_public.is_(True))
            .options(selectinload(List.owner), selectinload(List.links))
            .order_by(List.created_at.desc())
            .limit(limit)
        )

    async def public_lists_for_user(self, user_id: str) -> list[tuple[List, int]]:
        result = await self.session.execute(
            select(List, link_count_column())
            .where(List.user_id == user_id)
            .where(List.is_public.is_(True))
            .order_by(List.created_at.desc())
        )
        return [(row[0], row[1]) for row in result.all()]

    async def count_public(self) -> int:
        return await self._count(List.is_public.is_(True))

    async def refresh_save_count(self, list_id: str) -> int:
        """Set save_count from the saved_lists rows and return it."""
        await self.session.flush()
        saves = (
            select(func.count(SavedList.id))
            .where(SavedList.list_id == list_id)
            .scalar_subquery()
        )
        await self.session.execute(
            update(List)
            .where(List.id == list_id)
            .values(save_count=saves)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(
            select(List)
            .where(List.id == list_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one().save_count

    async def record_view(self, lst: List, viewer_id: str | None, viewer_ip: str | None) -> None:
        """Store a view row and bump view_count in the same transaction."""
        self.session.add(ListView(list_id=lst.id, viewer_id=viewer_id, viewer_ip=viewer_ip))
        await self.session.execute(
            update(List)
            .where(List.id == lst.id)
            .values(view_count=List.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        await self.session.flush()
        await self.session.refresh(lst, attribute_names=["view_count"])

    async def touch(self, lst: List) -> None:
        """Mark a list as modified (link changes count as list changes)."""
        lst.updated_at = utc_now()
        await self.session.flush()

    async def save_count_drift(self) -> list[tuple[List, int]]:
        """Lists whose save_count disagrees with their saved_lists rows."""
        actual = (
            select(func.count(SavedList.id))
            .where(SavedList.list_id == List.id)
            .correlate(List)
            .scalar_subquery()
        )
        result = await self.session.execute(
            select(List, actual.label("actual")).where(List.save_count != actual)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def all_ids(self) -> list[str]:
        result = await self.session.execute(select(List.id))
        return list(result.scalars().all())

    async def all_public_ids(self) -> list[tuple[str, str]]:
        result = await self.session.execute(select(List.id, List.public_id))
        return [(row[0], row[1]) for row in result.all()]
