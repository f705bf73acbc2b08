"""
SavedList Repository.

Data access for list saves (bookmarks).
"""

from sqlalchemy import delete, select
from sqlalchemy.orm import selectinload

from snack.backend.models.list import List
from snack.backend.models.saved_list import SavedList
from snack.backend.repositories.base import BaseRepository


class SavedListRepository(BaseRepository[SavedList]):
    model = SavedList

    async def get_for_user(self, user_id: str, list_id: str) -> SavedList | None:
        return await self._one_or_none(
            select(SavedList)
            .where(SavedList.user_id == user_id)
            .where(SavedList.list_id == list_id)
        )

    async def remove(self, user_id: str, list_id: str) -> int:
        """Delete a save. Returns the number of rows removed."""
        result = await self.session.execute(
            delete(SavedList)
            .where(SavedList.user_id == user_id)
            .where(SavedList.list_id == list_id)
        )
        return result.rowcount

    async def list_for_user(self, user_id: str) -> list[SavedList]:
        """A user's saves with list and owner, most recent first."""
        return await self._all(
            select(SavedList)
            .where(SavedList.user_id == user_id)
            .options(selectinload(SavedList.list).selectinload(List.owner))
            .order_by(SavedList.created_at.desc())
        )

    async def list_ids_for_user(self, user_id: str) -> list[str]:
        result = await self.session.execute(select(SavedList.list_id).where(SavedList.user_id == user_id))
        return list(result.scalars().all())
