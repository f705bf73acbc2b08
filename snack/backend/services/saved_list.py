"""
Saved List Service.

Saving and unsaving other users' public lists. save_count is recomputed
from the saved_lists rows after every change.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from snack.backend.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from snack.backend.models.saved_list import SavedList
from snack.backend.repositories.list import ListRepository
from snack.backend.repositories.saved_list import SavedListRepository
from snack.backend.services.base import BaseService
from snack.backend.services.list import ListService


class SavedListService(BaseService):
    """Service for list saves."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = SavedListRepository(session)
        self.lists = ListRepository(session)
        self.list_service = ListService(session)

    async def save_list(self, list_id: str, user_id: str, notes: str | None = None) -> tuple[SavedList, int]:
        """
        Save a list for user_id.

        Returns:
            Tuple of (saved row, new save_count)

        Raises:
            NotFoundError: If the list does not exist
            ValidationError: If the list is the user's own or already saved
            AuthorizationError: If the list is private
        """
        lst = await self.list_service.get_or_404(list_id)

        if lst.user_id == user_id:
            raise ValidationError("Cannot save your own list")
        if not lst.is_public:
            raise AuthorizationError("Cannot save private lists")
        if await self.repo.get_for_user(user_id, lst.id) is not None:
            raise ValidationError("List already saved")

        try:
            saved = await self._execute_db_operation(
                "save_list",
                self.repo.create(user_id=user_id, list_id=lst.id, notes=notes),
            )
        except ConflictError as e:
            raise ValidationError("List already saved") from e

        save_count = await self.lists.refresh_save_count(lst.id)
        self._log_operation("List saved", list_id=lst.id, save_count=save_count)
        return saved, save_count

    async def unsave_list(self, list_id: str, user_id: str) -> int:
        """
        Remove a save.

        Returns:
            New save_count

        Raises:
            NotFoundError: If the list does not exist or was not saved
        """
        lst = await self.list_service.get_or_404(list_id)

        removed = await self.repo.remove(user_id, lst.id)
        if not removed:
            raise NotFoundError("List was not saved")

        save_count = await self.lists.refresh_save_count(lst.id)
        self._log_operation("List unsaved", list_id=lst.id, save_count=save_count)
        return save_count

    async def is_saved(self, list_id: str, user_id: str | None) -> bool:
        if user_id is None:
            return False
        lst = await self.list_service.resolve(list_id)
        if lst is None:
            return False
        return await self.repo.get_for_user(user_id, lst.id) is not None

    async def list_saved(self, user_id: str) -> list[SavedList]:
        return await self.repo.list_for_user(user_id)
