"""
User Repository.

Data access for accounts and public profiles.
"""

from sqlalchemy import func, select

from snack.backend.models.user import User
from snack.backend.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User
    not_found_message = "User not found"

    async def get_by_email(self, email: str) -> User | None:
        """Case-insensitive email lookup."""
        return await self._one_or_none(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )

    async def get_by_username(self, username: str) -> User | None:
        return await self._one_or_none(select(User).where(User.username == username))

    async def get_by_stripe_account(self, account_id: str) -> User | None:
        return await self._one_or_none(select(User).where(User.stripe_account_id == account_id))

    async def username_taken(self, username: str, exclude_user_id: str | None = None) -> bool:
        """True when a user other than exclude_user_id holds the username."""
        query = select(User.id).where(User.username == username)
        if exclude_user_id is not None:
            query = query.where(User.id != exclude_user_id)
        return await self._exists(query)
