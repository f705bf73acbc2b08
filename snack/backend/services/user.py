"""
User Service.

Profile management, profile pictures, username availability, and public
profiles.
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from snack.backend.core.config import get_app_config
from snack.backend.core.exceptions import ConflictError, NotFoundError, ValidationError
from snack.backend.core.security import verify_password
from snack.backend.domain.usernames import normalize_username, validate_username
from snack.backend.integrations.avatars import FORMAT_EXTENSIONS, AvatarStore, detect_image_format
from snack.backend.models.list import List
from snack.backend.models.user import User
from snack.backend.repositories.list import ListRepository
from snack.backend.repositories.saved_list import SavedListRepository
from snack.backend.repositories.user import UserRepository
from snack.backend.schemas.user import EmailUpdate, ProfileUpdate, PublicProfileStats
from snack.backend.services.base import BaseService


@dataclass
class PublicProfile:
    user: User
    lists: list[tuple[List, int]]
    stats: PublicProfileStats


class UserService(BaseService):
    """Service for account and profile business logic."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.users = UserRepository(session)
        self.lists = ListRepository(session)
        self.saves = SavedListRepository(session)

    async def check_username(self, username: str, current_user_id: str | None = None) -> tuple[bool, str | None]:
        """
        Check whether a username can be claimed.

        The caller's own current username counts as available.

        Returns:
            Tuple of (available, reason when unavailable)
        """
        reason = validate_username(username)
        if reason:
            return False, reason

        if await self.users.username_taken(normalize_username(username), exclude_user_id=current_user_id):
            return False, "Username is already taken"
        return True, None

    async def update_profile(self, user: User, data: ProfileUpdate) -> User:
        """
        Update the signed-in user's profile.

        Raises:
            ValidationError: If the new username is invalid
            ConflictError: If the new username belongs to someone else
        """
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            return user

        if "username" in update_data:
            username = update_data["username"]
            if username is None:
                raise ValidationError("Username cannot be removed")
            reason = validate_username(username)
            if reason:
                raise ValidationError(reason, details={"username": reason})
            username = normalize_username(username)
            if await self.users.username_taken(username, exclude_user_id=user.id):
                raise ConflictError("Username already taken")
            update_data["username"] = username

        if update_data.get("profile_is_public", True) is None:
            del update_data["profile_is_public"]

        self._log_operation("Updating profile", user_id=user.id, fields=list(update_data.keys()))

        return await self._execute_db_operation(
            "update_profile",
            self.users.update(user.id, **update_data),
            conflict_message="Username already taken",
        )

    async def update_email(self, user: User, data: EmailUpdate) -> User:
        """
        Change the sign-in email. The current password must be supplied.

        Raises:
            ValidationError: If the password is wrong
            ConflictError: If another account uses the email
        """
        if not verify_password(data.password, user.hashed_password):
            self._log_debug("Email change rejected", user_id=user.id)
            raise ValidationError("Password is incorrect", details={"password": "incorrect"})

        email = data.email.strip().lower()
        if email == user.email:
            return user

        existing = await self.users.get_by_email(email)
        if existing is not None and existing.id != user.id:
            raise ConflictError("Email already registered")

        self._log_operation("Updating email", user_id=user.id)
        return await self._execute_db_operation(
            "update_email",
            self.users.update(user.id, email=email),
            conflict_message="Email already registered",
        )

    async def set_profile_picture(self, user: User, data: bytes, content_type: str | None, store: AvatarStore) -> User:
        """
        Store an uploaded image and make it the profile picture.

        The declared type must be allowed and the bytes must decode as a
        JPEG, PNG, GIF, or WebP image. A previous stored picture is removed.

        Raises:
            ValidationError: If the file is empty, too large, or not an allowed image
        """
        config = get_app_config().integrations.avatars
        if not data:
            raise ValidationError("No file provided")
        if len(data) > config.max_bytes:
            limit_mb = config.max_bytes // (1024 * 1024)
            raise ValidationError(f"File too large. Please upload an image under {limit_mb}MB.")

        image_format = detect_image_format(data)
        if content_type not in config.allowed_content_types or image_format not in FORMAT_EXTENSIONS:
            raise ValidationError("Invalid file type. Please upload a JPG, PNG, GIF, or WebP image.")

        previous = user.profile_picture_url
        url = await store.save(user.id, data, FORMAT_EXTENSIONS[image_format])
        self._log_operation("Updating profile picture", user_id=user.id, format=image_format, size=len(data))
        try:
            updated = await self._execute_db_operation(
                "set_profile_picture",
                self.users.update(user.id, profile_picture_url=url),
            )
        except Exception:
            await store.delete(url)
            raise

        await store.delete(previous)
        return updated

    async def remove_profile_picture(self, user: User, store: AvatarStore) -> User:
        """Clear the profile picture, deleting the file when this server stored it."""
        previous = user.profile_picture_url
        if previous is None:
            return user

        self._log_operation("Removing profile picture", user_id=user.id)
        updated = await self._execute_db_operation(
            "remove_profile_picture",
            self.users.update(user.id, profile_picture_url=None),
        )
        await store.delete(previous)
        return updated

    async def delete_account(self, user: User) -> None:
        """
        Delete the account. Lists, links, and saves cascade.

        Lists the user had saved lose a save, so their save_count is recounted.
        """
        saved_list_ids = await self.saves.list_ids_for_user(user.id)
        self._log_operation("Deleting account", user_id=user.id, saved_lists=len(saved_list_ids))
        await self._execute_db_operation("delete_account", self.users.delete(user.id))
        for list_id in saved_list_ids:
            await self.lists.refresh_save_count(list_id)

    async def get_public_profile(self, username: str) -> PublicProfile:
        """
        Public profile with the user's public lists and aggregate stats.

        Raises:
            NotFoundError: If the user is unknown or the profile is private
        """
        user = await self.users.get_by_username(normalize_username(username))
        if user is None or not user.profile_is_public:
            raise NotFoundError("Profile not found")

        rows = await self.lists.public_lists_for_user(user.id)
        stats = PublicProfileStats(
            total_public_lists=len(rows),
            total_saves_received=sum(lst.save_count for lst, _ in rows),
            total_links=sum(count or 0 for _, count in rows),
            total_views=sum(lst.view_count for lst, _ in rows),
        )
        return PublicProfile(user=user, lists=rows, stats=stats)
