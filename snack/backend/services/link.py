"""
Link Service.

Adds, edits, reorders, and removes links while keeping each list's
positions unique and contiguous (0..n-1). Every change touches the
parent list's updated_at.
"""

from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from snack.backend.core.config import get_app_config
from snack.backend.core.exceptions import NotFoundError, ValidationError
from snack.backend.domain.urls import get_hostname, validate_and_normalize_url
from snack.backend.integrations.opengraph import LinkPreviewClient
from snack.backend.models.link import Link
from snack.backend.models.list import List
from snack.backend.repositories.link import LinkRepository
from snack.backend.repositories.list import ListRepository
from snack.backend.schemas.extension import ExtensionLinkData
from snack.backend.schemas.link import LinkCreate, LinkUpdate
from snack.backend.services.base import BaseService
from snack.backend.services.list import ListService


def _clean_url(url: str) -> str:
    normalized, reason = validate_and_normalize_url(url)
    if reason:
        raise ValidationError(reason, details={"url": url})
    return normalized


class LinkService(BaseService):
    """Service for link business logic and the position invariant."""

    def __init__(self, session: AsyncSession, previews: LinkPreviewClient | None = None) -> None:
        super().__init__(session)
        self.repo = LinkRepository(session)
        self.lists = ListRepository(session)
        self.list_service = ListService(session)
        self.previews = previews

    def _previews_enabled(self) -> bool:
        return self.previews is not None and get_app_config().features.link_previews_enabled

    async def _fill_preview(self, url: str, fields: dict) -> dict:
        """Fill missing title, description, image, and favicon from the page."""
        if fields.get("title") and fields.get("image_url"):
            return fields
        if not self._previews_enabled():
            return fields

        preview = await self.previews.fetch(url)
        fields["title"] = fields.get("title") or preview.title
        fields["description"] = fields.get("description") or preview.description
        fields["image_url"] = fields.get("image_url") or preview.image
        fields["favicon_url"] = fields.get("favicon_url") or preview.favicon
        return fields

    async def list_links(self, list_id: str) -> list[Link]:
        return await self.repo.get_for_list(list_id)

    async def add_link(self, list_id: str, user_id: str, data: LinkCreate) -> Link:
        """
        Add a link to a list.

        Without a position the link is appended. A position is clamped to
        [0, n] and links at or after it move down by one.

        Raises:
            NotFoundError: If the list does not exist
            AuthorizationError: If user_id is not the owner
            ValidationError: If the URL is invalid
        """
        lst = await self.list_service.get_owned(list_id, user_id)
        url = _clean_url(data.url)

        fields = await self._fill_preview(
            url,
            data.model_dump(include={"title", "description", "image_url", "favicon_url"}),
        )

        count = await self.repo.count_for_list(lst.id)
        position = count if data.position is None else max(0, min(data.position, count))
        if position < count:
            await self.repo.shift_positions(lst.id, position, 1)

        self._log_operation("Adding link", list_id=lst.id, position=position)

        link = await self._execute_db_operation(
            "add_link",
            self.repo.create(list_id=lst.id, url=url, position=position, **fields),
        )
        await self.lists.touch(lst)
        return link

    async def prepend_links(self, lst: List, links: Sequence[ExtensionLinkData]) -> int:
        """
        Insert links at the top of a list, keeping the given order.

        Titles fall back to the page hostname. Invalid URLs are skipped
        with a warning instead of failing the batch.

        Returns:
            Number of links added
        """
        prepared = []
        for item in links:
            url, reason = validate_and_normalize_url(item.url)
            if reason:
                self._logger.warning(
                    "Skipping invalid extension link",
                    extra={"list_id": lst.id, "url": item.url, "reason": reason},
                )
                continue
            fields = await self._fill_preview(
                url,
                {
                    "title": item.title,
                    "description": item.description,
                    "image_url": item.image_url,
                    "favicon_url": item.favicon_url,
                },
            )
            fields["title"] = fields.get("title") or get_hostname(url)
            prepared.append((url, fields))

        if not prepared:
            return 0

        await self.repo.shift_positions(lst.id, 0, len(prepared))
        await self._execute_db_operation(
            "prepend_links",
            self.repo.create_many([
                {"list_id": lst.id, "url": url, "position": position, **fields}
                for position, (url, fields) in enumerate(prepared)
            ]),
        )

        self._log_operation("Links added from extension", list_id=lst.id, count=len(prepared))
        await self.lists.touch(lst)
        return len(prepared)

    async def reorder_links(self, list_id: str, user_id: str, link_ids: list[str]) -> list[Link]:
        """
        Assign each link its index in link_ids.

        Raises:
            ValidationError: If link_ids is not exactly the list's links
        """
        lst = await self.list_service.get_owned(list_id, user_id)
        links = await self.repo.get_for_list(lst.id)

        current = {link.id for link in links}
        if len(link_ids) != len(set(link_ids)) or set(link_ids) != current:
            raise ValidationError(
                "link_ids must contain every link of the list exactly once",
                details={"expected": len(current), "received": len(link_ids)},
            )

        for position, link_id in enumerate(link_ids):
            await self.repo.set_position(link_id, position)

        self._log_operation("Reordered links", list_id=lst.id, count=len(link_ids))
        await self.lists.touch(lst)
        return await self.repo.get_for_list(lst.id)

    async def update_link(self, list_id: str, user_id: str, link_id: str, data: LinkUpdate) -> Link:
        """
        Raises:
            NotFoundError: If the list or link does not exist
            AuthorizationError: If user_id is not the owner
            ValidationError: If a new URL is invalid
        """
        lst = await self.list_service.get_owned(list_id, user_id)
        link = await self.repo.get_in_list(lst.id, link_id)
        if link is None:
            raise NotFoundError("Link not found")

        update_data = data.model_dump(exclude_unset=True)
        if "url" in update_data:
            if update_data["url"] is None:
                del update_data["url"]
            else:
                update_data["url"] = _clean_url(update_data["url"])

        if update_data:
            link = await self._execute_db_operation(
                "update_link",
                self.repo.update(link.id, **update_data),
            )
            await self.lists.touch(lst)
        return link

    async def delete_link(self, list_id: str, user_id: str, link_id: str) -> None:
        """
        Delete a link and close the gap it leaves.

        Raises:
            NotFoundError: If the list or link does not exist
            AuthorizationError: If user_id is not the owner
        """
        lst = await self.list_service.get_owned(list_id, user_id)
        link = await self.repo.get_in_list(lst.id, link_id)
        if link is None:
            raise NotFoundError("Link not found")

        position = link.position
        await self._execute_db_operation("delete_link", self.repo.delete(link.id))
        await self.repo.shift_positions(lst.id, position + 1, -1)

        self._log_operation("Deleted link", list_id=lst.id, position=position)
        await self.lists.touch(lst)

    async def normalize_positions(self, list_id: str) -> int:
        """
        Rewrite a list's positions to 0..n-1 in their current order.

        Returns:
            Number of links whose position changed
        """
        changed = 0
        for position, link in enumerate(await self.repo.get_for_list(list_id)):
            if link.position != position:
                await self.repo.set_position(link.id, position)
                changed += 1
        return changed
