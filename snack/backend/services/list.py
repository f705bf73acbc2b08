"""
List Service.

Business logic for lists: creation with a unique public ID, owner-only
changes, and visibility rules for viewing.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from snack.backend.core.config import get_app_config
from snack.backend.core.exceptions import (
    AuthorizationError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from snack.backend.core.utils import utc_now
from snack.backend.domain.ids import generate_public_id, is_valid_public_id
from snack.backend.domain.pricing import validate_currency, validate_price
from snack.backend.integrations.ai_summary import ListSummarizer
from snack.backend.models.list import DEFAULT_EMOJI, List, ViewMode
from snack.backend.repositories.link import LinkRepository
from snack.backend.repositories.list import ListRepository
from snack.backend.schemas.list import ListCreate, ListUpdate
from snack.backend.services.base import BaseService

MAX_PUBLIC_ID_ATTEMPTS = 10


class ListService(BaseService):
    """
    Service for list business logic.

    List identifiers in URLs may be either the short public ID or the
    primary key; resolve() accepts both.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = ListRepository(session)

    async def resolve(self, list_id: str) -> List | None:
        """Find a list by public ID when the value has that shape, else by primary key."""
        if is_valid_public_id(list_id):
            lst = await self.repo.get_by_public_id(list_id)
            if lst is not None:
                return lst
        return await self.repo.get_by_id_or_none(list_id)

    async def get_or_404(self, list_id: str) -> List:
        lst = await self.resolve(list_id)
        if lst is None:
            raise NotFoundError("List not found")
        return lst

    async def get_owned(self, list_id: str, user_id: str) -> List:
        """
        Raises:
            NotFoundError: If the list does not exist
            AuthorizationError: If user_id is not the owner
        """
        lst = await self.get_or_404(list_id)
        self._require_owner(lst.user_id, user_id, "You do not own this list")
        return lst

    async def new_public_id(self) -> str:
        for _ in range(MAX_PUBLIC_ID_ATTEMPTS):
            candidate = generate_public_id()
            if not await self.repo.public_id_exists(candidate):
                return candidate
            self._log_debug("Public ID collision, retrying", public_id=candidate)
        raise DatabaseError("Could not allocate a public ID")

    def _validate_pricing(self, price_cents: int | None, currency: str | None) -> None:
        reason = validate_price(price_cents)
        if reason:
            raise ValidationError(reason, details={"price_cents": reason})
        if currency is not None and not validate_currency(currency):
            raise ValidationError("Unsupported currency", details={"currency": currency})

    async def create_list(self, user_id: str, data: ListCreate) -> List:
        """
        Create a list owned by user_id.

        Raises:
            ValidationError: If the price or currency is invalid
        """
        self._validate_pricing(data.price_cents, data.currency)
        public_id = await self.new_public_id()

        self._log_operation("Creating list", user_id=user_id, public_id=public_id)

        lst = await self._execute_db_operation(
            "create_list",
            self.repo.create(
                user_id=user_id,
                public_id=public_id,
                title=data.title.strip(),
                description=data.description,
                emoji=data.emoji or DEFAULT_EMOJI,
                is_public=data.is_public,
                price_cents=data.price_cents or None,
                currency=(data.currency or get_app_config().payments.default_currency).lower(),
                view_mode=data.view_mode or ViewMode.LIST,
            ),
        )
        return lst

    async def list_own(self, user_id: str, limit: int = 20, offset: int = 0) -> tuple[list[tuple[List, int]], int]:
        """A user's lists with link counts, newest first, plus the total."""
        rows = await self.repo.list_by_owner(user_id, limit=limit, offset=offset)
        total = await self.repo.count_by_owner(user_id)
        return rows, total

    async def view_list(
        self,
        list_id: str,
        viewer_id: str | None = None,
        viewer_ip: str | None = None,
    ) -> List:
        """
        Load a list for display with owner and ordered links.

        A view by anyone but the owner is recorded and counted.

        Raises:
            NotFoundError: If the list does not exist
            AuthorizationError: If the list is private and viewer is not the owner
        """
        found = await self.get_or_404(list_id)
        lst = await self.repo.get_with_details(list_id=found.id)

        is_owner = viewer_id is not None and viewer_id == lst.user_id
        if not lst.is_public and not is_owner:
            raise AuthorizationError("This list is private")

        if not is_owner:
            await self._execute_db_operation(
                "record_view",
                self.repo.record_view(lst, viewer_id=viewer_id, viewer_ip=viewer_ip),
            )
        return lst

    async def update_list(self, list_id: str, user_id: str, data: ListUpdate) -> List:
        """
        Update a list. Only provided fields change.

        Raises:
            NotFoundError: If the list does not exist
            AuthorizationError: If user_id is not the owner
            ValidationError: If the new price or currency is invalid
        """
        lst = await self.get_owned(list_id, user_id)
        update_data = data.model_dump(exclude_unset=True)

        for field in ("title", "emoji", "is_public", "currency", "view_mode"):
            if field in update_data and update_data[field] is None:
                del update_data[field]

        if "price_cents" in update_data or "currency" in update_data:
            self._validate_pricing(update_data.get("price_cents"), update_data.get("currency"))
        if "price_cents" in update_data:
            update_data["price_cents"] = update_data["price_cents"] or None
        if "currency" in update_data:
            update_data["currency"] = update_data["currency"].lower()
        if "title" in update_data:
            update_data["title"] = update_data["title"].strip()

        if update_data:
            self._log_operation("Updating list", list_id=lst.id, fields=list(update_data.keys()))
            await self._execute_db_operation(
                "update_list",
                self.repo.update(lst.id, **update_data),
            )

        return await self.repo.get_with_details(list_id=lst.id)

    async def delete_list(self, list_id: str, user_id: str) -> None:
        """
        Delete a list and, by cascade, its links and saves.

        Raises:
            NotFoundError: If the list does not exist
            AuthorizationError: If user_id is not the owner
        """
        lst = await self.get_owned(list_id, user_id)
        self._log_operation("Deleting list", list_id=lst.id)
        await self._execute_db_operation("delete_list", self.repo.delete(lst.id))

    async def _get_readable(self, list_id: str, viewer_id: str | None) -> List:
        lst = await self.get_or_404(list_id)
        if not lst.is_public and viewer_id != lst.user_id:
            raise AuthorizationError("This list is private")
        return lst

    async def get_summary(self, list_id: str, viewer_id: str | None = None) -> List:
        """
        The stored AI summary fields. Empty until one has been generated.

        Raises:
            NotFoundError: If the list does not exist
            AuthorizationError: If the list is private and viewer is not the owner
        """
        return await self._get_readable(list_id, viewer_id)

    async def generate_summary(self, list_id: str, user_id: str, summarizer: ListSummarizer) -> List:
        """
        Summarize the list's links in position order and store the result.

        Anyone signed in may refresh the summary of a public list; a private
        list only by its owner.

        Raises:
            NotFoundError: If the list does not exist
            AuthorizationError: If the list is private and user_id is not the owner
        """
        lst = await self._get_readable(list_id, user_id)
        links = await LinkRepository(self.session).get_for_list(lst.id)

        result = await summarizer.summarize(lst.title, links)
        self._log_operation(
            "Storing list summary",
            list_id=lst.id,
            links=len(links),
            model=summarizer.uses_model,
        )
        return await self._execute_db_operation(
            "store_summary",
            self.repo.update(
                lst.id,
                ai_summary=result.summary,
                ai_themes=result.themes,
                ai_generated_at=utc_now(),
            ),
        )
