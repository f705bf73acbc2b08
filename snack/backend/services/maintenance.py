"""
Maintenance Service.

Data repair operations run from the ops CLI: save count drift, malformed
public IDs, gaps in link positions, and table row counts.
"""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from snack.backend.domain.ids import is_valid_public_id
from snack.backend.models import Base
from snack.backend.repositories.list import ListRepository
from snack.backend.services.base import BaseService
from snack.backend.services.link import LinkService
from snack.backend.services.list import ListService


class MaintenanceService(BaseService):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.lists = ListRepository(session)
        self.list_service = ListService(session)
        self.link_service = LinkService(session)

    async def check_save_counts(self, fix: bool = False) -> list[dict[str, Any]]:
        """
        Find lists whose save_count disagrees with their saves.

        Args:
            fix: Recompute the drifted counters

        Returns:
            One entry per drifted list with stored and actual counts
        """
        drift = [
            {"list_id": lst.id, "public_id": lst.public_id, "title": lst.title, "stored": lst.save_count, "actual": actual}
            for lst, actual in await self.lists.save_count_drift()
        ]
        if fix:
            for item in drift:
                await self.lists.refresh_save_count(item["list_id"])
            self._log_operation("Save counts repaired", count=len(drift))
        return drift

    async def fix_public_ids(self) -> list[tuple[str, str]]:
        """
        Replace public IDs that are not valid 8-character IDs.

        Returns:
            (old, new) pairs for every replaced ID
        """
        replaced = []
        for list_id, public_id in await self.lists.all_public_ids():
            if is_valid_public_id(public_id):
                continue
            new_id = await self.list_service.new_public_id()
            await self.lists.update(list_id, public_id=new_id)
            replaced.append((public_id, new_id))
        self._log_operation("Public IDs repaired", count=len(replaced))
        return replaced

    async def normalize_positions(self) -> dict[str, int]:
        """
        Rewrite every list's link positions to 0..n-1.

        Returns:
            Mapping of list id to number of links moved, for changed lists
        """
        changed = {}
        for list_id in await self.lists.all_ids():
            moved = await self.link_service.normalize_positions(list_id)
            if moved:
                changed[list_id] = moved
        self._log_operation("Link positions normalized", lists=len(changed))
        return changed

    async def table_counts(self) -> dict[str, int]:
        counts = {}
        for table in Base.metadata.sorted_tables:
            result = await self.session.execute(select(func.count()).select_from(table))
            counts[table.name] = result.scalar_one()
        return counts
