"""
Analytics Service.

Link click tracking and per-creator view, click, and save statistics.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from snack.backend.repositories.analytics import AnalyticsRepository
from snack.backend.services.base import BaseService

TOP_LISTS_LIMIT = 5


class AnalyticsService(BaseService):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = AnalyticsRepository(session)

    async def track_click(
        self,
        link_id: str,
        list_id: str,
        clicker_id: str | None,
        clicker_ip: str | None,
        user_agent: str | None,
        referrer: str | None,
    ) -> bool:
        """
        Record a link click.

        Failures are logged and reported as False, never raised. The
        session is rolled back so the request can still finish cleanly.
        """
        try:
            await self.repo.create(
                link_id=link_id,
                list_id=list_id,
                clicker_id=clicker_id,
                clicker_ip=clicker_ip,
                clicker_user_agent=user_agent,
                referrer=referrer,
            )
        except Exception as e:
            self._logger.warning(
                "Click tracking failed",
                extra={"link_id": link_id, "list_id": list_id, "error": str(e)},
            )
            await self.session.rollback()
            return False
        return True

    async def get_creator_stats(self, user_id: str) -> dict[str, Any]:
        """Totals across the user's lists plus the top lists by views, then saves."""
        per_list = await self.repo.list_stats_for_owner(user_id)
        top_lists = sorted(
            per_list,
            key=lambda item: (item["view_count"], item["save_count"]),
            reverse=True,
        )[:TOP_LISTS_LIMIT]
        return {
            "total_views": await self.repo.total_views_for_owner(user_id),
            "total_clicks": await self.repo.total_clicks_for_owner(user_id),
            "total_saves": sum(item["save_count"] for item in per_list),
            "top_lists": top_lists,
        }
