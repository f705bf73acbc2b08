"""
Analytics Repository.

Click recording and per-creator aggregates.
"""

from sqlalchemy import func, select

from snack.backend.models.analytics import LinkClick, ListView
from snack.backend.models.list import List
from snack.backend.repositories.base import BaseRepository


class AnalyticsRepository(BaseRepository[LinkClick]):
    """Repository for LinkClick rows plus view/click counts by owner."""

    model = LinkClick

    async def total_views_for_owner(self, user_id: str) -> int:
        result = await self.session.execute(
            select(func.count(ListView.id))
            .join(List, List.id == ListView.list_id)
            .where(List.user_id == user_id)
        )
        return result.scalar_one()

    async def total_clicks_for_owner(self, user_id: str) -> int:
        result = await self.session.execute(
            select(func.count(LinkClick.id))
            .join(List, List.id == LinkClick.list_id)
            .where(List.user_id == user_id)
        )
        return result.scalar_one()

    async def list_stats_for_owner(self, user_id: str) -> list[dict]:
        """View, click, and save counts for every list the user owns."""
        views = (
            select(func.count(ListView.id))
            .where(ListView.list_id == List.id)
            .correlate(List)
            .scalar_subquery()
        )
        clicks = (
            select(func.count(LinkClick.id))
            .where(LinkClick.list_id == List.id)
            .correlate(List)
            .scalar_subquery()
        )
        result = await self.session.execute(
            select(
                List.id,
                List.public_id,
                List.title,
                List.emoji,
                List.save_count,
                views.label("view_count"),
                clicks.label("click_count"),
            ).where(List.user_id == user_id)
        )
        return [
            {
                "id": row.id,
                "public_id": row.public_id,
                "title": row.title,
                "emoji": row.emoji,
                "save_count": row.save_count,
                "view_count": row.view_count,
                "click_count": row.click_count,
            }
            for row in result.all()
        ]
