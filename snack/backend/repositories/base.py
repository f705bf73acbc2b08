"""
Base Repository.

Generic data access for one model. Repositories only flush; committing
is left to the request's session dependency (or the CLI's session scope).
"""

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from snack.backend.core.exceptions import NotFoundError
from snack.backend.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    CRUD for a single model plus small query helpers for subclasses.

        class LinkRepository(BaseRepository[Link]):
            model = Link
            not_found_message = "Link not found"
    """

    model: type[ModelType]
    not_found_message = "Resource not found"

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # Query helpers

    async def _one_or_none(self, stmt: Select) -> Any:
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def _all(self, stmt: Select) -> list[Any]:
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def _exists(self, stmt: Select) -> bool:
        result = await self.session.execute(stmt.limit(1))
        return result.first() is not None

    async def _count(self, *criteria: Any) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(self.model).where(*criteria)
        )
        return result.scalar_one()

    # CRUD

    async def get_by_id_or_none(self, id: str) -> ModelType | None:
        return await self._one_or_none(select(self.model).where(self.model.id == id))

    async def get_by_id(self, id: str) -> ModelType:
        """
        Raises:
            NotFoundError: If no row has this id
        """
        instance = await self.get_by_id_or_none(id)
        if instance is None:
            raise NotFoundError(self.not_found_message)
        return instance

    async def count(self) -> int:
        return await self._count()

    async def create(self, **fields: Any) -> ModelType:
        """Insert a row and reload it so server defaults are populated."""
        instance = self.model(**fields)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def create_many(self, rows: Sequence[dict[str, Any]]) -> list[ModelType]:
        instances = [self.model(**fields) for fields in rows]
        self.session.add_all(instances)
        await self.session.flush()
        return instances

    async def update(self, id: str, **fields: Any) -> ModelType:
        """
        Set the given columns on one row.

        Raises:
            NotFoundError: If no row has this id
            AttributeError: If a field is not a column of the model
        """
        instance = await self.get_by_id(id)
        for key, value in fields.items():
            if key not in self.model.__mapper__.columns:
                raise AttributeError(f"{self.model.__name__} has no column {key!r}")
            setattr(instance, key, value)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def delete(self, id: str) -> None:
        """
        Raises:
            NotFoundError: If no row has this id
        """
        instance = await self.get_by_id(id)
        await self.session.delete(instance)
        await self.session.flush()
