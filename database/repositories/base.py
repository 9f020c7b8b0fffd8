"""
Generic async repository.

Thin wrapper over an ``AsyncSession`` for a single model. Entity
repositories subclass it and add their own query methods.
"""

import logging
from typing import Any, Generic, Optional, Sequence, TypeVar

from sqlalchemy import delete as sa_delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from database.engine import Base

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """CRUD operations shared by every repository."""

    model: type[ModelType]

    def __init__(self, session: AsyncSession):
        self.session = session

    def _filters(self, filters: dict[str, Any]) -> list:
        return [getattr(self.model, key) == value for key, value in filters.items()]

    async def create(self, **values: Any) -> ModelType:
        instance = self.model(**values)
        self.session.add(instance)
        await self.session.commit()
        await self.session.refresh(instance)
        return instance

    async def get_by_id(self, id: int) -> Optional[ModelType]:
        return await self.session.get(self.model, id)

    async def find_one(self, **filters: Any) -> Optional[ModelType]:
        result = await self.session.execute(
            select(self.model).where(*self._filters(filters)).limit(1)
        )
        return result.scalar_one_or_none()

    async def list(
        self,
        *conditions: Any,
        order_by: Any = None,
        limit: Optional[int] = None,
        offset: int = 0,
        **filters: Any,
    ) -> Sequence[ModelType]:
        """
        List rows matching SQL ``conditions`` and equality ``filters``.

        Defaults to newest first.
        """
        query = select(self.model).where(*conditions, *self._filters(filters))
        if order_by is None:
            order_by = self.model.created_at.desc()
        query = query.order_by(order_by)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return result.scalars().all()

    async def count(self, *conditions: Any, **filters: Any) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(self.model)
            .where(*conditions, *self._filters(filters))
        )
        return result.scalar_one()

    async def exists(self, *conditions: Any, **filters: Any) -> bool:
        return await self.count(*conditions, **filters) > 0

    async def update_by_id(self, id: int, **values: Any) -> Optional[ModelType]:
        instance = await self.get_by_id(id)
        if instance is None:
            return None
        for key, value in values.items():
            setattr(instance, key, value)
        await self.session.commit()
        await self.session.refresh(instance)
        return instance

    async def delete(self, id: int) -> bool:
        result = await self.session.execute(
            sa_delete(self.model).where(self.model.id == id)
        )
        await self.session.commit()
        return result.rowcount > 0

    async def group_count(self, column: Any, *conditions: Any) -> dict[Any, int]:
        """Row counts grouped by ``column``."""
        result = await self.session.execute(
            select(column, func.count())
            .select_from(self.model)
            .where(*conditions)
            .group_by(column)
        )
        return {key: count for key, count in result.all()}
