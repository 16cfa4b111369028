"""Async repository base shared by the persistence layer.

Repositories wrap the :class:`AsyncSession` of the unit of work that created
them. They read and stage rows; committing is the unit of work's job.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar, cast

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

E = TypeVar("E")  # mapped entity


class BaseRepository(Generic[E]):
    """
    Persistence helpers for one mapped class.

    Subclasses set :attr:`model`; every model here has an integer ``id``.
    """

    model: type[E]

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so its primary key is populated."""
        self.session.add(instance)
        await self.flush()
        return instance

    async def get(self, entity_id: int) -> E | None:
        return await self.session.get(self.model, entity_id)

    async def find_one(self, **filters: Any) -> E | None:
        """
        First row whose columns equal ``filters``.

        :param filters: ``column=value`` pairs, combined with ``AND``.
        :returns: Entity or ``None``.
        """
        stmt = select(self.model).filter_by(**filters).limit(1)
        result = await self.session.execute(stmt)
        return cast(E | None, result.scalars().first())

    async def flush(self) -> None:
        await self.session.flush()
