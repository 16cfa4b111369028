"""Declarative base and async engine helpers shared across the application.

Models subclass :class:`Base`; the engine and session factory are created by
:func:`idserver.core.extensions.init_app` from ``DATABASE_URL``.
"""

from __future__ import annotations

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)


class Base(DeclarativeBase):
    """Declarative base bound to the shared :data:`metadata`."""

    metadata = metadata


def make_engine(url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an async engine that never pools connections.

    Every request runs on its own event loop, so pooled connections would be
    reused across loops. ``NullPool`` opens a connection per unit of work.
    """
    return create_async_engine(url, echo=echo, poolclass=NullPool)


def make_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create every table registered on :data:`metadata`."""
    from idserver import models as _models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)


async def drop_all(engine: AsyncEngine) -> None:
    from idserver import models as _models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
