"""Factory Boy helpers for the async SQLAlchemy models.

Factories only *build* instances; async sessions cannot be driven by
``SQLAlchemyModelFactory``, so :func:`persist` adds them inside a
read-write Unit of Work.
"""

from __future__ import annotations

import factory
from idserver.uow import SQLAlchemyUnitOfWork


class BaseFactory(factory.Factory):
    """Base class for model factories (build strategy only)."""

    class Meta:
        abstract = True
        strategy = factory.BUILD_STRATEGY


async def persist(session_factory, *instances):
    """Insert ``instances`` and commit; returns them with primary keys set."""
    async with SQLAlchemyUnitOfWork(session_factory) as uow:
        assert uow.session is not None
        uow.session.add_all(instances)
        await uow.session.flush()
    return instances[0] if len(instances) == 1 else instances
