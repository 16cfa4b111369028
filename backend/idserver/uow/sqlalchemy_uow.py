"""
SQLAlchemy (asyncio) implementation of UnitOfWork.

Each unit of work opens its own :class:`AsyncSession` from the session
factory configured in :mod:`idserver.core.extensions`; nothing is bound to
the Flask request.
"""

from __future__ import annotations

import logging

from sqlalchemy import event
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from idserver.repositories import GrantRepository, PassportRepository, TokenRepository
from idserver.services._shared.errors import ConflictError, StorageUnavailable
from idserver.uow.base import UnitOfWork

log = logging.getLogger(__name__)


def _translate_db_error(exc: SQLAlchemyError) -> Exception:
    if isinstance(exc, IntegrityError):
        return ConflictError("database", str(exc.orig) if exc.orig else str(exc))
    return StorageUnavailable()


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share an async SQLAlchemy session."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self.session: AsyncSession | None = None

    def _bind(self, session: AsyncSession) -> None:
        self.session = session
        self.grants = GrantRepository(session)
        self.tokens = TokenRepository(session)
        self.passports = PassportRepository(session)

    def _active(self) -> AsyncSession:
        if self.session is None:
            raise RuntimeError("UnitOfWork used outside of its 'async with' block.")
        return self.session


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-write UoW: commits on a clean exit, rolls back on error.

    Driver failures are re-raised as service errors so the layers above
    never see SQLAlchemy types: :class:`IntegrityError` becomes
    :class:`ConflictError`, anything else :class:`StorageUnavailable`.
    """

    async def __aenter__(self) -> SQLAlchemyUnitOfWork:
        self._bind(self._session_factory())
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        session = self._active()
        try:
            if exc_type is None:
                try:
                    await self.commit()
                except SQLAlchemyError as err:
                    await self.rollback()
                    raise _translate_db_error(err) from err
            else:
                await self.rollback()
                if isinstance(exc, SQLAlchemyError):
                    log.error("uow.db_error", exc_info=(exc_type, exc, tb))
                    raise _translate_db_error(exc) from exc
        finally:
            await session.close()

    async def commit(self) -> None:
        await self._active().commit()

    async def rollback(self) -> None:
        await self._active().rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work.

    This UoW:
    - Installs an ORM write-guard (``before_flush``) on the session.
    - Detaches what it loaded and rolls back on exit, so rows read inside
      the block stay readable after it.
    - Disallows ``commit()``.
    """

    async def __aenter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        session = self._session_factory()
        self._bind(session)

        def _before_flush(session, flush_context, instances):
            if session.new or session.dirty or session.deleted:
                raise RuntimeError(
                    "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
                )

        event.listen(session.sync_session, "before_flush", _before_flush)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        session = self._active()
        try:
            # rollback() expires attached instances
            session.expunge_all()
            await self.rollback()
        finally:
            await session.close()
        if isinstance(exc, SQLAlchemyError):
            log.error("uow.db_error", exc_info=(exc_type, exc, tb))
            raise _translate_db_error(exc) from exc

    async def commit(self) -> None:
        """
        Disallow commit in read-only Unit of Work.

        :raises RuntimeError: always, to prevent accidental writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    async def rollback(self) -> None:
        await self._active().rollback()
