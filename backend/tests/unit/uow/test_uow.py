import pytest
from idserver.models.passport import Passport
from idserver.services._shared.errors import ConflictError
from idserver.uow import (
    SQLAlchemyReadOnlyUnitOfWork as ROuow,
)
from idserver.uow import (
    SQLAlchemyUnitOfWork as RWuow,
)
from sqlalchemy import func, inspect, select
from tests.factories import persist
from tests.factories.passport import PassportFactory


async def _count(session_factory) -> int:
    async with ROuow(session_factory) as uow:
        return (await uow.session.execute(select(func.count(Passport.id)))).scalar_one()


class TestSQLAlchemyReadOnlyUnitOfWork:
    async def test_blocks_orm_flush_writes(self, session_factory):
        """Flushing pending ORM changes inside the RO UoW raises."""
        with pytest.raises(RuntimeError, match="ORM flush blocked"):
            async with ROuow(session_factory) as uow:
                uow.session.add(PassportFactory.build())
                await uow.session.flush()
        assert await _count(session_factory) == 0

    async def test_allows_reads(self, session_factory):
        passport = await persist(session_factory, PassportFactory.build(owner_id=7))

        async with ROuow(session_factory) as uow:
            found = await uow.passports.get(passport.id)

        assert found is not None
        assert found.owner_id == 7

    async def test_rows_read_inside_stay_loaded_after_exit(self, session_factory):
        """Instances are detached before the rollback, not expired by it."""
        passport = await persist(session_factory, PassportFactory.build(owner_id=9))

        async with ROuow(session_factory) as uow:
            found = await uow.passports.get(passport.id)

        state = inspect(found)
        assert state.detached
        assert not state.expired_attributes
        assert (found.id, found.owner_id, found.activated) == (
            passport.id,
            9,
            passport.activated,
        )

    async def test_outside_block_raises(self, session_factory):
        uow = ROuow(session_factory)
        with pytest.raises(RuntimeError, match="outside of its 'async with' block"):
            await uow.rollback()

    async def test_disallows_commit(self, session_factory):
        async with ROuow(session_factory) as uow:
            with pytest.raises(RuntimeError, match="does not allow commit"):
                await uow.commit()


class TestSQLAlchemyUnitOfWork:
    async def test_commits_on_clean_exit(self, session_factory):
        async with RWuow(session_factory) as uow:
            await uow.passports.add(PassportFactory.build())

        assert await _count(session_factory) == 1

    async def test_rolls_back_on_error(self, session_factory):
        with pytest.raises(ValueError):
            async with RWuow(session_factory) as uow:
                await uow.passports.add(PassportFactory.build())
                raise ValueError("boom")

        assert await _count(session_factory) == 0

    async def test_integrity_error_becomes_conflict(self, session_factory):
        await persist(session_factory, PassportFactory.build(id=1))

        with pytest.raises(ConflictError):
            async with RWuow(session_factory) as uow:
                uow.session.add(PassportFactory.build(id=1))

        assert await _count(session_factory) == 1
