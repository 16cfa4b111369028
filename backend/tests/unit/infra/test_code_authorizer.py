# tests/unit/infra/test_code_authorizer.py
from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest
from idserver.infra.sqlalchemy.grant_code_authorizer import SQLAlchemyCodeAuthorizer
from idserver.models.grant import AuthGrant
from idserver.services._shared.errors import StorageUnavailable
from idserver.services._shared.ports import CODE_LENGTH, InMemoryCodeAuthorizer
from idserver.services._shared.ports.code_authorizer import CODE_ALPHABET
from idserver.services.oauth.dto import Grant, Scope
from idserver.uow import SQLAlchemyReadOnlyUnitOfWork
from sqlalchemy import select


@pytest.fixture
def grant(now) -> Grant:
    return Grant(
        owner_id="42",
        client_id="dashboard",
        scope=Scope.parse("user:read"),
        redirect_uri="https://dash.purduehackers.com/api/callback",
        until=now + timedelta(minutes=10),
    )


@pytest.fixture
def authorizer(session_factory) -> SQLAlchemyCodeAuthorizer:
    return SQLAlchemyCodeAuthorizer(session_factory=session_factory)


async def test_authorize_persists_grant_with_fresh_code(authorizer, grant, session_factory):
    code = await authorizer.authorize(grant)

    assert len(code) == CODE_LENGTH
    assert set(code) <= set(CODE_ALPHABET)
    async with SQLAlchemyReadOnlyUnitOfWork(session_factory) as uow:
        row = await uow.grants.get_by_code(code)
        assert row is not None
        assert row.owner_id == 42
        assert row.scope == "user:read"


async def test_codes_are_unique(authorizer, grant):
    codes = {await authorizer.authorize(grant) for _ in range(5)}
    assert len(codes) == 5


async def test_extract_returns_grant_once(authorizer, grant):
    code = await authorizer.authorize(grant)

    first = await authorizer.extract(code)
    second = await authorizer.extract(code)

    assert first == grant
    assert second is None


async def test_extract_clears_code_but_keeps_row(authorizer, grant, session_factory):
    code = await authorizer.authorize(grant)
    await authorizer.extract(code)

    async with SQLAlchemyReadOnlyUnitOfWork(session_factory) as uow:
        rows = (await uow.session.execute(select(AuthGrant))).scalars().all()
    assert len(rows) == 1
    assert rows[0].code is None


async def test_extract_unknown_code(authorizer):
    assert await authorizer.extract("0" * CODE_LENGTH) is None


async def test_concurrent_redemptions_cannot_both_succeed(authorizer, grant):
    code = await authorizer.authorize(grant)

    results = await asyncio.gather(
        authorizer.extract(code), authorizer.extract(code), return_exceptions=True
    )

    winners = [r for r in results if isinstance(r, Grant)]
    assert len(winners) == 1
    # The loser either saw the cleared code or lost the SQLite write lock.
    for r in results:
        assert isinstance(r, Grant) or r is None or isinstance(r, StorageUnavailable)


async def test_in_memory_double_is_single_use(grant):
    authorizer = InMemoryCodeAuthorizer()
    code = await authorizer.authorize(grant)
    assert await authorizer.extract(code) == grant
    assert await authorizer.extract(code) is None
