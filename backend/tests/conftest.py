"""Pytest fixtures wiring throwaway storage into the application.

Every test gets its own SQLite file (through aiosqlite) and its own
in-memory Redis server (fakeredis), so nothing leaks between cases.

Two flavours of fixtures are provided:

* async fixtures (``session_factory``, ``kv``) for service and adapter tests
  running on the pytest-asyncio loop;
* the sync ``app``/``client`` pair for endpoint tests. Flask runs every async
  view on its own event loop, so endpoint tests stay synchronous and use
  :func:`asyncio.run` for setup.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import fakeredis
import pytest
from flask import Flask
from idserver.core import extensions
from idserver.core.config import TestingConfig
from idserver.core.database import create_all, make_engine, make_sessionmaker
from idserver.factory import create_app
from idserver.infra.jwt.keys import generate_keys
from idserver.services.oauth.registry import ClientRegistry
from tests.helpers.utils import PRESENCE_PREFIX, make_jwt_app


@pytest.fixture(scope="session")
def signing_keys():
    """One P-256 key pair for the whole run (key generation is slow-ish)."""
    return generate_keys()


@pytest.fixture(scope="session")
def other_signing_keys():
    """A second, unrelated key pair used to forge tokens."""
    return generate_keys()


@pytest.fixture
def registry() -> ClientRegistry:
    return ClientRegistry()


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'idserver.db'}"


@pytest.fixture
def now() -> datetime:
    return datetime.now(UTC)


# ------------------------------ Async storage ------------------------------ #


@pytest.fixture
async def session_factory(db_url):
    """Async session factory over a freshly created schema."""
    engine = make_engine(db_url)
    await create_all(engine)
    try:
        yield make_sessionmaker(engine)
    finally:
        await engine.dispose()


@pytest.fixture
def fake_server():
    return fakeredis.FakeServer()


@pytest.fixture
async def kv(fake_server):
    """Async fakeredis client; the presence store under test reads from it."""
    client = fakeredis.FakeAsyncRedis(server=fake_server)
    try:
        yield client
    finally:
        await client.aclose()


@pytest.fixture
def sync_kv(fake_server):
    """Sync view of the same fake server, standing in for the tap recorder."""
    return fakeredis.FakeRedis(server=fake_server)


# ------------------------------ Flask ------------------------------------- #


@pytest.fixture
def jwt_app(signing_keys, registry) -> Flask:
    return make_jwt_app(signing_keys, registry)


@pytest.fixture(params=["jwt"])
def token_strategy(request) -> str:
    """Token strategy of the ``app`` fixture; override with indirect parametrize."""
    return request.param


@pytest.fixture
def app(db_url, signing_keys, fake_server, token_strategy, monkeypatch):
    """Create a Flask application bound to throwaway storage.

    Returns
    -------
    flask.Flask
        Application using :class:`TestingConfig` with a per-test SQLite file,
        fakeredis for presence signals and the session signing keys.
    """
    app = create_app(
        TestingConfig,
        overrides={
            "DATABASE_URL": db_url,
            "TOKEN_STRATEGY": token_strategy,
            "JWK": None,
            "JWT_PRIVATE_KEY": signing_keys.private_pem,
            "JWT_PUBLIC_KEY": signing_keys.public_pem,
            "OAUTH_CLIENTS": None,
            "PRESENCE_KEY_PREFIX": PRESENCE_PREFIX,
            "LOGIN_URL": "https://id.example.test/authorize",
        },
        instance_relative_config=False,
    )
    app.logger.setLevel("WARNING")
    monkeypatch.setattr(
        extensions, "kv_factory", lambda: fakeredis.FakeAsyncRedis(server=fake_server)
    )
    asyncio.run(create_all(extensions.engine))
    yield app
    asyncio.run(extensions.engine.dispose())


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_session_factory(app):
    """Session factory of the running ``app`` for sync setup via ``asyncio.run``."""
    return extensions.session_factory
