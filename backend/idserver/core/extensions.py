"""Global extension instances and storage wiring, initialised per app."""

from __future__ import annotations

import logging
from collections.abc import Callable

import redis.asyncio as redis  # type: ignore[import-untyped]
from flask import Flask
from flask_jwt_extended import JWTManager
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from idserver.core.database import make_engine, make_sessionmaker
from idserver.infra.jwt.keys import resolve_signing_keys
from idserver.infra.strategy import TokenStrategy
from idserver.services.oauth.registry import ClientRegistry

log = logging.getLogger(__name__)

KVFactory = Callable[[], redis.Redis]

# Global singletons (import-safe)
jwt = JWTManager()
engine: AsyncEngine | None = None
session_factory: async_sessionmaker[AsyncSession] | None = None
client_registry: ClientRegistry | None = None
token_strategy: TokenStrategy = TokenStrategy.JWT
kv_factory: KVFactory | None = None


def _init_signing_keys(app: Flask) -> None:
    keys = resolve_signing_keys(
        jwk=app.config.get("JWK"),
        private_pem=app.config.get("JWT_PRIVATE_KEY"),
        public_pem=app.config.get("JWT_PUBLIC_KEY"),
        allow_ephemeral=bool(app.config.get("ALLOW_EPHEMERAL_KEYS", False)),
    )
    app.config["JWT_PRIVATE_KEY"] = keys.private_pem
    app.config["JWT_PUBLIC_KEY"] = keys.public_pem


def init_app(app: Flask) -> None:
    """Initialize the client registry, storage handles and the JWT extension.

    Parameters
    ----------
    app: flask.Flask
        Application whose configuration is read. Raises
        :class:`~idserver.services._shared.errors.ConfigurationError` when
        the client list, token strategy or signing keys are unusable.

    Notes
    -----
    Nothing connects here: the engine uses ``NullPool`` and Redis clients
    are opened per request by :func:`open_kv`.
    """
    global engine, session_factory, client_registry, token_strategy, kv_factory

    client_registry = ClientRegistry.from_config(app.config.get("OAUTH_CLIENTS"))
    token_strategy = TokenStrategy.parse(str(app.config.get("TOKEN_STRATEGY", "jwt")))

    if token_strategy is TokenStrategy.JWT:
        _init_signing_keys(app)
    app.config["JWT_DECODE_AUDIENCE"] = client_registry.client_ids()
    jwt.init_app(app)

    engine = make_engine(app.config["DATABASE_URL"], echo=app.config.get("DATABASE_ECHO", False))
    session_factory = make_sessionmaker(engine)

    kv_url = app.config["KV_URL"]
    kv_factory = lambda: redis.Redis.from_url(kv_url)  # noqa: E731

    app.extensions["idserver"] = {
        "clients": len(client_registry),
        "token_strategy": token_strategy.value,
    }
    log.info("extensions.ready", extra={"status": token_strategy.value})


def get_registry() -> ClientRegistry:
    """Return the initialized client registry."""
    if client_registry is None:
        raise RuntimeError("Client registry is not initialized. Call init_app() first.")
    return client_registry


def open_kv() -> redis.Redis:
    """Open a fresh Redis client; the caller must ``await client.aclose()``."""
    if kv_factory is None:
        raise RuntimeError("Redis client factory is not initialized. Call init_app() first.")
    return kv_factory()
