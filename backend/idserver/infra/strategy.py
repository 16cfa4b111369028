"""Token strategy selection."""

from __future__ import annotations

from datetime import timedelta
from enum import StrEnum

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from idserver.infra.jwt.flask_jwt_token_issuer import JWTTokenIssuer
from idserver.infra.sqlalchemy.db_token_issuer import SQLAlchemyTokenIssuer
from idserver.services._shared.base import Clock
from idserver.services._shared.errors import ConfigurationError
from idserver.services._shared.ports import TokenIssuer
from idserver.services.oauth.registry import ClientRegistry


class TokenStrategy(StrEnum):
    JWT = "jwt"
    DB = "db"

    @classmethod
    def parse(cls, value: str) -> TokenStrategy:
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            choices = ", ".join(s.value for s in cls)
            raise ConfigurationError(
                f"Unknown TOKEN_STRATEGY {value!r} (expected one of: {choices})"
            ) from exc


def build_token_issuer(
    strategy: TokenStrategy | str,
    *,
    registry: ClientRegistry,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    ttl: timedelta,
    clock: Clock | None = None,
) -> TokenIssuer:
    """Construct the :class:`TokenIssuer` for ``strategy``."""
    if not isinstance(strategy, TokenStrategy):
        strategy = TokenStrategy.parse(strategy)
    if strategy is TokenStrategy.JWT:
        return JWTTokenIssuer(registry, ttl=ttl, clock=clock)
    return SQLAlchemyTokenIssuer(session_factory=session_factory, ttl=ttl, clock=clock)
