"""Persistence for opaque :class:`~idserver.models.token.AuthToken` rows."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import joinedload

from idserver.models.token import AuthToken

from .base import BaseRepository


class TokenRepository(BaseRepository[AuthToken]):
    model = AuthToken

    async def get_with_grant(self, token: str) -> AuthToken | None:
        """Load a token together with the grant it was issued from."""
        stmt = (
            select(AuthToken)
            .options(joinedload(AuthToken.grant))
            .where(AuthToken.token == token)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()
