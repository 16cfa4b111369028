"""Persistence for :class:`~idserver.models.grant.AuthGrant` rows."""

from __future__ import annotations

from sqlalchemy import select, update

from idserver.models.grant import AuthGrant

from .base import BaseRepository


class GrantRepository(BaseRepository[AuthGrant]):
    """Queries over issued grants and their single-use codes."""

    model = AuthGrant

    async def get_by_code(self, code: str) -> AuthGrant | None:
        return await self.find_one(code=code)

    async def consume_code(self, grant_id: int, code: str) -> bool:
        """Clear ``code`` on the grant only if it still holds that value.

        The conditional ``UPDATE`` is the single point of truth for
        redemption: of several concurrent callers at most one sees a
        matched row.

        :returns: ``True`` when this call cleared the code.
        """
        stmt = (
            update(AuthGrant)
            .where(AuthGrant.id == grant_id, AuthGrant.code == code)
            .values(code=None)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def latest_for(self, owner_id: int, client_id: str) -> AuthGrant | None:
        """Return the most recently created grant for ``owner_id``/``client_id``."""
        stmt = (
            select(AuthGrant)
            .where(AuthGrant.owner_id == owner_id, AuthGrant.client_id == client_id)
            .order_by(AuthGrant.id.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()
