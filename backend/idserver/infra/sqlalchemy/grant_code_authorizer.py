# idserver/infra/sqlalchemy/grant_code_authorizer.py
from __future__ import annotations

import logging

from idserver.models.base import as_utc
from idserver.models.grant import AuthGrant
from idserver.services._shared.base import BaseService
from idserver.services._shared.ports import CodeAuthorizer, generate_secret
from idserver.services.oauth.dto import Grant, Scope

log = logging.getLogger(__name__)


def grant_from_row(row: AuthGrant) -> Grant:
    return Grant(
        owner_id=str(row.owner_id),
        client_id=row.client_id,
        scope=Scope.parse(row.scope),
        redirect_uri=row.redirect_uri,
        until=as_utc(row.until),
    )


class SQLAlchemyCodeAuthorizer(BaseService, CodeAuthorizer):
    """
    Relational code authorizer backed by the ``auth_grants`` table.

    Redemption relies on a conditional ``UPDATE ... WHERE id = :id AND
    code = :code``; of two concurrent redemptions only the one whose update
    matched a row gets the grant back.
    """

    async def authorize(self, grant: Grant) -> str:
        code = generate_secret()
        async with self.rw_uow() as uow:
            await uow.grants.add(
                AuthGrant(
                    owner_id=int(grant.owner_id),
                    client_id=grant.client_id,
                    redirect_uri=grant.redirect_uri,
                    scope=str(grant.scope),
                    until=grant.until,
                    code=code,
                )
            )
        return code

    async def extract(self, code: str) -> Grant | None:
        async with self.rw_uow() as uow:
            row = await uow.grants.get_by_code(code)
            if row is None:
                return None
            grant = grant_from_row(row)
            consumed = await uow.grants.consume_code(row.id, code)
        if not consumed:
            log.warning("authorization.code_race_lost", extra={"client_id": grant.client_id})
            return None
        return grant
