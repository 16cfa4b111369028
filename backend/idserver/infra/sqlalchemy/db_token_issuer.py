# idserver/infra/sqlalchemy/db_token_issuer.py
from __future__ import annotations

from datetime import timedelta

from idserver.models.base import as_utc
from idserver.models.token import AuthToken
from idserver.services._shared.base import BaseService
from idserver.services._shared.errors import NotFoundError, TokenExpired, UnsupportedGrantType
from idserver.services._shared.ports import TokenIssuer, generate_secret
from idserver.services.oauth.dto import Grant, IssuedToken

from .grant_code_authorizer import grant_from_row

DEFAULT_TOKEN_TTL = timedelta(days=30)


class SQLAlchemyTokenIssuer(BaseService, TokenIssuer):
    """
    Opaque bearer tokens persisted in ``auth_tokens``.

    Each token references the grant row it was issued from; recovering a
    token is a single join.
    """

    def __init__(self, *, ttl: timedelta = DEFAULT_TOKEN_TTL, **kwargs) -> None:
        super().__init__(**kwargs)
        self.ttl = ttl

    async def issue(self, grant: Grant) -> IssuedToken:
        until = self.now_utc() + self.ttl
        async with self.rw_uow() as uow:
            row = await uow.grants.latest_for(int(grant.owner_id), grant.client_id)
            if row is None:
                raise NotFoundError("AuthGrant", f"{grant.owner_id}/{grant.client_id}")
            token = generate_secret()
            await uow.tokens.add(AuthToken(grant_id=row.id, token=token, until=until))
        return IssuedToken(token=token, until=until)

    async def recover(self, token: str) -> Grant | None:
        async with self.ro_uow() as uow:
            row = await uow.tokens.get_with_grant(token)
            if row is None:
                return None
            if row.is_expired(self.now_utc()):
                raise TokenExpired()
            grant = grant_from_row(row.grant)
            until = as_utc(row.until)
        # The token's own expiry supersedes the code expiry stored on the grant.
        return Grant(
            owner_id=grant.owner_id,
            client_id=grant.client_id,
            scope=grant.scope,
            redirect_uri=grant.redirect_uri,
            until=until,
        )

    async def refresh(self, refresh_token: str, grant: Grant) -> IssuedToken:
        raise UnsupportedGrantType()
