# idserver/infra/jwt/flask_jwt_token_issuer.py
from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, cast

import jwt
from flask_jwt_extended.exceptions import JWTExtendedException

from idserver.services._shared.base import Clock, utc_now
from idserver.services._shared.errors import (
    TokenAudienceUnknown,
    TokenExpired,
    TokenInvalid,
    TokenInvalidSignature,
    UnsupportedGrantType,
)
from idserver.services._shared.ports import TokenIssuer
from idserver.services.oauth.dto import Grant, IssuedToken, Scope
from idserver.services.oauth.registry import ClientRegistry

DEFAULT_TOKEN_TTL = timedelta(days=30)


class JWTTokenIssuer(TokenIssuer):
    """
    Self-contained ES256 access tokens via Flask-JWT-Extended.

    The grant travels inside the token (``sub``, ``aud``, ``scope``, ``exp``);
    nothing is persisted. Issuer, audience list, algorithm and keys come from
    the Flask config, so an active app context is required.

    .. note::
       ``iat``/``exp`` are computed from the injected clock and passed as
       claim overrides so expiry is reproducible in tests.
    """

    def __init__(
        self,
        registry: ClientRegistry,
        *,
        ttl: timedelta = DEFAULT_TOKEN_TTL,
        clock: Clock | None = None,
    ) -> None:
        self.registry = registry
        self.ttl = ttl
        self._clock = clock or utc_now

    async def issue(self, grant: Grant) -> IssuedToken:
        from flask_jwt_extended import create_access_token

        issued_at = self._clock()
        until = issued_at + self.ttl
        token = cast(
            str,
            create_access_token(
                identity=grant.owner_id,
                additional_claims={
                    "aud": grant.client_id,
                    "scope": str(grant.scope),
                    "iat": int(issued_at.timestamp()),
                    "exp": int(until.timestamp()),
                },
                expires_delta=self.ttl,
            ),
        )
        return IssuedToken(token=token, until=until)

    def decode(self, token: str) -> dict[str, Any]:
        from flask_jwt_extended import decode_token

        try:
            return cast(dict[str, Any], decode_token(token))
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired() from exc
        except jwt.InvalidAudienceError as exc:
            raise TokenAudienceUnknown() from exc
        except jwt.InvalidSignatureError as exc:
            raise TokenInvalidSignature() from exc
        except (jwt.InvalidTokenError, JWTExtendedException) as exc:
            raise TokenInvalid() from exc

    async def recover(self, token: str) -> Grant | None:
        claims = self.decode(token)
        client = self.registry.lookup(str(claims.get("aud", "")))
        if client is None:
            raise TokenAudienceUnknown()
        try:
            scope = Scope.parse(str(claims.get("scope", "")))
        except ValueError as exc:
            raise TokenInvalid() from exc
        return Grant(
            owner_id=str(claims["sub"]),
            client_id=client.client_id,
            scope=scope,
            redirect_uri=client.redirect_uri,
            until=datetime.fromtimestamp(int(claims["exp"]), tz=UTC),
        )

    async def refresh(self, refresh_token: str, grant: Grant) -> IssuedToken:
        raise UnsupportedGrantType()
