# tests/unit/infra/test_jwt_token_issuer.py
"""
Signed (ES256) access tokens through Flask-JWT-Extended.

Each test runs inside an app context of a bare Flask app carrying the JWT
settings (see ``make_jwt_app`` in conftest).
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest
from idserver.infra.jwt.flask_jwt_token_issuer import JWTTokenIssuer
from idserver.services._shared.errors import (
    TokenAudienceUnknown,
    TokenExpired,
    TokenInvalid,
    TokenInvalidSignature,
    UnsupportedGrantType,
)
from idserver.services.oauth.dto import Grant, Scope
from tests.helpers.utils import make_jwt_app


def _grant(now, client_id="dashboard") -> Grant:
    return Grant(
        owner_id="42",
        client_id=client_id,
        scope=Scope.parse("user:read"),
        redirect_uri="https://dash.purduehackers.com/api/callback",
        until=now + timedelta(minutes=10),
    )


@pytest.fixture
def issuer(registry) -> JWTTokenIssuer:
    return JWTTokenIssuer(registry)


async def test_issue_and_recover_round_trip(jwt_app, issuer, now):
    with jwt_app.app_context():
        issued = await issuer.issue(_grant(now))
        grant = await issuer.recover(issued.token)

    assert issued.token_type == "bearer"
    assert grant.owner_id == "42"
    assert grant.client_id == "dashboard"
    assert grant.scope == Scope.parse("user:read")
    assert grant.redirect_uri == "https://dash.purduehackers.com/api/callback"
    assert abs((grant.until - issued.until).total_seconds()) < 1


async def test_claims_carry_the_grant(jwt_app, issuer, signing_keys, now):
    with jwt_app.app_context():
        issued = await issuer.issue(_grant(now))

    header = jwt.get_unverified_header(issued.token)
    claims = jwt.decode(
        issued.token,
        signing_keys.public_pem,
        algorithms=["ES256"],
        audience="dashboard",
        issuer="id",
    )
    assert header["alg"] == "ES256"
    assert claims["sub"] == "42"
    assert claims["aud"] == "dashboard"
    assert claims["scope"] == "user:read"
    assert claims["exp"] - claims["iat"] == int(timedelta(days=30).total_seconds())


async def test_forged_signature_rejected(jwt_app, issuer, other_signing_keys, registry, now):
    forger = make_jwt_app(other_signing_keys, registry)
    with forger.app_context():
        forged = await issuer.issue(_grant(now))

    with jwt_app.app_context(), pytest.raises(TokenInvalidSignature):
        await issuer.recover(forged.token)


async def test_unregistered_audience_rejected(jwt_app, issuer, now):
    with jwt_app.app_context():
        issued = await issuer.issue(_grant(now, client_id="stranger"))
        with pytest.raises(TokenAudienceUnknown):
            await issuer.recover(issued.token)


async def test_recovered_31_days_later_is_expired(jwt_app, registry):
    past = datetime.now(UTC) - timedelta(days=31)
    old_issuer = JWTTokenIssuer(registry, clock=lambda: past)
    with jwt_app.app_context():
        issued = await old_issuer.issue(_grant(past))
        with pytest.raises(TokenExpired):
            await JWTTokenIssuer(registry).recover(issued.token)


async def test_wrong_issuer_rejected(jwt_app, issuer, signing_keys):
    now = datetime.now(UTC)
    token = jwt.encode(
        {
            "sub": "42",
            "iss": "someone-else",
            "aud": "dashboard",
            "scope": "user:read",
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(days=1)).timestamp()),
        },
        signing_keys.private_pem,
        algorithm="ES256",
    )
    with jwt_app.app_context(), pytest.raises(TokenInvalid):
        await issuer.recover(token)


@pytest.mark.parametrize("token", ["garbage", "a.b.c", ""])
async def test_malformed_tokens_rejected(jwt_app, issuer, token):
    with jwt_app.app_context(), pytest.raises(TokenInvalid):
        await issuer.recover(token)


async def test_refresh_unsupported(issuer, now):
    with pytest.raises(UnsupportedGrantType):
        await issuer.refresh("anything", _grant(now))
