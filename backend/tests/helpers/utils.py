"""Tiny helpers shared across test modules."""

from __future__ import annotations

from flask import Flask
from flask_jwt_extended import JWTManager
from idserver.services.oauth.registry import ClientRegistry


def make_jwt_app(keys, registry: ClientRegistry) -> Flask:
    """Bare Flask app carrying only the JWT settings the token issuer reads.

    Parameters
    ----------
    keys: SigningKeys
        PEM key pair used to sign and verify.
    registry: ClientRegistry
        Registered clients; their ids form the accepted audiences.
    """
    app = Flask("jwt-test")
    app.config.update(
        JWT_ALGORITHM="ES256",
        JWT_PRIVATE_KEY=keys.private_pem,
        JWT_PUBLIC_KEY=keys.public_pem,
        JWT_ENCODE_ISSUER="id",
        JWT_DECODE_ISSUER="id",
        JWT_ENCODE_NBF=False,
        JWT_DECODE_AUDIENCE=registry.client_ids(),
    )
    JWTManager(app)
    return app


# Badge and owner provisioned by the endpoint fixtures.
BADGE_ID = 5
OWNER_ID = 42
PRESENCE_PREFIX = "presence:"
