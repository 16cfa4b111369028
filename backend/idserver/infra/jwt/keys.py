"""Signing key material for the ES256 access tokens."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from jwt.algorithms import ECAlgorithm
from jwt.exceptions import InvalidKeyError

from idserver.services._shared.errors import ConfigurationError

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SigningKeys:
    """PEM-encoded key pair handed to flask-jwt-extended."""

    private_pem: str
    public_pem: str


def _to_pem(private_key: ec.EllipticCurvePrivateKey) -> SigningKeys:
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = (
        private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )
    return SigningKeys(private_pem=private_pem, public_pem=public_pem)


def _require_p256(key: ec.EllipticCurvePrivateKey, source: str) -> None:
    if key.curve.name != "secp256r1":
        raise ConfigurationError(f"{source} must be a P-256 key, got curve {key.curve.name}")


def generate_keys() -> SigningKeys:
    return _to_pem(ec.generate_private_key(ec.SECP256R1()))


def keys_from_jwk(jwk: str) -> SigningKeys:
    """
    Load a P-256 private key from its JWK JSON representation.

    :raises ConfigurationError: When the JWK is malformed, not a private EC
        key, or on a curve other than P-256.
    """
    try:
        key = ECAlgorithm.from_jwk(jwk)
    except (InvalidKeyError, ValueError) as exc:
        raise ConfigurationError(f"JWK is not a valid EC key: {exc}") from exc
    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise ConfigurationError("JWK must contain the private component ('d')")
    _require_p256(key, "JWK")
    return _to_pem(key)


def keys_from_pem(private_pem: str, public_pem: str | None = None) -> SigningKeys:
    try:
        key = serialization.load_pem_private_key(private_pem.encode(), password=None)
    except (ValueError, TypeError) as exc:
        raise ConfigurationError(f"JWT_PRIVATE_KEY is not a valid PEM key: {exc}") from exc
    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise ConfigurationError("JWT_PRIVATE_KEY must be an EC (P-256) key")
    _require_p256(key, "JWT_PRIVATE_KEY")
    keys = _to_pem(key)
    if public_pem:
        return SigningKeys(private_pem=keys.private_pem, public_pem=public_pem)
    return keys


def resolve_signing_keys(
    *,
    jwk: str | None,
    private_pem: str | None,
    public_pem: str | None,
    allow_ephemeral: bool,
) -> SigningKeys:
    """
    Pick the signing keys from configuration.

    Precedence: ``JWK``, then ``JWT_PRIVATE_KEY`` (+ optional
    ``JWT_PUBLIC_KEY``). Without either an ephemeral key is generated when
    ``allow_ephemeral`` is set; tokens then die with the process.

    :raises ConfigurationError: No key configured and ephemeral keys disallowed.
    """
    if jwk:
        return keys_from_jwk(jwk)
    if private_pem:
        return keys_from_pem(private_pem, public_pem)
    if not allow_ephemeral:
        raise ConfigurationError("No signing key configured (set JWK or JWT_PRIVATE_KEY)")
    log.warning("jwt.ephemeral_key")
    return generate_keys()
