"""
Service-layer error taxonomy.

Nothing here knows about Flask. Adapters raise these, services let them
propagate, and the API layer renders them: OAuth errors carry the RFC 6749 /
RFC 6750 ``error`` code they surface as, everything else goes through
``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """Root of every error raised below the HTTP layer."""


class ConfigurationError(ServiceError):
    """Raised when deployment configuration is missing or malformed."""


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    A row the use case depends on does not exist.

    :param entity: Entity name (e.g., "AuthGrant").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    A unique constraint rejected the write.

    :param entity: Entity name (e.g., "AuthToken").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:  # pragma: no cover
        return f"Conflict on {self.entity}: {self.detail}"


class StorageUnavailable(ServiceError):
    """
    Raised when the relational or key-value store cannot serve a request.

    Codes and presence signals are single-use, so callers must never retry
    the step that failed; the user-facing flow has to restart.
    """

    def __init__(self, message: str = "Storage unavailable") -> None:
        super().__init__(message)


# --------------------------------------------------------------------------- #
# OAuth protocol errors
# --------------------------------------------------------------------------- #


class OAuthError(ServiceError):
    """Base class for errors that map onto an OAuth ``error`` code."""

    error = "invalid_request"
    default_message = "Invalid request"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def description(self) -> str:
        return str(self)


class InvalidRequest(OAuthError):
    default_message = "Malformed or missing request parameters"


class ClientNotRegistered(OAuthError):
    error = "invalid_client"
    default_message = "Client is not registered"


class RedirectMismatch(OAuthError):
    default_message = "Redirect URI does not match the registered one"


class ScopeNotGranted(OAuthError):
    error = "invalid_scope"
    default_message = "Requested scope exceeds the scope granted to the client"


class UnsupportedGrantType(OAuthError):
    error = "unsupported_grant_type"
    default_message = "Only the authorization_code grant is supported"


class CodeInvalidOrConsumed(OAuthError):
    error = "invalid_grant"
    default_message = "Authorization code is invalid, expired or already used"


# --------------------------------------------------------------------------- #
# Consent / presence errors (all surface as ``access_denied``)
# --------------------------------------------------------------------------- #


class ConsentError(OAuthError):
    """
    Resource owner did not authorize the request.

    Subclasses record *why* for the server logs only; clients always see a
    bare ``access_denied``.
    """

    error = "access_denied"
    default_message = "Access denied"

    @property
    def reason(self) -> str:
        return type(self).__name__


class ConsentDenied(ConsentError):
    default_message = "Resource owner denied the request"


class OwnerNotFound(ConsentError):
    default_message = "No passport found for the given identifier"


class OwnerNotActivated(ConsentError):
    default_message = "Passport is not activated"


class PresenceNotRecorded(ConsentError):
    default_message = "Passport has not been scanned"


class PresenceNotReady(ConsentError):
    default_message = "Passport not ready for authorization"


# --------------------------------------------------------------------------- #
# Bearer token errors (RFC 6750)
# --------------------------------------------------------------------------- #


class TokenError(OAuthError):
    """Base class for bearer token validation failures."""

    error = "invalid_token"
    default_message = "Invalid access token"


class TokenMissing(TokenError):
    # RFC 6750 §3.1: no error code when the request lacks credentials.
    error = ""
    default_message = "Bearer token required"


class TokenInvalid(TokenError):
    pass


class TokenInvalidSignature(TokenInvalid):
    default_message = "Access token signature is invalid"


class TokenExpired(TokenError):
    default_message = "Access token has expired"


class TokenAudienceUnknown(TokenError):
    default_message = "Access token audience is not a registered client"


class InsufficientScope(OAuthError):
    error = "insufficient_scope"
    default_message = "Access token does not grant the required scope"
