# idserver/services/oauth/dto.py
from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from urllib.parse import urlsplit, urlunsplit

# RFC 6749 §3.3: scope-token = 1*( %x21 / %x23-5B / %x5D-7E )
_SCOPE_TOKEN = re.compile(r"^[\x21\x23-\x5b\x5d-\x7e]+$")

_DEFAULT_PORTS = {"http": 80, "https": 443}


# ------------------------------ Value objects ------------------------------ #


@dataclass(frozen=True, slots=True)
class Scope:
    """
    Set of space-delimited scope tokens.

    :param tokens: Individual scope tokens (e.g. ``{"user:read", "user"}``).
    :type tokens: frozenset[str]
    """

    tokens: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def parse(cls, raw: str | Iterable[str]) -> Scope:
        """
        Parse a space-delimited scope string.

        :raises ValueError: If a token contains characters outside RFC 6749 §3.3.
        """
        parts = raw.split() if isinstance(raw, str) else list(raw)
        for token in parts:
            if not _SCOPE_TOKEN.match(token):
                raise ValueError(f"Invalid scope token: {token!r}")
        return cls(frozenset(parts))

    def allows(self, required: Scope) -> bool:
        """Return ``True`` when every token of ``required`` is part of this scope."""
        return required.tokens <= self.tokens

    def __str__(self) -> str:
        return " ".join(sorted(self.tokens))

    def __bool__(self) -> bool:
        return bool(self.tokens)


def normalize_redirect_uri(uri: str) -> str:
    """
    Return a canonical form of ``uri`` for semantic comparison.

    Scheme and host are lower-cased, default ports dropped and an empty path
    on ``http``/``https`` URLs becomes ``/``. Custom schemes such as
    ``authority://callback`` keep their path untouched.

    :raises ValueError: If the authority is malformed (non-numeric or
        out-of-range port, unbalanced IPv6 brackets).
    """
    parts = urlsplit(uri.strip())
    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    netloc = host
    if parts.username or parts.password:
        userinfo = parts.username or ""
        if parts.password:
            userinfo = f"{userinfo}:{parts.password}"
        netloc = f"{userinfo}@{netloc}"
    if parts.port is not None and _DEFAULT_PORTS.get(scheme) != parts.port:
        netloc = f"{netloc}:{parts.port}"
    path = parts.path
    if scheme in _DEFAULT_PORTS and not path:
        path = "/"
    return urlunsplit((scheme, netloc, path, parts.query, parts.fragment))


def same_redirect_uri(left: str, right: str) -> bool:
    """Compare two redirect URIs semantically; a malformed one matches nothing."""
    try:
        return normalize_redirect_uri(left) == normalize_redirect_uri(right)
    except ValueError:
        return False


@dataclass(frozen=True, slots=True)
class Client:
    """
    Registered (public) client application.

    :param client_id: Unique client identifier.
    :param redirect_uri: The single registered redirect URI.
    :param scope: Scope granted to the client.
    """

    client_id: str
    redirect_uri: str
    scope: Scope

    def accepts_redirect(self, uri: str) -> bool:
        return same_redirect_uri(uri, self.redirect_uri)


@dataclass(frozen=True, slots=True)
class PreGrant:
    """Validated authorization request awaiting the owner's consent."""

    client_id: str
    redirect_uri: str
    scope: Scope
    state: str | None = None


@dataclass(frozen=True, slots=True)
class Grant:
    """
    Authorized ``(owner, client, scope, redirect_uri, until)`` tuple.

    :param owner_id: Resource owner identifier (stringified integer).
    :param client_id: Client the grant was issued to.
    :param scope: Authorized scope.
    :param redirect_uri: Redirect URI bound to the grant.
    :param until: Absolute expiry (UTC).
    """

    owner_id: str
    client_id: str
    scope: Scope
    redirect_uri: str
    until: datetime


@dataclass(frozen=True, slots=True)
class IssuedToken:
    """Bearer token handed out by a :class:`TokenIssuer`."""

    token: str
    until: datetime
    token_type: str = "bearer"


# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthorizationIn:
    """
    Authorization request parameters (query string or form body).

    :param client_id: Requesting client.
    :param response_type: Must be ``"code"``.
    :param redirect_uri: Optional redirect URI; defaults to the registered one.
    :param scope: Optional space-delimited scope; defaults to the client's scope.
    :param state: Opaque value echoed back to the client.
    """

    client_id: str
    response_type: str = "code"
    redirect_uri: str | None = None
    scope: str | None = None
    state: str | None = None


@dataclass(frozen=True, slots=True)
class ConsentIn:
    """
    Owner-identifying parameters of the consent submission.

    :param owner_id: Badge (passport) identifier, ``None`` when not supplied.
    :param allow: Explicit allow flag chosen by the owner.
    """

    owner_id: int | None = None
    allow: bool = False


@dataclass(frozen=True, slots=True)
class TokenIn:
    """Token endpoint request (``application/x-www-form-urlencoded`` body)."""

    grant_type: str
    client_id: str | None = None
    code: str | None = None
    redirect_uri: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class FlowRedirect:
    """``303 See Other`` response produced by the authorization endpoint."""

    location: str


@dataclass(frozen=True, slots=True)
class TokenOut:
    """Successful token endpoint response."""

    access_token: str
    expires_in: int
    scope: str
    token_type: str = "bearer"
