"""
idserver.services._shared.ports
===============================

Collection of *ports* (hexagonal interfaces) that define the contracts
for grant and token persistence and for the presence signal store.

Modules
-------
- :mod:`code_authorizer`:
    Defines :class:`~.CodeAuthorizer`: issue and single-use-redeem
    authorization codes.

- :mod:`token_issuer`:
    Defines :class:`~.TokenIssuer`: mint bearer tokens and recover grants.

- :mod:`presence_store`:
    Defines :class:`~.PresenceStore`: atomic read-and-delete of passport
    scan events.

Concrete adapters (Redis, SQLAlchemy, flask-jwt-extended) implement these
interfaces under ``idserver.infra``.
"""

from __future__ import annotations

from .code_authorizer import CODE_LENGTH, CodeAuthorizer, InMemoryCodeAuthorizer, generate_secret
from .presence_store import InMemoryPresenceStore, PresenceStore
from .token_issuer import TokenIssuer

__all__ = [
    "CODE_LENGTH",
    "CodeAuthorizer",
    "InMemoryCodeAuthorizer",
    "InMemoryPresenceStore",
    "PresenceStore",
    "TokenIssuer",
    "generate_secret",
]
