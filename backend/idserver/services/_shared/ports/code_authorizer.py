from __future__ import annotations

import asyncio
import secrets
import string
from typing import Protocol

from idserver.services.oauth.dto import Grant

CODE_ALPHABET = string.ascii_letters + string.digits
CODE_LENGTH = 32


def generate_secret(length: int = CODE_LENGTH) -> str:
    """Return a cryptographically random alphanumeric string."""
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


class CodeAuthorizer(Protocol):
    """
    Issues and redeems single-use authorization codes.

    ``extract`` MUST be atomic: a code redeems to its grant exactly once.
    """

    async def authorize(self, grant: Grant) -> str:
        """Persist ``grant`` and return the code bound to it."""
        ...

    async def extract(self, code: str) -> Grant | None:
        """Redeem ``code``; ``None`` when unknown or already used."""
        ...


class InMemoryCodeAuthorizer(CodeAuthorizer):
    """Dictionary-backed authorizer for unit tests."""

    def __init__(self) -> None:
        self._grants: dict[str, Grant] = {}
        self._lock = asyncio.Lock()

    async def authorize(self, grant: Grant) -> str:
        code = generate_secret()
        async with self._lock:
            self._grants[code] = grant
        return code

    async def extract(self, code: str) -> Grant | None:
        async with self._lock:
            return self._grants.pop(code, None)
