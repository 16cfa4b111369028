from __future__ import annotations

from typing import Protocol

from idserver.services.oauth.dto import Grant, IssuedToken


class TokenIssuer(Protocol):
    """
    Port for minting bearer tokens and recovering the grant behind them.

    Refresh tokens are not supported by any implementation; ``refresh``
    always raises :class:`~idserver.services._shared.errors.UnsupportedGrantType`.
    """

    async def issue(self, grant: Grant) -> IssuedToken: ...

    async def recover(self, token: str) -> Grant | None:
        """
        Return the grant proven by ``token``.

        :returns: ``None`` when the token is unknown.
        :raises TokenError: When the token is known to be invalid or expired.
        """
        ...

    async def refresh(self, refresh_token: str, grant: Grant) -> IssuedToken: ...
