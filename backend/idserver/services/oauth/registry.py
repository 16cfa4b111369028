"""Static registry of the client applications allowed to request grants."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from idserver.services._shared.errors import (
    ClientNotRegistered,
    ConfigurationError,
    RedirectMismatch,
    ScopeNotGranted,
)
from idserver.services.oauth.dto import Client, PreGrant, Scope


@dataclass(frozen=True, slots=True)
class ClientData:
    """Raw configuration entry for a registered client."""

    client_id: str
    url: str
    scope: str


DEFAULT_CLIENTS: tuple[ClientData, ...] = (
    ClientData("dashboard", "https://dash.purduehackers.com/api/callback", "user:read"),
    ClientData("passports", "https://passports.purduehackers.com/callback", "user:read user"),
    ClientData("authority", "authority://callback", "admin:read admin"),
    ClientData(
        "auth-test",
        "https://id-auth.purduehackers.com/api/auth/callback/purduehackers-id",
        "user:read",
    ),
    ClientData(
        "vulcan-auth",
        "https://auth.purduehackers.com/source/oauth/callback/purduehackers-id/",
        "user:read",
    ),
    ClientData(
        "shad-moe",
        "https://auth.shad.moe/source/oauth/callback/purduehackers-id/",
        "user:read",
    ),
    ClientData("shquid", "https://www.imsqu.id/auth/callback/purduehackers-id", "user:read"),
)


def parse_client_data(raw: str | Iterable[Mapping[str, Any] | ClientData]) -> tuple[ClientData, ...]:
    """
    Coerce a configuration value into :class:`ClientData` entries.

    Accepts a JSON array of ``{"client_id", "redirect_uri", "scope"}`` objects,
    or an iterable of such mappings / ``ClientData`` instances.

    :raises ConfigurationError: On malformed JSON or missing keys.
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"OAUTH_CLIENTS is not valid JSON: {exc}") from exc
        if not isinstance(raw, list):
            raise ConfigurationError("OAUTH_CLIENTS must be a JSON array")

    entries: list[ClientData] = []
    for item in raw:
        if isinstance(item, ClientData):
            entries.append(item)
            continue
        try:
            entries.append(
                ClientData(
                    client_id=str(item["client_id"]),
                    url=str(item.get("redirect_uri") or item["url"]),
                    scope=str(item["scope"]),
                )
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise ConfigurationError(f"Malformed client entry: {item!r}") from exc
    return tuple(entries)


class ClientRegistry:
    """
    Immutable ``client_id → Client`` lookup.

    The registry never changes after construction; requests only read it.
    """

    def __init__(self, clients: Iterable[ClientData] = DEFAULT_CLIENTS) -> None:
        registered: dict[str, Client] = {}
        for entry in clients:
            if entry.client_id in registered:
                raise ConfigurationError(f"Duplicate client_id: {entry.client_id}")
            try:
                scope = Scope.parse(entry.scope)
            except ValueError as exc:
                raise ConfigurationError(f"Invalid scope for {entry.client_id}: {exc}") from exc
            registered[entry.client_id] = Client(
                client_id=entry.client_id,
                redirect_uri=entry.url,
                scope=scope,
            )
        self._clients: Mapping[str, Client] = registered

    @classmethod
    def from_config(cls, value: Any) -> ClientRegistry:
        """Build a registry from the ``OAUTH_CLIENTS`` setting (``None`` → defaults)."""
        if value is None or value == "":
            return cls(DEFAULT_CLIENTS)
        return cls(parse_client_data(value))

    def lookup(self, client_id: str) -> Client | None:
        return self._clients.get(client_id)

    def client_ids(self) -> list[str]:
        return list(self._clients)

    def __len__(self) -> int:
        return len(self._clients)

    def check(
        self,
        client_id: str,
        redirect_uri: str | None = None,
        scope: str | None = None,
        state: str | None = None,
    ) -> PreGrant:
        """
        Validate an authorization request against the registration.

        A missing ``redirect_uri`` falls back to the registered one; a missing
        ``scope`` requests the client's full scope.

        :raises ClientNotRegistered: Unknown ``client_id``.
        :raises RedirectMismatch: ``redirect_uri`` differs from the registered one.
        :raises ScopeNotGranted: Malformed scope or not a subset of the granted scope.
        """
        client = self.lookup(client_id)
        if client is None:
            raise ClientNotRegistered()

        if redirect_uri and not client.accepts_redirect(redirect_uri):
            raise RedirectMismatch()

        if scope is None or not scope.strip():
            requested = client.scope
        else:
            try:
                requested = Scope.parse(scope)
            except ValueError as exc:
                raise ScopeNotGranted(str(exc)) from exc
            if not client.scope.allows(requested):
                raise ScopeNotGranted()

        return PreGrant(
            client_id=client.client_id,
            redirect_uri=client.redirect_uri,
            scope=requested,
            state=state,
        )
