# idserver/services/consent/service.py
"""Consent gates deciding whether an authorization request may proceed."""

from __future__ import annotations

import logging
from typing import Protocol
from urllib.parse import urlencode

from idserver.services._shared.base import BaseService
from idserver.services._shared.errors import (
    OwnerNotActivated,
    OwnerNotFound,
    PresenceNotReady,
    PresenceNotRecorded,
)
from idserver.services._shared.ports.presence_store import PresenceStore
from idserver.services.consent.dto import (
    Authorized,
    Decision,
    Denied,
    InProgress,
    Solicitation,
)

log = logging.getLogger(__name__)

DEFAULT_LOGIN_URL = "https://id.purduehackers.com/authorize"

# Passport ids are 32-bit signed integer keys.
MAX_BADGE_ID = 2**31 - 1


class ConsentGate(Protocol):
    async def decide(self, solicitation: Solicitation) -> Decision: ...


class PresenceConsentGate(BaseService):
    """
    Approve only owners whose activated passport was just scanned.

    The presence signal is consumed before the ``allow`` flag is looked at,
    so a scan is spent even when the owner declines.

    :raises OwnerNotFound: No badge id supplied, an id outside the key range,
        or no passport with that id.
    :raises OwnerNotActivated: Passport exists but is not activated.
    :raises PresenceNotRecorded: No scan event waiting for the badge.
    :raises PresenceNotReady: Scan event present but flagged not ready.
    """

    def __init__(self, presence: PresenceStore, **kwargs) -> None:
        super().__init__(**kwargs)
        self._presence = presence

    async def decide(self, solicitation: Solicitation) -> Decision:
        badge_id = solicitation.consent.owner_id
        if badge_id is None or not 0 < badge_id <= MAX_BADGE_ID:
            raise OwnerNotFound()

        async with self.ro_uow() as uow:
            passport = await uow.passports.get(badge_id)
            if passport is None:
                raise OwnerNotFound()
            if not passport.activated:
                raise OwnerNotActivated()
            owner_id = passport.owner_id

        ready = await self._presence.consume(badge_id)
        if ready is None:
            raise PresenceNotRecorded()
        if not ready:
            raise PresenceNotReady()

        if not solicitation.consent.allow:
            return Denied()

        log.info(
            "consent.authorized",
            extra={"client_id": solicitation.pre_grant.client_id, "owner_id": owner_id},
        )
        return Authorized(owner_id=str(owner_id))


class InteractiveConsentGate:
    """Hand the user agent over to the login surface; never decides by itself."""

    def __init__(self, login_url: str = DEFAULT_LOGIN_URL) -> None:
        self._login_url = login_url

    async def decide(self, solicitation: Solicitation) -> Decision:
        pre_grant = solicitation.pre_grant
        params = {
            "client_id": pre_grant.client_id,
            "redirect_uri": pre_grant.redirect_uri,
            "scope": str(pre_grant.scope),
            "response_type": "code",
        }
        if pre_grant.state is not None:
            params["state"] = pre_grant.state
        sep = "&" if "?" in self._login_url else "?"
        return InProgress(location=f"{self._login_url}{sep}{urlencode(params)}")


class VacantConsentGate:
    # Resource checks never solicit consent.
    async def decide(self, solicitation: Solicitation) -> Decision:
        owner_id = solicitation.consent.owner_id
        return Authorized(owner_id="" if owner_id is None else str(owner_id))
