# idserver/services/consent/dto.py
from __future__ import annotations

from dataclasses import dataclass

from idserver.services.oauth.dto import ConsentIn, PreGrant


@dataclass(frozen=True, slots=True)
class Solicitation:
    """
    Everything a consent gate may look at to reach a decision.

    :param pre_grant: Request already validated against the client registry.
    :param consent: Owner-supplied parameters; empty on the initial ``GET``.
    """

    pre_grant: PreGrant
    consent: ConsentIn = ConsentIn()


@dataclass(frozen=True, slots=True)
class Authorized:
    """The owner approved; ``owner_id`` is the identity exposed to the client."""

    owner_id: str


@dataclass(frozen=True, slots=True)
class Denied:
    """The owner explicitly refused."""


@dataclass(frozen=True, slots=True)
class InProgress:
    """The decision needs another round trip; send the user agent to ``location``."""

    location: str


Decision = Authorized | Denied | InProgress
