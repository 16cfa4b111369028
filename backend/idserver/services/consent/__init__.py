"""Consent gates and their decision types."""

from .dto import Authorized, Decision, Denied, InProgress, Solicitation
from .service import (
    ConsentGate,
    InteractiveConsentGate,
    PresenceConsentGate,
    VacantConsentGate,
)

__all__ = [
    "Authorized",
    "ConsentGate",
    "Decision",
    "Denied",
    "InProgress",
    "InteractiveConsentGate",
    "PresenceConsentGate",
    "Solicitation",
    "VacantConsentGate",
]
