"""Repository package exposing persistence-layer access for all models."""

from __future__ import annotations

from idserver.repositories.base import BaseRepository
from idserver.repositories.grant import GrantRepository
from idserver.repositories.passport import PassportRepository
from idserver.repositories.token import TokenRepository

__all__ = [
    "BaseRepository",
    "GrantRepository",
    "PassportRepository",
    "TokenRepository",
]
