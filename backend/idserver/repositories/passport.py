"""Read access to provisioned passports."""

from __future__ import annotations

from idserver.models.passport import Passport

from .base import BaseRepository


class PassportRepository(BaseRepository[Passport]):
    model = Passport
