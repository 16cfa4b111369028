"""Physical passport (badge) linking a scan identifier to its owner."""

from __future__ import annotations

from sqlalchemy import Boolean, Integer, false
from sqlalchemy.orm import Mapped, mapped_column

from idserver.core.database import Base

from .base import PKMixin, ReprMixin


class Passport(PKMixin, ReprMixin, Base):
    """
    Badge record consulted by the presence-gated consent check.

    Fields
    ------
    id : int
        Badge identifier; also the key of its presence signal.
    owner_id : int
        Owner identity exposed to clients once authorized.
    activated : bool
        Provisioning flag; presence signals of inactive passports are ignored.
    """

    __tablename__ = "passports"

    owner_id: Mapped[int] = mapped_column(Integer, nullable=False)
    activated: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
