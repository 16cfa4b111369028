"""Reusable SQLAlchemy mixins and column helpers shared by models (typed 2.0)."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column


def as_utc(value: datetime) -> datetime:
    """Label naive datetimes (SQLite drops tzinfo) as UTC without shifting them."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class PKMixin:
    """Expose an integer surrogate primary key column named ``id``."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True)


class ExpiryMixin:
    """Provide the ``until`` expiry column shared by grants and tokens.

    Attributes
    ----------
    until:
        Timezone-aware instant after which the row no longer proves anything.
    """

    until: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def is_expired(self, now: datetime) -> bool:
        return as_utc(self.until) <= as_utc(now)


class ReprMixin:
    """Provide a concise ``__repr__`` including the class name and id."""

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        key = getattr(self, "id", None)
        return f"<{cls} id={key}>"
