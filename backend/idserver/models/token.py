"""Opaque access token issued by the relational token strategy."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from idserver.core.database import Base

from .base import ExpiryMixin, PKMixin, ReprMixin
from .grant import AuthGrant


class AuthToken(PKMixin, ExpiryMixin, ReprMixin, Base):
    """
    Bearer token row referencing the grant it proves.

    Fields
    ------
    grant_id : int
        Parent :class:`AuthGrant`.
    token : str
        Random opaque token value.
    until : datetime
        Token expiry (from mixin).
    """

    __tablename__ = "auth_tokens"

    grant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("auth_grants.id", ondelete="CASCADE"),
        nullable=False,
    )
    token: Mapped[str] = mapped_column(String(64), nullable=False)

    grant: Mapped[AuthGrant] = relationship(lazy="raise")

    __table_args__ = (UniqueConstraint("token", name="uq_auth_tokens_token"),)
