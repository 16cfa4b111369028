"""Persisted authorization grant paired with a single-use code."""

from __future__ import annotations

from sqlalchemy import Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from idserver.core.database import Base

from .base import ExpiryMixin, PKMixin, ReprMixin


class AuthGrant(PKMixin, ExpiryMixin, ReprMixin, Base):
    """
    Grant authorized by a resource owner for a client.

    Fields
    ------
    owner_id : int
        Owner the grant was issued for.
    client_id : str
        Registered client identifier.
    redirect_uri : str
        Redirect URI the code was delivered to.
    scope : str
        Space-delimited authorized scope.
    until : datetime
        Expiry of the authorization code (from mixin).
    code : str | None
        Single-use authorization code; cleared on first redemption.
    """

    __tablename__ = "auth_grants"

    owner_id: Mapped[int] = mapped_column(Integer, nullable=False)
    client_id: Mapped[str] = mapped_column(String(64), nullable=False)
    redirect_uri: Mapped[str] = mapped_column(Text, nullable=False)
    scope: Mapped[str] = mapped_column(Text, nullable=False)
    code: Mapped[str | None] = mapped_column(String(64), nullable=True)

    __table_args__ = (
        UniqueConstraint("code", name="uq_auth_grants_code"),
        Index("ix_auth_grants_owner_id_client_id", "owner_id", "client_id"),
    )
