"""Convenience exports for application schemas."""

from __future__ import annotations

from .oauth import (
    AuthorizationQuerySchema,
    ConsentQuerySchema,
    ResourceOwnerSchema,
    TokenRequestSchema,
    TokenResponseSchema,
)

__all__ = [
    "AuthorizationQuerySchema",
    "ConsentQuerySchema",
    "ResourceOwnerSchema",
    "TokenRequestSchema",
    "TokenResponseSchema",
]
