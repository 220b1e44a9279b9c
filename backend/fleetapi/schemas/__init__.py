"""Marshmallow schemas for request validation and response serialization."""

from __future__ import annotations

from .auth import (
    AuthResultSchema,
    LoginSchema,
    OwnerSummarySchema,
    RefreshTokenSchema,
    RegisterOwnerSchema,
    UserProfileSchema,
)

__all__ = [
    "AuthResultSchema",
    "LoginSchema",
    "OwnerSummarySchema",
    "RefreshTokenSchema",
    "RegisterOwnerSchema",
    "UserProfileSchema",
]
