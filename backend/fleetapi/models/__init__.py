"""SQLAlchemy models registered on the shared metadata."""

from __future__ import annotations

from .owner import City, Country, Owner
from .refresh_token import RefreshToken
from .user import Role, SystemRoles, User, user_roles

__all__ = [
    "City",
    "Country",
    "Owner",
    "RefreshToken",
    "Role",
    "SystemRoles",
    "User",
    "user_roles",
]
