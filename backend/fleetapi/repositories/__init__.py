"""Persistence-only repositories (no commits, no business rules)."""

from __future__ import annotations

from .owner import CityRepository, OwnerRepository
from .refresh_token import RefreshTokenRepository
from .user import RoleRepository, UserRepository

__all__ = [
    "CityRepository",
    "OwnerRepository",
    "RefreshTokenRepository",
    "RoleRepository",
    "UserRepository",
]
