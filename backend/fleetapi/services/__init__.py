"""Service layer public API.

Re-exports
----------
- Base primitive (from ``fleetapi.services._shared.base``)
    * :class:`BaseService`

- Session manager (from ``fleetapi.services.auth``)
    * :class:`AuthService`, :class:`TokenIssuer`, :class:`Principal`
    * DTOs: :class:`RegisterOwnerIn`, :class:`LoginIn`, :class:`RefreshIn`,
      :class:`RevokeIn`, :class:`AuthResult`, :class:`OwnerSummaryOut`,
      :class:`UserProfileOut`
"""

from __future__ import annotations

# Base primitive
from ._shared.base import BaseService

# Session manager + DTOs
from .auth.dto import (
    AuthResult,
    LoginIn,
    OwnerSummaryOut,
    RefreshIn,
    RegisterOwnerIn,
    RevokeIn,
    UserProfileOut,
)
from .auth.service import AuthService
from .auth.tokens import Principal, TokenIssuer

__all__ = [
    # Base
    "BaseService",
    # Auth
    "AuthService",
    "TokenIssuer",
    "Principal",
    "RegisterOwnerIn",
    "LoginIn",
    "RefreshIn",
    "RevokeIn",
    "AuthResult",
    "OwnerSummaryOut",
    "UserProfileOut",
]
