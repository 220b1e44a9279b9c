from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterOwnerIn:
    """
    Input DTO for owner self-registration.

    :param company_name: Tenant display name.
    :param email: Login and contact email.
    :param password: Raw password (policy-checked, then hashed).
    :param primary_contact_name: Person responsible for the account.
    :param contact_phone: Optional phone number.
    :param city_id: Optional city reference; must exist when given.
    """

    company_name: str
    email: str
    password: str
    primary_contact_name: str
    contact_phone: str | None = None
    city_id: int | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Opaque refresh token previously issued.
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class RevokeIn:
    """
    Input DTO for refresh token revocation.

    :param refresh_token: Opaque refresh token to revoke.
    :param requested_by: User id of the authenticated caller. When set, only
        that user's tokens can be revoked.
    """

    refresh_token: str
    requested_by: int | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class OwnerSummaryOut:
    id: int
    company_name: str
    contact_email: str
    contact_phone: str | None = None
    city: str | None = None
    country: str | None = None


@dataclass(frozen=True, slots=True)
class AuthResult:
    """
    Outcome of register/login/refresh.

    :param access_token: Signed JWT.
    :param refresh_token: Opaque refresh token, returned exactly once.
    :param expires_at: Access token expiry (UTC).
    :param owner: Owner summary, ``None`` for users without an owner profile.
    """

    access_token: str
    refresh_token: str
    expires_at: datetime
    owner: OwnerSummaryOut | None = None


@dataclass(frozen=True, slots=True)
class UserProfileOut:
    id: int
    email: str
    roles: tuple[str, ...]
    last_login_at: datetime | None
    owner: OwnerSummaryOut | None = None
