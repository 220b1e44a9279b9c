"""
Access/refresh token issuance.

Access tokens are signed JWTs carrying the caller's identity and roles.
Refresh tokens are opaque random strings; only their SHA-256 digest is
stored, so a database leak does not leak usable tokens.
"""

from __future__ import annotations

import hashlib
import secrets
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from fleetapi.models.owner import Owner
from fleetapi.models.user import SystemRoles, User
from fleetapi.services._shared.base import Clock, utc_clock
from fleetapi.services._shared.errors import AuthenticationError
from fleetapi.services._shared.ports import AccessTokenSigner

REFRESH_TOKEN_BYTES = 64

DEFAULT_ACCESS_TOKEN_MINUTES = 30
DEFAULT_REFRESH_TOKEN_DAYS = 14


def generate_refresh_token() -> str:
    """Return a URL-safe base64 encoding of 64 random bytes."""
    return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)


def hash_refresh_token(plain: str) -> str:
    """Return the SHA-256 hex digest stored in place of ``plain``."""
    return hashlib.sha256(plain.encode("utf-8")).hexdigest()


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Typed identity decoded from a verified access token.

    :param subject_id: User id (``sub``).
    :param email: Login email.
    :param owner_id: Tenant id, ``None`` for users without an owner profile.
    :param roles: Assigned role names.
    :param token_id: The token's ``jti``.
    """

    subject_id: int
    email: str
    owner_id: int | None
    roles: frozenset[str]
    token_id: str
    owner_name: str | None = None
    external_subject: str | None = None

    def has_role(self, role: str) -> bool:
        return role in self.roles

    @property
    def is_administrator(self) -> bool:
        return SystemRoles.ADMINISTRATOR in self.roles

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> Principal:
        """
        Build a principal from decoded JWT claims.

        :raises AuthenticationError: If mandatory claims are missing or malformed.
        """
        try:
            subject_id = int(claims["sub"])
            email = str(claims["email"])
            token_id = str(claims["jti"])
        except (KeyError, TypeError, ValueError) as exc:
            raise AuthenticationError("Invalid or expired access token.") from exc
        raw_owner = claims.get("owner_id")
        roles = claims.get("roles") or []
        if isinstance(roles, str):
            roles = [roles]
        return cls(
            subject_id=subject_id,
            email=email,
            owner_id=int(raw_owner) if raw_owner is not None else None,
            roles=frozenset(str(r) for r in roles),
            token_id=token_id,
            owner_name=claims.get("owner_name"),
            external_subject=claims.get("ext_sub"),
        )


@dataclass(frozen=True, slots=True)
class TokenPair:
    """
    Freshly issued credentials.

    ``refresh_token`` is the only copy of the plaintext; callers persist
    ``refresh_token_hash`` and hand the plaintext to the client once.
    """

    access_token: str
    access_expires_at: datetime
    refresh_token: str
    refresh_token_hash: str
    refresh_issued_at: datetime
    refresh_expires_at: datetime


class TokenIssuer:
    """Build signed access tokens and opaque refresh tokens."""

    def __init__(
        self,
        signer: AccessTokenSigner,
        *,
        access_lifetime: timedelta = timedelta(minutes=DEFAULT_ACCESS_TOKEN_MINUTES),
        refresh_lifetime: timedelta = timedelta(days=DEFAULT_REFRESH_TOKEN_DAYS),
        clock: Clock | None = None,
    ) -> None:
        self.signer = signer
        self.access_lifetime = access_lifetime
        self.refresh_lifetime = refresh_lifetime
        self._clock = clock or utc_clock

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        signer: AccessTokenSigner,
        *,
        clock: Clock | None = None,
    ) -> TokenIssuer:
        """Read ``ACCESS_TOKEN_MINUTES`` and ``REFRESH_TOKEN_DAYS`` from ``config``."""
        return cls(
            signer,
            access_lifetime=timedelta(
                minutes=int(config.get("ACCESS_TOKEN_MINUTES", DEFAULT_ACCESS_TOKEN_MINUTES))
            ),
            refresh_lifetime=timedelta(
                days=int(config.get("REFRESH_TOKEN_DAYS", DEFAULT_REFRESH_TOKEN_DAYS))
            ),
            clock=clock,
        )

    def build_claims(self, user: User, owner: Owner | None) -> dict[str, Any]:
        claims: dict[str, Any] = {
            "email": user.email,
            "roles": user.role_names,
        }
        if owner is not None:
            claims["owner_id"] = owner.id
            claims["owner_name"] = owner.company_name
        if user.external_subject:
            claims["ext_sub"] = user.external_subject
        return claims

    def refresh_expiry(self, now: datetime) -> datetime:
        return now + self.refresh_lifetime

    def create_token_pair(
        self,
        user: User,
        owner: Owner | None = None,
        *,
        fresh: bool = False,
        now: datetime | None = None,
    ) -> TokenPair:
        """
        Issue an access token and a new refresh token for ``user``.

        :param user: Authenticated user (roles loaded).
        :param owner: Linked owner profile, if any.
        :param fresh: Mark the access token as coming from a credential check.
        :param now: Issue instant; defaults to the issuer's clock.
        :returns: Token pair with the refresh token's storage hash.
        """
        now = now or self._clock()
        access = self.signer.sign(
            identity=str(user.id),
            claims=self.build_claims(user, owner),
            expires_delta=self.access_lifetime,
            fresh=fresh,
        )
        refresh = generate_refresh_token()
        return TokenPair(
            access_token=access,
            access_expires_at=now + self.access_lifetime,
            refresh_token=refresh,
            refresh_token_hash=hash_refresh_token(refresh),
            refresh_issued_at=now,
            refresh_expires_at=self.refresh_expiry(now),
        )

    def verify_access_token(self, token: str) -> Principal:
        """
        Verify ``token`` and return the typed principal.

        :raises AuthenticationError: On any verification failure.
        """
        if not token:
            raise AuthenticationError("Invalid or expired access token.")
        return Principal.from_claims(self.signer.decode(token))
