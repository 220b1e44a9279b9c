"""User and role models backing authentication."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import Column, ForeignKey, Index, String, Table, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from fleetapi.core.extensions import db
from fleetapi.core.security import hash_password, verify_password

from .base import PKMixin, ReprMixin, SoftDeleteMixin, TimestampMixin, UTCDateTime

if TYPE_CHECKING:
    from .owner import Owner
    from .refresh_token import RefreshToken


class SystemRoles:
    """Names of the roles the platform knows about."""

    OWNER = "Owner"
    FLEET_MANAGER = "FleetManager"
    DRIVER = "Driver"
    ADMINISTRATOR = "Administrator"

    ALL = (OWNER, FLEET_MANAGER, DRIVER, ADMINISTRATOR)


user_roles = Table(
    "user_roles",
    db.metadata,
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(PKMixin, ReprMixin, db.Model):
    """Named role assigned to users (``Owner``, ``Administrator``...)."""

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)


class User(PKMixin, ReprMixin, TimestampMixin, SoftDeleteMixin, db.Model):
    """
    Authentication identity.

    Fields
    ------
    email : str
        Login email. Stored normalized (lowercase, trimmed).
    password_hash : str
        Hashed password (write-only setter via ``password``).
    last_login_at : datetime | None
        Stamped on every successful login.
    external_subject : str | None
        User id at the federated identity provider, when provisioned.
    roles : list[Role]
        Assigned roles, emitted as claims on every access token.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(254), nullable=False)
    last_login_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    external_subject: Mapped[str | None] = mapped_column(String(128), nullable=True)

    roles: Mapped[list[Role]] = relationship(secondary=user_roles, lazy="selectin")
    owner: Mapped[Owner | None] = relationship(back_populates="user", uselist=False)
    refresh_tokens: Mapped[list[RefreshToken]] = relationship(
        back_populates="user", lazy="noload"
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("external_subject", name="uq_users_external_subject"),
        Index("ix_users_email", "email"),
    )

    # -------------------- Password API --------------------
    @property
    def password(self) -> Any:  # pragma: no cover - explicit write-only contract
        """
        Disallow reading passwords.

        :raises AttributeError: Always, to ensure password is write-only.
        """
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        """
        Hash and set the password.

        :param raw: Plain text password to hash.
        :type raw: str
        """
        self.password_hash = hash_password(raw)

    def verify_password(self, raw: str) -> bool:
        """
        Verify a password against the stored hash.

        :param raw: Plain text password candidate.
        :returns: ``True`` if it matches; otherwise ``False``.
        """
        return verify_password(self.password_hash, raw)

    @property
    def role_names(self) -> list[str]:
        """Assigned role names in a stable order."""
        return sorted(role.name for role in self.roles)

    def has_role(self, name: str) -> bool:
        return any(role.name == name for role in self.roles)

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :param key: Field name (``email``).
        :param value: Email to normalize.
        :returns: Normalized email (lowercased/trimmed).
        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v
