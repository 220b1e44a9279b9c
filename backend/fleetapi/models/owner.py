"""Owner (tenant) profile and the location reference data it points at."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from fleetapi.core.extensions import db

from .base import PKMixin, ReprMixin, SoftDeleteMixin, TimestampMixin

if TYPE_CHECKING:
    from .user import User


class Country(PKMixin, ReprMixin, db.Model):
    __tablename__ = "countries"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    iso_code: Mapped[str | None] = mapped_column(String(3), nullable=True)


class City(PKMixin, ReprMixin, db.Model):
    __tablename__ = "cities"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    country_id: Mapped[int] = mapped_column(
        ForeignKey("countries.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    country: Mapped[Country] = relationship(lazy="joined")


class Owner(PKMixin, ReprMixin, TimestampMixin, SoftDeleteMixin, db.Model):
    """
    Tenant record created at registration and linked 1:1 to its user.

    Fields
    ------
    company_name : str
        Display name of the tenant.
    contact_email : str
        Normalized contact email (the registering user's email).
    contact_phone : str | None
        Optional phone number.
    primary_contact_name : str
        Person responsible for the account.
    city_id : int | None
        Optional location reference.
    external_group_id : str | None
        Group id at the federated identity provider.
    identity_user_id : int | None
        Linked login identity (unique).
    """

    __tablename__ = "owners"

    company_name: Mapped[str] = mapped_column(String(200), nullable=False)
    contact_email: Mapped[str] = mapped_column(String(254), nullable=False)
    contact_phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    primary_contact_name: Mapped[str] = mapped_column(String(200), nullable=False)
    fleet_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    external_group_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

    city_id: Mapped[int | None] = mapped_column(
        ForeignKey("cities.id", ondelete="SET NULL"), nullable=True, index=True
    )
    identity_user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True
    )

    city: Mapped[City | None] = relationship(lazy="joined")
    user: Mapped[User | None] = relationship(back_populates="owner")

    @validates("contact_email")
    def _normalize_contact_email(self, key: str, value: str) -> str:
        return value.strip().lower()

    @validates("company_name", "primary_contact_name")
    def _strip(self, key: str, value: str) -> str:
        v = (value or "").strip()
        if not v:
            raise ValueError(f"{key} is required.")
        return v
