"""Owner and city repositories."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from fleetapi.models.owner import City, Owner
from fleetapi.repositories.base import BaseRepository


class OwnerRepository(BaseRepository[Owner]):
    """Persistence-only repository for :class:`Owner` profiles."""

    model = Owner

    def _filterable_fields(self):
        return {"identity_user_id": Owner.identity_user_id}

    def _updatable_fields(self):
        return {"external_group_id", "contact_phone", "primary_contact_name", "city_id"}

    def get_by_user_id(self, user_id: int) -> Owner | None:
        """Return the live owner profile linked to ``user_id``, if any."""
        stmt = select(Owner).where(
            Owner.identity_user_id == user_id,
            Owner.is_deleted.is_(False),
        )
        return cast(Owner | None, self.session.execute(stmt).scalars().first())


class CityRepository(BaseRepository[City]):
    model = City
