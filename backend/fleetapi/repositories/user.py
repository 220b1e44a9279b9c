"""User and role repositories."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from fleetapi.models.user import Role, User
from fleetapi.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It never issues tokens or hashes passwords itself; the model does hashing
    and services decide when to call it.
    """

    model = User

    def _filterable_fields(self):
        return {"email": User.email, "external_subject": User.external_subject}

    def _updatable_fields(self):
        return {"last_login_at", "external_subject"}

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :returns: User instance or ``None`` when not found.
        """
        stmt = select(User).where(User.email == email.strip().lower())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email.strip().lower())
        return self.session.execute(stmt).first() is not None


class RoleRepository(BaseRepository[Role]):
    """Lookup and lazy creation of named roles."""

    model = Role

    def _filterable_fields(self):
        return {"name": Role.name}

    def get_by_name(self, name: str) -> Role | None:
        return self.find_one(name=name)

    def get_or_create(self, name: str) -> Role:
        """Return the role called ``name``, inserting it when missing.

        :param name: Role name such as ``"Owner"``.
        :returns: Persisted (flushed) role.
        """
        role = self.get_by_name(name)
        if role is None:
            role = self.add(Role(name=name))
        return role
