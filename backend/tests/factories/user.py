"""Factory Boy definitions for :class:`fleetapi.models.user.User` and roles."""

from __future__ import annotations

import factory

from fleetapi.models.user import Role, SystemRoles, User
from tests.factories import BaseFactory

DEFAULT_PASSWORD = "CorrectHorse99!"


class RoleFactory(BaseFactory):
    class Meta:
        model = Role
        sqlalchemy_get_or_create = ("name",)

    name = SystemRoles.OWNER


class UserFactory(BaseFactory):
    """
    Build persisted :class:`fleetapi.models.user.User` instances.

    Notes
    -----
    - ``password`` goes through the model setter, so the hash is real.
    - ``roles`` takes role *names*, e.g. ``UserFactory(roles=["Administrator"])``.
    """

    class Meta:
        model = User

    id = None  # let autoincrement handle it
    email = factory.Sequence(lambda n: f"user{n}@fleet.test")
    password_hash = factory.LazyFunction(lambda: "")  # set via postgen

    @factory.post_generation
    def password(obj, create, extracted, **kwargs):
        """Set password using model setter (ensures hashing)."""
        obj.password = extracted or DEFAULT_PASSWORD

    @factory.post_generation
    def roles(obj, create, extracted, **kwargs):
        for name in extracted if extracted is not None else [SystemRoles.OWNER]:
            obj.roles.append(RoleFactory(name=name))
