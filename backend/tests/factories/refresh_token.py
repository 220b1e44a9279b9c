"""Factory Boy definition for :class:`fleetapi.models.refresh_token.RefreshToken`."""

from __future__ import annotations

from datetime import timedelta

import factory

from fleetapi.models.base import utcnow
from fleetapi.models.refresh_token import RefreshToken
from fleetapi.services.auth.tokens import hash_refresh_token
from tests.factories import BaseFactory
from tests.factories.user import UserFactory


class RefreshTokenFactory(BaseFactory):
    """
    Persisted refresh token row.

    ``plain`` is not a column; pass it to control the stored hash, e.g.
    ``RefreshTokenFactory(plain="abc")``.
    """

    class Meta:
        model = RefreshToken

    class Params:
        plain = factory.Sequence(lambda n: f"refresh-token-{n}")

    user = factory.SubFactory(UserFactory)
    token_hash = factory.LazyAttribute(lambda o: hash_refresh_token(o.plain))
    issued_at = factory.LazyFunction(utcnow)
    expires_at = factory.LazyAttribute(lambda o: o.issued_at + timedelta(days=14))
    revoked_at = None
    replaced_by_token_hash = None
