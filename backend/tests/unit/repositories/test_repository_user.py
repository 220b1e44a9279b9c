from __future__ import annotations

import pytest

from fleetapi.repositories import OwnerRepository, RoleRepository, UserRepository
from tests.factories.owner import OwnerFactory
from tests.factories.user import UserFactory


def test_get_by_email_is_case_insensitive(session):
    user = UserFactory(email="ops@fleet.test")
    repo = UserRepository(session)

    assert repo.get_by_email("  OPS@fleet.TEST") is user
    assert repo.exists_by_email("ops@FLEET.test")
    assert not repo.exists_by_email("nobody@fleet.test")


def test_unknown_filter_is_rejected(session):
    with pytest.raises(ValueError):
        UserRepository(session).find_one(password_hash="x")


def test_role_get_or_create_is_idempotent(session):
    repo = RoleRepository(session)
    first = repo.get_or_create("FleetManager")
    assert repo.get_or_create("FleetManager") is first


def test_owner_lookup_skips_soft_deleted(session):
    owner = OwnerFactory()
    repo = OwnerRepository(session)
    assert repo.get_by_user_id(owner.user.id) is owner

    owner.mark_deleted()
    session.flush()
    assert repo.get_by_user_id(owner.user.id) is None


def test_assign_updates_only_touches_whitelisted_fields(session):
    user = UserFactory()
    repo = UserRepository(session)

    repo.assign_updates(user, {"external_subject": "00u1abc"})
    assert user.external_subject == "00u1abc"

    with pytest.raises(ValueError):
        repo.assign_updates(user, {"email": "other@fleet.test"})
