from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from fleetapi.models.user import SystemRoles, User
from tests.factories.user import UserFactory


def test_password_is_hashed_and_write_only(session):
    user = UserFactory(password="CorrectHorse99!")

    assert user.password_hash != "CorrectHorse99!"
    assert user.verify_password("CorrectHorse99!")
    assert not user.verify_password("WrongHorse99!")
    with pytest.raises(AttributeError):
        _ = user.password


def test_email_is_normalized(session):
    user = UserFactory(email="  Someone@Fleet.TEST ")
    assert user.email == "someone@fleet.test"


@pytest.mark.parametrize("email", ["", "no-at-sign", "a@nodot"])
def test_invalid_email_rejected(email):
    with pytest.raises(ValueError):
        User(email=email)


def test_email_is_unique(session):
    UserFactory(email="dup@fleet.test")
    with pytest.raises(IntegrityError):
        UserFactory(email="DUP@fleet.test")


def test_roles_helpers(session):
    user = UserFactory(roles=[SystemRoles.OWNER, SystemRoles.ADMINISTRATOR])
    assert user.role_names == ["Administrator", "Owner"]
    assert user.has_role(SystemRoles.ADMINISTRATOR)
    assert not user.has_role(SystemRoles.DRIVER)


def test_soft_delete_stamps_timestamp(session):
    user = UserFactory()
    user.mark_deleted()
    assert user.is_deleted
    assert user.deleted_at is not None
