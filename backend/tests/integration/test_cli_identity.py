"""Integration tests for the ``flask identity`` command group."""

from __future__ import annotations

from fleetapi.models.user import Role, SystemRoles, User
from tests.factories.user import UserFactory


def test_seed_roles_is_idempotent(app, session) -> None:
    runner = app.test_cli_runner()

    first = runner.invoke(args=["identity", "seed-roles"])
    second = runner.invoke(args=["identity", "seed-roles"])

    assert first.exit_code == 0, first.output
    assert "created= 4" in first.output
    assert "existing= 4" in second.output
    assert {r.name for r in session.query(Role).all()} == set(SystemRoles.ALL)


def test_create_admin(app, session) -> None:
    runner = app.test_cli_runner()

    result = runner.invoke(
        args=["identity", "create-admin", "--email", "Root@Fleet.test", "--password", "CorrectHorse99!"]
    )

    assert result.exit_code == 0, result.output
    admin = session.query(User).filter_by(email="root@fleet.test").one()
    assert admin.has_role(SystemRoles.ADMINISTRATOR)
    assert admin.verify_password("CorrectHorse99!")


def test_create_admin_promotes_existing_user(app, session) -> None:
    UserFactory(email="ops@fleet.test")
    session.commit()

    result = app.test_cli_runner().invoke(
        args=["identity", "create-admin", "--email", "ops@fleet.test"]
    )

    assert result.exit_code == 0, result.output
    user = session.query(User).filter_by(email="ops@fleet.test").one()
    assert user.has_role(SystemRoles.ADMINISTRATOR)


def test_create_admin_refuses_weak_password(app, session) -> None:
    result = app.test_cli_runner().invoke(
        args=["identity", "create-admin", "--email", "root@fleet.test", "--password", "weak"]
    )

    assert result.exit_code != 0
    assert session.query(User).count() == 0
