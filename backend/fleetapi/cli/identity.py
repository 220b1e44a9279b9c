"""Flask CLI commands bootstrapping roles and the first administrator."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from fleetapi.models.user import SystemRoles, User
from fleetapi.services.auth.policy import password_policy_errors
from fleetapi.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

LOGGER = logging.getLogger(__name__)


def _seed_roles(uow: SQLAlchemyUnitOfWork) -> dict[str, int]:
    counters = {"created": 0, "existing": 0}
    for name in SystemRoles.ALL:
        if uow.roles.get_by_name(name) is None:
            uow.roles.get_or_create(name)
            counters["created"] += 1
        else:
            counters["existing"] += 1
    return counters


def _resolve_admin_password(password: str | None) -> str:
    """Pick the CLI value, then ``ADMIN_PASSWORD``; refuse weak or missing ones."""
    raw = password or str(current_app.config.get("ADMIN_PASSWORD") or "")
    if not raw:
        raise click.UsageError("Provide --password or set ADMIN_PASSWORD.")
    errors = password_policy_errors(
        raw, min_length=int(current_app.config.get("PASSWORD_MIN_LENGTH", 12))
    )
    if errors:
        raise click.UsageError(" ".join(errors))
    return raw


@click.group("identity")
def identity_cli() -> None:
    """Identity bootstrap commands."""


@identity_cli.command("seed-roles")
@with_appcontext
def seed_roles_command() -> None:
    """Create the system roles (Owner, FleetManager, Driver, Administrator)."""
    try:
        with SQLAlchemyUnitOfWork() as uow:
            counters = _seed_roles(uow)
    except Exception as exc:  # pragma: no cover - CLI safeguard
        raise click.ClickException(f"Seeding roles failed: {exc}") from exc
    click.echo(f"roles  created={counters['created']:>2}  existing={counters['existing']:>2}")


@identity_cli.command("create-admin")
@click.option("--email", default=None, help="Administrator email (defaults to ADMIN_EMAIL).")
@click.option("--password", default=None, help="Administrator password (defaults to ADMIN_PASSWORD).")
@with_appcontext
def create_admin_command(email: str | None, password: str | None) -> None:
    """Create an administrator, or grant the role to an existing account."""
    email = (email or str(current_app.config.get("ADMIN_EMAIL") or "")).strip().lower()
    if not email:
        raise click.UsageError("Provide --email or set ADMIN_EMAIL.")

    with SQLAlchemyUnitOfWork() as uow:
        _seed_roles(uow)
        admin_role = uow.roles.get_or_create(SystemRoles.ADMINISTRATOR)
        user = uow.users.get_by_email(email)
        if user is not None:
            if user.has_role(SystemRoles.ADMINISTRATOR):
                click.echo(f"{email} is already an administrator.")
                return
            user.roles.append(admin_role)
            LOGGER.info("identity.admin_promoted", extra={"user_id": user.id})
            click.echo(f"Granted {SystemRoles.ADMINISTRATOR} to {email}.")
            return

        user = User(email=email)
        user.password = _resolve_admin_password(password)
        user.roles.append(admin_role)
        uow.users.add(user)
        LOGGER.info("identity.admin_created", extra={"user_id": user.id})
    click.echo(f"Created administrator {email}.")
