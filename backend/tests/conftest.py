"""Pytest fixtures configuring an isolated database and app for each test.

Every test that touches the database gets freshly created tables on an
in-memory SQLite database, so services are free to commit.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from typing import Any

import pytest
from flask import Flask

from fleetapi.core.config import TestingConfig
from fleetapi.core.extensions import db as _db
from fleetapi.factory import create_app
from fleetapi.realtime.hub import FleetHub
from fleetapi.realtime.registry import ConnectionGroupRegistry
from fleetapi.services.auth.tokens import Principal

from tests.helpers.realtime import RecordingConnection


@pytest.fixture(scope="session")
def app() -> Flask:
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application built from :class:`TestingConfig`.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    application = create_app(TestingConfig)
    application.logger.setLevel("WARNING")
    return application


@pytest.fixture()
def db(app: Flask) -> Generator[Any, None, None]:
    """Create all tables inside an app context and drop them afterwards.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _db.create_all()
        try:
            yield _db
        finally:
            _db.session.remove()
            _db.drop_all()


@pytest.fixture()
def session(db: Any) -> Any:
    """Scoped session used by services, repositories and factories alike."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(db.session)
    return db.session


@pytest.fixture()
def client(app: Flask, session: Any) -> Any:
    """Return a Flask test client sharing the test's database."""
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture()
def freeze_time() -> Callable[[str | None], Any]:
    """Factory returning :func:`freezegun.freeze_time`.

    Examples
    --------
    >>> def test_with_frozen_time(freeze_time):
    ...     with freeze_time("2024-01-01"):
    ...         ...
    """
    from freezegun import freeze_time as _freeze_time

    def _factory(target: str | None = None) -> Any:
        return _freeze_time(target or "2024-01-01")

    return _factory


# -- Realtime ----------------------------------------------------------------
@pytest.fixture()
def hub() -> FleetHub:
    """Hub with an empty registry and no relay."""
    return FleetHub(ConnectionGroupRegistry())


@pytest.fixture()
def make_principal() -> Callable[..., Principal]:
    """Build principals without going through JWTs."""

    def _factory(
        subject_id: int = 1,
        *,
        owner_id: int | None = 1,
        roles: tuple[str, ...] = ("Owner",),
    ) -> Principal:
        return Principal(
            subject_id=subject_id,
            email=f"user{subject_id}@fleet.test",
            owner_id=owner_id,
            roles=frozenset(roles),
            token_id=f"jti-{subject_id}",
        )

    return _factory


@pytest.fixture()
def connect(hub: FleetHub, make_principal) -> Callable[..., RecordingConnection]:
    """Register a :class:`RecordingConnection` with ``hub`` and return it."""

    def _connect(connection_id: str, **principal_kwargs: Any) -> RecordingConnection:
        conn = RecordingConnection(connection_id, make_principal(**principal_kwargs))
        hub.connect(conn)
        return conn

    return _connect
