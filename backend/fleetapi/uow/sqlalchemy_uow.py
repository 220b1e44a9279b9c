"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from fleetapi.core.extensions import db
from fleetapi.repositories import (
    CityRepository,
    OwnerRepository,
    RefreshTokenRepository,
    RoleRepository,
    UserRepository,
)
from fleetapi.uow.base import UnitOfWork


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.roles = RoleRepository(session=self.session)
        self.owners = OwnerRepository(session=self.session)
        self.cities = CityRepository(session=self.session)
        self.refresh_tokens = RefreshTokenRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    SQLAlchemy-backed UoW using the Flask-scoped session.

    The same session is shared across all repositories for a consistent
    transaction. Leaving the block commits; an exception rolls back and
    propagates.
    """

    def __init__(self, session: Session | None = None) -> None:
        super().__init__(session=session if session is not None else db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # No-op: the session is lazily started on the first statement.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
