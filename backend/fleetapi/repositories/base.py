"""Generic repository base for SQLAlchemy 2.x.

This module centralizes persistence-only concerns shared by all repositories:

- Session resolution (explicit Unit of Work session or the Flask-scoped one).
- Primary-key lookups and equality filters through a per-repository whitelist.
- Safe update helpers with per-repository updatable-field whitelists.
- No business logic, no commit/rollback. Services own transactions.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, and_, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from fleetapi.core.extensions import db

E = TypeVar("E")  # SQLAlchemy mapped entity type


class BaseRepository(Generic[E]):
    """Generic, persistence-only repository for a single aggregate.

    Subclasses MUST define:

    * ``model``: the SQLAlchemy mapped class.

    Subclasses MAY override:

    * ``_default_eagerload`` to attach eager-loading options.
    * ``_filterable_fields`` to whitelist equality filters.
    * ``_updatable_fields`` to whitelist keys allowed for updates.

    This class NEVER opens, commits or rolls back transactions.
    """

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """
        :param session: Session shared across the Unit of Work scope. Falls
            back to the Flask-scoped session when omitted.
        """
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        """Return the active SQLAlchemy session."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Extensibility ----------------------------

    def _default_eagerload(self, stmt: Select[Any]) -> Select[Any]:
        return stmt

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        return getattr(self.model, "id", None)

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        """Whitelist mapping of public filter keys to model attributes."""
        return {}

    def _updatable_fields(self) -> set[str]:
        """Whitelist of keys that :meth:`assign_updates` may set."""
        return set()

    # ------------------------------ Internals --------------------------------

    def _apply_equality_filters(
        self,
        stmt: Select[Any],
        filters: Mapping[str, Any] | None,
    ) -> Select[Any]:
        """Apply whitelisted equality filters; unknown keys raise ``ValueError``."""
        if not filters:
            return stmt
        allowed = self._filterable_fields()
        clauses: list[Any] = []
        for key, value in filters.items():
            col = allowed.get(key)
            if col is None:
                raise ValueError(f"Field {key!r} is not filterable on {self.model.__name__}.")
            clauses.append(col == value)
        return stmt.where(and_(*clauses))

    # --------------------------------- CRUD ----------------------------------

    def add(self, instance: E) -> E:
        """Stage a new entity and flush to materialize the PK.

        :param instance: New entity instance.
        :returns: The same instance after ``flush()``.
        """
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        """Retrieve a single entity by primary key.

        :param entity_id: Primary-key value.
        :returns: Entity or ``None``.
        :raises RuntimeError: If no PK attribute can be detected.
        """
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError("BaseRepository.get requires a detectable PK attribute.")
        stmt = self._default_eagerload(select(self.model).where(pk_attr == entity_id))
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def find_one(self, **filters: Any) -> E | None:
        """Find a single entity by whitelisted equality filters."""
        stmt: Select[Any] = select(self.model)
        stmt = self._apply_equality_filters(stmt, filters)
        stmt = self._default_eagerload(stmt)
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def flush(self) -> None:
        """Flush pending changes to the database without committing."""
        self.session.flush()

    def assign_updates(self, instance: E, fields: Mapping[str, Any], *, flush: bool = True) -> E:
        """Assign only whitelisted keys to ``instance`` and optionally flush.

        The assignment uses ``setattr`` so ``@validates`` hooks still run.

        :raises ValueError: If a key is not in :meth:`_updatable_fields`.
        """
        allowed = self._updatable_fields()
        unknown = [k for k in fields if k not in allowed]
        if unknown:
            raise ValueError(f"Unknown or non-updatable fields: {unknown}")
        for key, value in fields.items():
            setattr(instance, key, value)
        if flush:
            self.flush()
        return instance
