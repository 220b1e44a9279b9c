from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from fleetapi.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

Clock = Callable[[], datetime]


def utc_clock() -> datetime:
    return datetime.now(timezone.utc)


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide the read-write unit of work factory.
    * Provide an injectable UTC clock so expiry logic is testable.
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    Services never touch the global session directly; they always go
    through a Unit of Work.
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], SQLAlchemyUnitOfWork] | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        :param uow_factory: Builds a fresh unit of work per transaction.
        :param clock: Returns the current aware UTC time.
        """
        self._uow_factory = uow_factory or SQLAlchemyUnitOfWork
        self._clock = clock or utc_clock
        self.log = logging.getLogger(type(self).__module__)

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: UoW committing on success and rolling back on error.
        """
        return self._uow_factory()

    def now_utc(self) -> datetime:
        return self._clock()
