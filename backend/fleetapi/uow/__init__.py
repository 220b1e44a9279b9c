"""Unit of Work implementations."""

from __future__ import annotations

from .base import UnitOfWork
from .sqlalchemy_uow import SQLAlchemyUnitOfWork

__all__ = ["SQLAlchemyUnitOfWork", "UnitOfWork"]
