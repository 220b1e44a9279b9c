"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask or HTTP
helpers. They are the stable contract between repositories, services and the
delivery layers (HTTP blueprints and the realtime hub).

The translation to HTTP responses (RFC 7807) is handled by
``fleetapi/core/errors.py``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL reports the constraint name; SQLite reports ``table.column``,
    so callers may pass either form.

    :param exc: The exception raised by SQLAlchemy during flush/commit.
    :param constraint_name: Constraint name or ``table.column`` to look for.
    :returns: ``True`` if the error message mentions ``constraint_name``.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - The error layer maps each subclass to a status code; an unknown
      subclass is treated as a bad request.
    """

    pass


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


class ValidationError(ServiceError):
    """
    Raised when input fails a business rule (password policy, unknown city).

    :param message: Human-readable summary.
    :param errors: Field name to list of messages.
    """

    def __init__(self, message: str, errors: Mapping[str, list[str]] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors: dict[str, list[str]] = {k: list(v) for k, v in (errors or {}).items()}

    def __str__(self) -> str:
        return self.message


class ConflictError(ValidationError):
    """Raised when a unique natural key is already taken (duplicate email)."""

    def __init__(self, entity: str, detail: str, *, field_name: str | None = None) -> None:
        errors = {field_name: [detail]} if field_name else None
        super().__init__(detail, errors)
        self.entity = entity
        self.detail = detail


class AuthenticationError(ServiceError):
    """
    Raised when credentials or tokens are rejected.

    The message is safe to show to clients and never says which part of the
    credential was wrong.
    """

    def __init__(self, message: str = "Invalid credentials.") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class AuthorizationError(ServiceError):
    """Raised when an authenticated principal may not perform an action."""

    def __init__(self, message: str = "Forbidden.") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "RefreshToken").
    :type entity: str
    :param key: Identifier or search key safe to echo back.
    :type key: str | int
    """

    entity: str
    key: str | int = field(default="")

    def __str__(self) -> str:
        if self.key == "":
            return f"{self.entity} not found."
        return f"{self.entity} not found: {self.key}"
