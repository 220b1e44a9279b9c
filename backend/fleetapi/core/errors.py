"""Centralized JSON (RFC 7807) error handling for the API."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from flask_jwt_extended import JWTManager
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from fleetapi.core.logger import ensure_request_id
from fleetapi.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ServiceError,
    ValidationError,
)

log = logging.getLogger(__name__)


def _http_status_to_code(status_code: int) -> str:
    """Map common HTTP status codes to canonical, stable error codes."""
    mapping = {
        400: "bad_request",
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
        413: "payload_too_large",
        415: "unsupported_media_type",
        422: "unprocessable_entity",
        429: "too_many_requests",
        500: "internal_server_error",
        503: "service_unavailable",
    }
    return mapping.get(status_code, "error")


def _as_problem(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build an RFC 7807 Problem Details dict.

    :param status: HTTP status code.
    :param code: Stable machine-consumable error code.
    :param message: Human-readable error summary (safe for clients).
    :param details: Optional safe, structured details.
    :returns: Problem+JSON dictionary.
    :rtype: dict
    """
    problem: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": message,
        "instance": request.path if request else None,
        "code": code,
    }
    if details:
        problem["details"] = details
    problem["request_id"] = ensure_request_id()
    return problem


def _problem_response(problem: dict[str, Any], status: int) -> tuple[Response, int]:
    """
    Return a Flask response with ``application/problem+json`` media type.

    :param problem: Problem details payload.
    :param status: HTTP status code.
    :returns: Flask JSON response and status.
    """
    resp = jsonify(problem)
    resp.mimetype = "application/problem+json"
    return resp, status


class APIError(Exception):
    """
    Represent a JSON-serializable API error.

    Parameters
    ----------
    message : str
        Human-readable description presented to clients.
    status_code : int, optional
        HTTP status code to return. Defaults to ``400``.
    code : str, optional
        Machine-readable identifier. Defaults to ``"bad_request"``.
    details : dict[str, Any] | None, optional
        Optional structured payload (e.g., validation messages).
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}

    def to_problem(self) -> dict[str, Any]:
        """Serialize error metadata into an RFC 7807 problem."""
        return _as_problem(
            status=self.status_code,
            code=self.code,
            message=self.message,
            details=self.details or None,
        )


# Domain conveniences
class NotFound(APIError):
    """404 when resources are missing."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=HTTPStatus.NOT_FOUND, code="not_found")


class Conflict(APIError):
    """409 for uniqueness/constraint collisions."""

    def __init__(self, message: str = "Conflict", details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message, status_code=HTTPStatus.CONFLICT, code="conflict", details=details
        )


class Unauthorized(APIError):
    """401 when authentication fails."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED, code="unauthorized")


class Forbidden(APIError):
    """403 when authorization denies access."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message, status_code=HTTPStatus.FORBIDDEN, code="forbidden")


def translate_service_error(exc: ServiceError) -> APIError:
    """
    Map a service-layer error onto its HTTP counterpart.

    Order matters: :class:`ConflictError` is a :class:`ValidationError`.

    :param exc: Error raised by a service.
    :returns: API error ready to be rendered.
    """
    if isinstance(exc, ConflictError):
        details = {"errors": exc.errors} if exc.errors else None
        return Conflict(str(exc), details=details)
    if isinstance(exc, ValidationError):
        return APIError(
            str(exc),
            status_code=HTTPStatus.BAD_REQUEST,
            code="validation_error",
            details={"errors": exc.errors} if exc.errors else None,
        )
    if isinstance(exc, AuthenticationError):
        return Unauthorized(str(exc))
    if isinstance(exc, AuthorizationError):
        return Forbidden(str(exc))
    if isinstance(exc, NotFoundError):
        return NotFound(str(exc))
    return APIError(str(exc) or "Bad request", status_code=HTTPStatus.BAD_REQUEST)


def register_jwt_handlers(manager: JWTManager) -> None:
    """Render Flask-JWT-Extended rejections as 401 problem documents."""

    def _unauthorized(message: str):
        return _problem_response(
            _as_problem(status=HTTPStatus.UNAUTHORIZED, code="unauthorized", message=message),
            HTTPStatus.UNAUTHORIZED,
        )

    @manager.unauthorized_loader
    def _missing_token(reason: str):
        return _unauthorized("Missing bearer token.")

    @manager.invalid_token_loader
    def _invalid_token(reason: str):
        return _unauthorized("Invalid access token.")

    @manager.expired_token_loader
    def _expired_token(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]):
        return _unauthorized("Access token has expired.")

    @manager.revoked_token_loader
    def _revoked_token(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]):
        return _unauthorized("Access token has been revoked.")

    @manager.needs_fresh_token_loader
    def _stale_token(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]):
        return _unauthorized("Fresh access token required.")


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Notes
    -----
    - Guarantees RFC 7807 responses for all handled errors.
    - Ensures a correlation ``request_id`` is present on every error.
    - Emits 5xx with ``exc_info`` for traceability; 4xx as warnings.
    """
    from fleetapi.core.extensions import jwt

    register_jwt_handlers(jwt)

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        problem = err.to_problem()
        level = log.error if err.status_code >= 500 else log.warning
        level(
            "APIError: code=%s status=%s msg=%s request_id=%s",
            err.code,
            err.status_code,
            err.message,
            problem.get("request_id"),
        )
        return _problem_response(problem, err.status_code)

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        return handle_api_error(translate_service_error(err))

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        error_code = _http_status_to_code(status)
        message = (err.description or error_code.replace("_", " ").capitalize()).strip()
        if status == HTTPStatus.NOT_FOUND and request:
            message = f"Route '{request.path}' not found"
        problem = _as_problem(status=status, code=error_code, message=message)
        level = log.error if status >= 500 else log.warning
        level(
            "HTTPException: code=%s status=%s detail=%s request_id=%s",
            error_code,
            status,
            message,
            problem.get("request_id"),
        )
        return _problem_response(problem, status)

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        problem = _as_problem(
            status=HTTPStatus.BAD_REQUEST,
            code="validation_error",
            message="Validation failed",
            details={"errors": err.normalized_messages()},
        )
        log.warning("ValidationError: request_id=%s", problem.get("request_id"))
        return _problem_response(problem, HTTPStatus.BAD_REQUEST)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        problem = _as_problem(
            status=HTTPStatus.CONFLICT,
            code="conflict",
            message="Resource conflict",
        )
        log.error("IntegrityError: request_id=%s", problem.get("request_id"), exc_info=True)
        return _problem_response(problem, HTTPStatus.CONFLICT)

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        problem = _as_problem(
            status=HTTPStatus.SERVICE_UNAVAILABLE,
            code="service_unavailable",
            message="Service temporarily unavailable",
        )
        log.error("OperationalError: request_id=%s", problem.get("request_id"), exc_info=True)
        return _problem_response(problem, HTTPStatus.SERVICE_UNAVAILABLE)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        # Never leak internal details
        problem = _as_problem(
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            code="internal_server_error",
            message="An unexpected error occurred.",
        )
        log.error(
            "Unhandled exception: request_id=%s",
            problem.get("request_id"),
            exc_info=True,
        )
        return _problem_response(problem, HTTPStatus.INTERNAL_SERVER_ERROR)
