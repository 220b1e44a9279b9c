from __future__ import annotations

from http import HTTPStatus

import pytest

from fleetapi.core.errors import translate_service_error
from fleetapi.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ServiceError,
    ValidationError,
)


@pytest.mark.parametrize(
    ("exc", "status", "code"),
    [
        (ConflictError("User", "Email is already registered.", field_name="email"), 409, "conflict"),
        (ValidationError("bad", {"password": ["weak"]}), 400, "validation_error"),
        (AuthenticationError(), 401, "unauthorized"),
        (AuthorizationError(), 403, "forbidden"),
        (NotFoundError("Refresh token"), 404, "not_found"),
        (ServiceError("odd"), 400, "bad_request"),
    ],
)
def test_service_errors_map_to_http(exc, status, code):
    api_error = translate_service_error(exc)
    assert api_error.status_code == HTTPStatus(status)
    assert api_error.code == code


def test_conflict_keeps_field_errors():
    api_error = translate_service_error(
        ConflictError("User", "Email is already registered.", field_name="email")
    )
    assert api_error.details == {"errors": {"email": ["Email is already registered."]}}


def test_unknown_route_is_a_problem_document(client):
    resp = client.get("/api/v1/nope")
    assert resp.status_code == 404
    assert resp.mimetype == "application/problem+json"
    assert resp.get_json()["detail"] == "Route '/api/v1/nope' not found"
