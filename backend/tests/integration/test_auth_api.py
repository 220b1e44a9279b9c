"""Integration tests for authentication endpoints."""

from __future__ import annotations

from tests.helpers.assertions import assert_json_keys, assert_problem
from tests.helpers.auth import REGISTRATION, bearer, register_owner


def test_register_owner_returns_auth_result(client) -> None:
    """Registration answers 201 with a camelCase AuthResult."""

    body = register_owner(client)

    assert_json_keys(body, {"accessToken", "refreshToken", "expiresAtUtc", "owner"})
    assert body["owner"]["companyName"] == "Acme"
    assert body["owner"]["contactEmail"] == "a@acme.test"
    assert body["expiresAtUtc"].endswith("+00:00")


def test_token_responses_are_not_cacheable(client) -> None:
    resp = client.post("/api/v1/auth/register-owner", json=REGISTRATION)
    assert resp.headers["Cache-Control"] == "no-store"


def test_register_duplicate_email_is_409(client) -> None:
    register_owner(client)

    resp = client.post(
        "/api/v1/auth/register-owner", json={**REGISTRATION, "companyName": "Other"}
    )

    body = assert_problem(resp, 409, "conflict")
    assert "email" in body["details"]["errors"]


def test_register_weak_password_is_400(client) -> None:
    resp = client.post(
        "/api/v1/auth/register-owner", json={**REGISTRATION, "password": "AcmeAcme2024!"}
    )
    body = assert_problem(resp, 400, "validation_error")
    assert "password" in body["details"]["errors"]


def test_register_payload_validation(client) -> None:
    resp = client.post("/api/v1/auth/register-owner", json={"email": "not-an-email"})
    body = assert_problem(resp, 400, "validation_error")
    assert {"companyName", "email", "password", "primaryContactName"} <= set(
        body["details"]["errors"]
    )


def test_login_and_me(client) -> None:
    register_owner(client)

    resp = client.post(
        "/api/v1/auth/login", json={"email": "A@acme.test", "password": "CorrectHorse99!"}
    )
    assert resp.status_code == 200
    token = resp.get_json()["accessToken"]

    me = client.get("/api/v1/auth/me", headers=bearer(token))
    assert me.status_code == 200
    data = me.get_json()
    assert data["email"] == "a@acme.test"
    assert data["roles"] == ["Owner"]
    assert data["owner"]["companyName"] == "Acme"
    assert data["lastLoginAtUtc"] is not None


def test_login_failures_look_identical(client) -> None:
    register_owner(client)

    wrong = client.post(
        "/api/v1/auth/login", json={"email": "a@acme.test", "password": "WrongHorse99!"}
    )
    unknown = client.post(
        "/api/v1/auth/login", json={"email": "x@acme.test", "password": "CorrectHorse99!"}
    )

    a = assert_problem(wrong, 401, "unauthorized")
    b = assert_problem(unknown, 401, "unauthorized")
    assert a["detail"] == b["detail"] == "Invalid credentials."


def test_refresh_rotation_over_http(client) -> None:
    first = register_owner(client)

    resp = client.post("/api/v1/auth/refresh", json={"refreshToken": first["refreshToken"]})
    assert resp.status_code == 200
    second = resp.get_json()
    assert second["refreshToken"] != first["refreshToken"]

    replay = client.post("/api/v1/auth/refresh", json={"refreshToken": first["refreshToken"]})
    assert_problem(replay, 401, "unauthorized")


def test_revoke_requires_bearer(client) -> None:
    first = register_owner(client)
    resp = client.post("/api/v1/auth/revoke", json={"refreshToken": first["refreshToken"]})
    assert_problem(resp, 401, "unauthorized")


def test_revoke_then_refresh_fails(client) -> None:
    first = register_owner(client)

    resp = client.post(
        "/api/v1/auth/revoke",
        json={"refreshToken": first["refreshToken"]},
        headers=bearer(first["accessToken"]),
    )
    assert resp.status_code == 204
    assert resp.get_data() == b""

    again = client.post(
        "/api/v1/auth/revoke",
        json={"refreshToken": first["refreshToken"]},
        headers=bearer(first["accessToken"]),
    )
    assert again.status_code == 204

    refresh = client.post("/api/v1/auth/refresh", json={"refreshToken": first["refreshToken"]})
    assert_problem(refresh, 401)


def test_revoke_unknown_token_is_404(client) -> None:
    first = register_owner(client)
    resp = client.post(
        "/api/v1/auth/revoke",
        json={"refreshToken": "never-issued"},
        headers=bearer(first["accessToken"]),
    )
    assert_problem(resp, 404, "not_found")


def test_me_rejects_garbage_token(client) -> None:
    resp = client.get("/api/v1/auth/me", headers=bearer("nope"))
    assert_problem(resp, 401, "unauthorized")
