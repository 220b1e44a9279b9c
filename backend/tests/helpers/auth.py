"""Authentication helpers for tests."""

from __future__ import annotations

from typing import Any

REGISTRATION = {
    "companyName": "Acme",
    "email": "a@acme.test",
    "password": "CorrectHorse99!",
    "primaryContactName": "Ada Lovelace",
}


def bearer(token: str) -> dict[str, str]:
    """Authorization header carrying ``token``."""

    return {"Authorization": f"Bearer {token}"}


def register_owner(client: Any, **overrides: Any) -> dict:
    """Register an owner through the API and return the ``AuthResult`` body."""

    resp = client.post("/api/v1/auth/register-owner", json={**REGISTRATION, **overrides})
    assert resp.status_code == 201, resp.get_data(as_text=True)
    return resp.get_json()
