"""Authentication endpoints: owner registration and session lifecycle."""

from __future__ import annotations

from flask import Blueprint, Response, request

from fleetapi.api.deps import (
    current_principal,
    get_auth_service,
    json_response,
    require_auth,
    timing,
)
from fleetapi.schemas import (
    AuthResultSchema,
    LoginSchema,
    RefreshTokenSchema,
    RegisterOwnerSchema,
    UserProfileSchema,
)
from fleetapi.services.auth.dto import RevokeIn

bp = Blueprint("auth", __name__)

register_schema = RegisterOwnerSchema()
login_schema = LoginSchema()
refresh_schema = RefreshTokenSchema()
result_schema = AuthResultSchema()
profile_schema = UserProfileSchema()


def _no_store(response: Response) -> Response:
    # Token-bearing responses must never be cached by intermediaries.
    response.headers["Cache-Control"] = "no-store"
    response.headers["Pragma"] = "no-cache"
    return response


@bp.post("/register-owner")
@timing
def register_owner():
    """Create an owner account and return its first token pair."""

    dto = register_schema.load(request.get_json(silent=True) or {})
    result = get_auth_service().register(dto)
    return _no_store(json_response(result_schema.dump(result), status=201))


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue a fresh token pair."""

    dto = login_schema.load(request.get_json(silent=True) or {})
    result = get_auth_service().login(dto)
    return _no_store(json_response(result_schema.dump(result)))


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token; the presented token cannot be used again."""

    dto = refresh_schema.load(request.get_json(silent=True) or {})
    result = get_auth_service().refresh(dto)
    return _no_store(json_response(result_schema.dump(result)))


@bp.post("/revoke")
@timing
@require_auth
def revoke():
    """Revoke one of the caller's refresh tokens."""

    dto = refresh_schema.load(request.get_json(silent=True) or {})
    principal = current_principal()
    get_auth_service().revoke(
        RevokeIn(refresh_token=dto.refresh_token, requested_by=principal.subject_id)
    )
    return Response(status=204)


@bp.get("/me")
@timing
@require_auth
def me():
    """Return the authenticated user's profile and owner summary."""

    profile = get_auth_service().current_user(current_principal())
    return json_response(profile_schema.dump(profile))
