"""Shared API helpers: service wiring, authentication and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Flask, Response, current_app, g, jsonify, request
from flask_jwt_extended import get_jwt, verify_jwt_in_request

from fleetapi.infra.jwt.flask_jwt_signer import FlaskJWTAccessTokenSigner
from fleetapi.infra.okta.okta_identity_federation import OktaIdentityFederation
from fleetapi.services._shared.ports import IdentityFederation, NullIdentityFederation
from fleetapi.services.auth.service import AuthService
from fleetapi.services.auth.tokens import Principal, TokenIssuer

F = TypeVar("F", bound=Callable[..., Any])

ISSUER_KEY = "token_issuer"
FEDERATION_KEY = "identity_federation"


def init_app(app: Flask) -> None:
    """Build the app-wide token issuer and identity federation adapter."""
    app.extensions[ISSUER_KEY] = TokenIssuer.from_config(app.config, FlaskJWTAccessTokenSigner())

    federation: IdentityFederation = NullIdentityFederation()
    okta = OktaIdentityFederation.from_config(app.config)
    if okta.configured:
        federation = okta
    else:
        app.logger.info("identity_federation.disabled")
    app.extensions[FEDERATION_KEY] = federation


def get_token_issuer() -> TokenIssuer:
    return current_app.extensions[ISSUER_KEY]


def get_auth_service() -> AuthService:
    """Return an :class:`AuthService` bound to the current app's configuration."""
    return AuthService(
        issuer=get_token_issuer(),
        federation=current_app.extensions[FEDERATION_KEY],
        password_min_length=int(current_app.config.get("PASSWORD_MIN_LENGTH", 12)),
    )


def require_auth(func: F) -> F:
    """Ensure the request carries a valid access token and expose the principal."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        g.principal = Principal.from_claims(get_jwt())
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_principal() -> Principal:
    """Principal set by :func:`require_auth` for the current request."""
    principal = g.get("principal")
    if principal is None:
        raise RuntimeError("current_principal() used outside a @require_auth endpoint.")
    return principal


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
