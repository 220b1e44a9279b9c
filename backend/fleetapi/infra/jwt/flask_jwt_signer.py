from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, cast

from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt import PyJWTError

from fleetapi.services._shared.errors import AuthenticationError
from fleetapi.services._shared.ports import AccessTokenSigner

ACCESS_TOKEN_TYPE = "access"


@dataclass(slots=True)
class FlaskJWTAccessTokenSigner(AccessTokenSigner):
    """
    Adapter for Flask-JWT-Extended.

    Signing key, algorithm, issuer and audience come from the Flask config
    (``JWT_SECRET_KEY``, ``JWT_ALGORITHM``, ``JWT_ENCODE_ISSUER``...), so
    every call needs an active app context. The library stamps a fresh
    ``jti`` on every token.
    """

    def sign(
        self,
        *,
        identity: str,
        claims: dict[str, Any],
        expires_delta: timedelta,
        fresh: bool = False,
    ) -> str:
        return cast(
            str,
            create_access_token(
                identity=identity,
                additional_claims=claims,
                expires_delta=expires_delta,
                fresh=fresh,
            ),
        )

    def decode(self, token: str) -> dict[str, Any]:
        """
        Verify signature, expiry, issuer and audience.

        :raises AuthenticationError: On any verification failure or when the
            token is not an access token.
        """
        try:
            claims = cast(dict[str, Any], decode_token(token))
        except (PyJWTError, JWTExtendedException) as exc:
            raise AuthenticationError("Invalid or expired access token.") from exc
        if claims.get("type") != ACCESS_TOKEN_TYPE:
            raise AuthenticationError("Invalid or expired access token.")
        return claims
