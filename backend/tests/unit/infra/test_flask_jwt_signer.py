from __future__ import annotations

from datetime import timedelta

import pytest
from flask_jwt_extended import create_refresh_token

from fleetapi.infra.jwt.flask_jwt_signer import FlaskJWTAccessTokenSigner
from fleetapi.services._shared.errors import AuthenticationError


def test_sign_and_decode_carry_issuer_audience_and_claims(app):
    signer = FlaskJWTAccessTokenSigner()
    with app.app_context():
        token = signer.sign(
            identity="42",
            claims={"email": "a@acme.test", "roles": ["Owner"]},
            expires_delta=timedelta(minutes=5),
            fresh=True,
        )
        claims = signer.decode(token)

    assert claims["sub"] == "42"
    assert claims["iss"] == app.config["JWT_ISSUER"]
    assert claims["aud"] == app.config["JWT_AUDIENCE"]
    assert claims["roles"] == ["Owner"]
    assert claims["fresh"] is True
    assert claims["type"] == "access"


def test_decode_rejects_refresh_type_jwts(app):
    signer = FlaskJWTAccessTokenSigner()
    with app.app_context():
        token = create_refresh_token(identity="42")
        with pytest.raises(AuthenticationError):
            signer.decode(token)


def test_decode_rejects_tampered_signature(app):
    signer = FlaskJWTAccessTokenSigner()
    with app.app_context():
        token = signer.sign(identity="1", claims={}, expires_delta=timedelta(minutes=5))
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])
        with pytest.raises(AuthenticationError):
            signer.decode(tampered)
