from __future__ import annotations

from datetime import timedelta

import pytest

from fleetapi.core.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    apply_jwt_settings,
    get_config,
    validate_config,
)


@pytest.mark.parametrize(
    ("env", "expected"),
    [
        ("testing", TestingConfig),
        ("PRODUCTION", ProductionConfig),
        ("unknown", DevelopmentConfig),
    ],
)
def test_get_config_follows_app_env(monkeypatch, env, expected):
    monkeypatch.setenv("APP_ENV", env)
    assert get_config() is expected


def test_defaults_are_thirty_minutes_and_fourteen_days():
    assert TestingConfig.ACCESS_TOKEN_MINUTES == 30
    assert TestingConfig.REFRESH_TOKEN_DAYS == 14


def test_apply_jwt_settings_maps_issuer_audience_and_lifetime():
    config = {"ACCESS_TOKEN_MINUTES": 15, "JWT_ISSUER": "iss", "JWT_AUDIENCE": "aud"}

    apply_jwt_settings(config)

    assert config["JWT_ACCESS_TOKEN_EXPIRES"] == timedelta(minutes=15)
    assert config["JWT_DECODE_ISSUER"] == config["JWT_ENCODE_ISSUER"] == "iss"
    assert config["JWT_DECODE_AUDIENCE"] == config["JWT_ENCODE_AUDIENCE"] == "aud"


def test_production_refuses_placeholder_secrets():
    config = {
        "APP_ENV": "production",
        "ACCESS_TOKEN_MINUTES": 30,
        "REFRESH_TOKEN_DAYS": 14,
        "SECRET_KEY": "CHANGE_ME",
        "JWT_SECRET_KEY": "a-real-secret",
    }
    with pytest.raises(RuntimeError, match="SECRET_KEY"):
        validate_config(config)

    config["SECRET_KEY"] = "another-real-secret"
    validate_config(config)


def test_placeholders_are_fine_outside_production():
    validate_config(
        {
            "APP_ENV": "development",
            "ACCESS_TOKEN_MINUTES": 1,
            "REFRESH_TOKEN_DAYS": 1,
            "SECRET_KEY": "CHANGE_ME",
            "JWT_SECRET_KEY": "CHANGE_ME_JWT",
        }
    )


@pytest.mark.parametrize("key", ["ACCESS_TOKEN_MINUTES", "REFRESH_TOKEN_DAYS"])
def test_non_positive_lifetimes_are_rejected(key):
    config = {"APP_ENV": "testing", "ACCESS_TOKEN_MINUTES": 30, "REFRESH_TOKEN_DAYS": 14}
    config[key] = 0
    with pytest.raises(RuntimeError, match=key):
        validate_config(config)
