"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Signing keys that must never reach a production deployment
PLACEHOLDER_SECRETS: Final[frozenset[str]] = frozenset(
    {"", "CHANGE_ME", "CHANGE_ME_JWT", "changeme", "secret"}
)

# Loads .env in development (no-op when the file is missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret. Defaults to a development placeholder.
    JWT_SECRET_KEY: str
        Key used by ``flask-jwt-extended`` for signing access tokens.
    JWT_ISSUER / JWT_AUDIENCE: str
        Issuer and audience stamped into every access token and enforced on
        decode.
    ACCESS_TOKEN_MINUTES: int
        Access token lifetime (30 minutes by default).
    REFRESH_TOKEN_DAYS: int
        Refresh token lifetime (14 days by default).
    PASSWORD_MIN_LENGTH: int
        Minimum password length accepted at registration.
    PASSWORD_HASH_METHOD: str
        Method string passed to :func:`werkzeug.security.generate_password_hash`.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    REDIS_URL: str | None
        Optional Redis used to relay realtime events between workers.
    REALTIME_REDIS_CHANNEL: str
        Pub/sub channel name for the realtime relay.
    OKTA_DOMAIN / OKTA_API_TOKEN: str
        Identity provider settings. Federation is disabled when either is empty.
    OKTA_TIMEOUT_SECONDS: float
        Upper bound for each identity provider HTTP call.
    ADMIN_EMAIL / ADMIN_PASSWORD: str
        Defaults for the ``flask identity create-admin`` command.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "fleet-management-api")
    JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "fleet-management-clients")
    JWT_TOKEN_LOCATION = ["headers"]

    # Token lifetimes
    ACCESS_TOKEN_MINUTES = env_int("ACCESS_TOKEN_MINUTES", 30)
    REFRESH_TOKEN_DAYS = env_int("REFRESH_TOKEN_DAYS", 14)

    # Password policy
    PASSWORD_MIN_LENGTH = env_int("PASSWORD_MIN_LENGTH", 12)
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    SQLALCHEMY_ENGINE_OPTIONS: dict[str, Any] = {"pool_pre_ping": True}

    # Realtime
    REDIS_URL = os.getenv("REDIS_URL") or None
    REALTIME_REDIS_CHANNEL = os.getenv("REALTIME_REDIS_CHANNEL", "fleet:realtime")
    SOCK_SERVER_OPTIONS = {"ping_interval": 25}

    # Identity federation
    OKTA_DOMAIN = os.getenv("OKTA_DOMAIN", "")
    OKTA_API_TOKEN = os.getenv("OKTA_API_TOKEN", "")
    OKTA_TIMEOUT_SECONDS = float(os.getenv("OKTA_TIMEOUT_SECONDS", "5"))

    # Bootstrap administrator
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@fleet.local")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Build metadata surfaced by /health
    APP_VERSION = os.getenv("APP_VERSION", "dev")
    APP_COMMIT = os.getenv("APP_COMMIT", "unknown")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and honors ``SQLALCHEMY_ECHO`` for verbose
    SQL logging when requested.
    """

    APP_ENV = "development"
    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Uses a cheap password hash so suites stay fast.
    - Never talks to Redis or the identity provider unless a test opts in.
    """

    APP_ENV = "testing"
    TESTING = True
    DEBUG = False
    SECRET_KEY = "testing-secret"
    JWT_SECRET_KEY = "testing-jwt-secret-with-enough-entropy"
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ENGINE_OPTIONS: dict[str, Any] = {}
    SQLALCHEMY_ECHO = False
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    REDIS_URL = None
    OKTA_DOMAIN = ""
    OKTA_API_TOKEN = ""
    PROPAGATE_EXCEPTIONS = False
    LOG_LEVEL = "WARNING"


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled. :func:`validate_config` refuses to
    boot with placeholder secrets.
    """

    APP_ENV = "production"
    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def apply_jwt_settings(config: Any) -> None:
    """Translate token settings into the keys Flask-JWT-Extended reads.

    :param config: Mutable Flask config mapping.
    """
    config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(minutes=int(config["ACCESS_TOKEN_MINUTES"]))
    config["JWT_ENCODE_ISSUER"] = config.get("JWT_ISSUER")
    config["JWT_DECODE_ISSUER"] = config.get("JWT_ISSUER")
    config["JWT_ENCODE_AUDIENCE"] = config.get("JWT_AUDIENCE")
    config["JWT_DECODE_AUDIENCE"] = config.get("JWT_AUDIENCE")


def validate_config(config: Any) -> None:
    """Refuse unsafe settings before the app starts serving.

    :param config: Flask config mapping.
    :raises RuntimeError: When production runs with placeholder secrets or
        non-positive token lifetimes.
    """
    if int(config.get("ACCESS_TOKEN_MINUTES", 0)) <= 0:
        raise RuntimeError("ACCESS_TOKEN_MINUTES must be a positive integer.")
    if int(config.get("REFRESH_TOKEN_DAYS", 0)) <= 0:
        raise RuntimeError("REFRESH_TOKEN_DAYS must be a positive integer.")

    if str(config.get("APP_ENV", "")).lower() != "production":
        return
    for key in ("SECRET_KEY", "JWT_SECRET_KEY"):
        if str(config.get(key) or "").strip() in PLACEHOLDER_SECRETS:
            raise RuntimeError(f"{key} must be set to a non-placeholder value in production.")
