"""Application factory wiring Flask extensions, blueprints and the realtime hub."""

from __future__ import annotations

from flask import Flask

from fleetapi.core.config import BaseConfig, apply_jwt_settings, get_config, validate_config
from fleetapi.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application."""

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)
    apply_jwt_settings(app.config)
    validate_config(app.config)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from fleetapi.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from fleetapi.api import deps

    deps.init_app(app)

    from fleetapi.api import init_app as init_api

    init_api(app)

    from fleetapi import realtime

    realtime.init_app(app)

    from fleetapi.core import errors

    errors.init_app(app)

    from fleetapi import cli as app_cli

    app_cli.init_app(app)

    return app
