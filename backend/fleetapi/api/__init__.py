"""API blueprint package aggregating versioned endpoints."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def register_blueprint_group(
    app: Flask,
    *,
    base_prefix: str,
    entries: Iterable[tuple[Blueprint, str]],
) -> None:
    """Register related blueprints beneath a common prefix.

    Parameters
    ----------
    app:
        Application instance receiving the blueprints.
    base_prefix:
        Prefix shared by all entries, e.g. ``"/api/v1"``.
    entries:
        Iterable of ``(blueprint, relative_prefix)`` pairs. An empty relative
        prefix mounts the blueprint at ``base_prefix`` itself.
    """

    for bp, rel_prefix in entries:
        segments = [base_prefix.strip("/"), rel_prefix.strip("/")]
        full_prefix = "/" + "/".join(segment for segment in segments if segment)
        app.register_blueprint(bp, url_prefix=full_prefix)


def init_app(app: Flask) -> None:
    """Register the available API versions on the Flask app."""

    api_base = app.config.get("API_BASE_PREFIX", "/api")

    from fleetapi.api.v1 import API_VERSION as V1
    from fleetapi.api.v1 import REGISTRY as V1_REGISTRY

    register_blueprint_group(app, base_prefix=f"{api_base}/{V1}", entries=V1_REGISTRY)


__all__ = ["init_app", "register_blueprint_group"]
