"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from fleetapi.api.deps import json_response, timing
from fleetapi.core.extensions import db, get_redis

bp = Blueprint("health", __name__)


def _redis_status() -> str:
    client = get_redis(current_app)
    if client is None:
        return "disabled"
    try:
        client.ping()
    except Exception:  # pragma: no cover - depends on Redis availability
        current_app.logger.exception("healthcheck.redis_error")
        return "fail"
    return "ok"


@bp.get("/health")
@timing
def healthcheck():
    """Return application, database and realtime relay health information."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:  # pragma: no cover - depends on DB backend
        current_app.logger.exception("healthcheck.db_error")
        db_status = "fail"
    payload = {
        "status": "ok",
        "db": db_status,
        "redis": _redis_status(),
        "version": current_app.config.get("APP_VERSION", "dev"),
        "commit": current_app.config.get("APP_COMMIT", "unknown"),
    }
    return json_response(payload)
