"""
WebSocket endpoint for the fleet hub (``/hubs/fleet``).

Client frames are JSON objects:

* ``{"type": "join", "group": "fleet-7"}`` / ``{"type": "leave", ...}``
* ``{"type": "subscribe", "vehicleIds": [1, 2]}`` / ``{"type": "unsubscribe", ...}``
* ``{"type": "ping"}``

Server frames are ``{"event": <name>, "data": <payload>}``.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Any
from uuid import uuid4

from flask import Blueprint, current_app, request
from simple_websocket import ConnectionClosed

from fleetapi.core.extensions import sock
from fleetapi.realtime.groups import vehicle_group
from fleetapi.realtime.hub import FleetHub
from fleetapi.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ValidationError,
)
from fleetapi.services.auth.tokens import Principal

log = logging.getLogger(__name__)

bp = Blueprint("realtime", __name__)

ERROR = "Error"
PONG = "Pong"
POLICY_VIOLATION = 1008


class WebSocketConnection:
    """Hub connection backed by a flask-sock socket; sends are serialised."""

    def __init__(self, ws: Any, principal: Principal, connection_id: str | None = None) -> None:
        self.id = connection_id or uuid4().hex
        self.principal = principal
        self._ws = ws
        self._lock = threading.Lock()

    def send(self, event: str, payload: Any) -> None:
        message = json.dumps({"event": event, "data": payload}, default=str)
        with self._lock:
            self._ws.send(message)


def extract_access_token() -> str:
    """Read the bearer token from ``?access_token=`` or the Authorization header."""
    token = request.args.get("access_token", "").strip()
    if token:
        return token
    header = request.headers.get("Authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer":
        return value.strip()
    return ""


def _vehicle_groups(frame: dict[str, Any]) -> list[str]:
    ids = frame.get("vehicleIds")
    if not isinstance(ids, list) or not ids:
        raise ValidationError("vehicleIds must be a non-empty list.", {"vehicleIds": ["Required."]})
    return [vehicle_group(vid) for vid in ids]


def handle_frame(hub: FleetHub, connection: WebSocketConnection, raw: str | bytes) -> None:
    """
    Apply one client frame to ``hub``.

    Bad frames and rejected joins are answered with an ``Error`` event; the
    socket stays open.
    """
    try:
        frame = json.loads(raw)
    except ValueError:
        frame = None
    if not isinstance(frame, dict):
        connection.send(ERROR, {"message": "Frames must be JSON objects."})
        return

    kind = str(frame.get("type", "")).lower()
    try:
        if kind == "join":
            hub.join_group(connection.id, str(frame.get("group", "")))
        elif kind == "leave":
            hub.leave_group(connection.id, str(frame.get("group", "")))
        elif kind == "subscribe":
            for group in _vehicle_groups(frame):
                hub.join_group(connection.id, group)
        elif kind == "unsubscribe":
            for group in _vehicle_groups(frame):
                hub.leave_group(connection.id, group)
        elif kind == "ping":
            connection.send(PONG, {})
        else:
            connection.send(ERROR, {"message": f"Unknown frame type: {kind!r}."})
    except (ValidationError, AuthorizationError) as exc:
        log.info("hub.frame_rejected", extra={"connection_id": connection.id, "event": kind})
        connection.send(ERROR, {"message": str(exc)})


def run_session(ws: Any) -> None:
    """Authenticate, register with the hub, then pump client frames until close."""
    from fleetapi.api.deps import get_token_issuer
    from fleetapi.realtime import get_hub

    try:
        principal = get_token_issuer().verify_access_token(extract_access_token())
    except AuthenticationError:
        log.info("hub.rejected_unauthenticated")
        ws.close(reason=POLICY_VIOLATION, message="Unauthorized")
        return

    hub = get_hub(current_app)
    connection = WebSocketConnection(ws, principal)
    hub.connect(connection)
    try:
        while True:
            raw = ws.receive()
            if raw is None:
                continue
            handle_frame(hub, connection, raw)
    except ConnectionClosed:
        pass
    finally:
        hub.disconnect(connection.id)


# Sock.route's decorator does not hand the function back.
sock.route("/hubs/fleet", bp=bp)(run_session)
