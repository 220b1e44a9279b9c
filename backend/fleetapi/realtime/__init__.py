"""Realtime broadcast: connection groups, hub, domain event publisher, WebSocket transport."""

from __future__ import annotations

from flask import Flask

from fleetapi.realtime.events import FleetEventPublisher
from fleetapi.realtime.hub import FleetHub
from fleetapi.realtime.registry import ConnectionGroupRegistry
from fleetapi.realtime.relay import RedisEventRelay

HUB_KEY = "fleet_hub"
PUBLISHER_KEY = "fleet_events"


def init_app(app: Flask) -> None:
    """
    Build the app's hub (one per app, no module-level instance) and mount
    the WebSocket endpoint.

    A Redis relay is wired in when the app has a Redis client; the listener
    thread is not started under ``TESTING``.
    """
    from fleetapi.core.extensions import get_redis
    from fleetapi.realtime.transport import bp

    relay = None
    client = get_redis(app)
    if client is not None:
        relay = RedisEventRelay(client, app.config.get("REALTIME_REDIS_CHANNEL", "fleet:realtime"))

    hub = FleetHub(ConnectionGroupRegistry(), relay=relay)
    if relay is not None:
        if app.config.get("TESTING"):
            relay.bind(hub)
        else:
            relay.start(hub)

    app.extensions[HUB_KEY] = hub
    app.extensions[PUBLISHER_KEY] = FleetEventPublisher(hub)
    app.register_blueprint(bp)


def get_hub(app: Flask) -> FleetHub:
    return app.extensions[HUB_KEY]


def get_event_publisher(app: Flask) -> FleetEventPublisher:
    """Publisher that fleet/vehicle/telemetry services call after a commit."""
    return app.extensions[PUBLISHER_KEY]


__all__ = [
    "ConnectionGroupRegistry",
    "FleetEventPublisher",
    "FleetHub",
    "RedisEventRelay",
    "get_event_publisher",
    "get_hub",
    "init_app",
]
