"""Redis pub/sub relay so every worker process delivers hub broadcasts."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError  # type: ignore[import-untyped]

if TYPE_CHECKING:
    from fleetapi.realtime.hub import FleetHub

log = logging.getLogger(__name__)


class RedisEventRelay:
    """
    Publish hub events on a Redis channel and replay them into the local hub.

    Each worker subscribes once (:meth:`start`); a publish from any worker
    reaches every worker, including the publisher, which then delivers to
    its own connections.

    :param client: Connected Redis client.
    :param channel: Pub/sub channel name.
    """

    def __init__(self, client: redis.Redis, channel: str) -> None:
        self.client = client
        self.channel = channel
        self._hub: FleetHub | None = None
        self._pubsub: Any = None
        self._thread: Any = None

    def publish(self, group: str, event: str, payload: Any) -> int:
        """
        Send one event to every subscribed worker.

        A Redis outage is logged and reported as zero subscribers.

        :returns: Number of subscribers that received the message.
        """
        message = json.dumps({"group": group, "event": event, "payload": payload}, default=str)
        try:
            return int(self.client.publish(self.channel, message))
        except RedisError:
            log.warning(
                "relay.publish_failed", extra={"group": group, "event": event}, exc_info=True
            )
            return 0

    def bind(self, hub: FleetHub) -> None:
        self._hub = hub

    def start(self, hub: FleetHub, *, sleep_time: float = 0.05) -> None:
        """Subscribe and dispatch messages to ``hub`` from a daemon thread."""
        self.bind(hub)
        self._pubsub = self.client.pubsub(ignore_subscribe_messages=True)
        self._pubsub.subscribe(**{self.channel: self.dispatch})
        self._thread = self._pubsub.run_in_thread(sleep_time=sleep_time, daemon=True)
        log.info("relay.started", extra={"group": self.channel})

    def stop(self) -> None:
        if self._thread is not None:
            self._thread.stop()
            self._thread = None
        if self._pubsub is not None:
            self._pubsub.close()
            self._pubsub = None

    def dispatch(self, message: dict[str, Any]) -> int:
        """
        Deliver one pub/sub message to the bound hub.

        Malformed messages are logged and skipped so the listener thread
        keeps running.

        :returns: Local delivery count.
        """
        if self._hub is None:
            raise RuntimeError("RedisEventRelay.dispatch called before bind()/start().")
        raw = message.get("data")
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            body = json.loads(raw)
            group, event, payload = body["group"], body["event"], body.get("payload")
        except (TypeError, ValueError, KeyError):
            log.warning("relay.malformed_message", extra={"group": self.channel})
            return 0
        return self._hub.broadcast(group, event, payload)
