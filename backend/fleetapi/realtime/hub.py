from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol

from fleetapi.realtime.groups import (
    OWNER,
    GroupKey,
    InvalidGroupError,
    owner_group,
    parse_group,
)
from fleetapi.realtime.registry import Connection, ConnectionGroupRegistry
from fleetapi.services._shared.errors import AuthorizationError, ValidationError
from fleetapi.services.auth.tokens import Principal

log = logging.getLogger(__name__)

GroupAuthorizer = Callable[[Principal, GroupKey], bool]

# Server -> client event names
CONNECTED = "Connected"
JOINED_GROUP = "JoinedGroup"
LEFT_GROUP = "LeftGroup"


class EventRelay(Protocol):
    """Fans a broadcast out to every worker process (each delivers locally)."""

    def publish(self, group: str, event: str, payload: Any) -> int: ...


def allow_all(principal: Principal, key: GroupKey) -> bool:
    return True


class FleetHub:
    """
    Group-based push hub for fleet, vehicle and telemetry events.

    Connections join ``owner-{id}`` automatically on connect and may join or
    leave ``fleet-*`` and ``vehicle-*`` groups. Joining another tenant's
    ``owner-*`` group requires the ``Administrator`` role; access to
    ``fleet-*``/``vehicle-*`` groups is decided by ``authorizer``.

    :param registry: Connection/group index; a fresh one by default.
    :param relay: Optional cross-process relay used by :meth:`publish`.
    :param authorizer: Extra check for non-owner groups.
    """

    def __init__(
        self,
        registry: ConnectionGroupRegistry | None = None,
        *,
        relay: EventRelay | None = None,
        authorizer: GroupAuthorizer | None = None,
    ) -> None:
        self.registry = registry or ConnectionGroupRegistry()
        self.relay = relay
        self.authorizer = authorizer or allow_all

    # ------------------------------------------------------------------ #
    # Connection lifecycle
    # ------------------------------------------------------------------ #

    def connect(self, connection: Connection) -> None:
        """Register ``connection``, join its tenant group and greet it."""
        self.registry.add(connection)
        owner_id = connection.principal.owner_id
        if owner_id is not None:
            self.registry.join(connection.id, owner_group(owner_id))
        log.info(
            "hub.connected",
            extra={"connection_id": connection.id, "user_id": connection.principal.subject_id},
        )
        self._send(
            connection,
            CONNECTED,
            {
                "ownerId": owner_id,
                "connectionId": connection.id,
                "groups": sorted(self.registry.groups_of(connection.id)),
            },
        )

    def disconnect(self, connection_id: str) -> None:
        groups = self.registry.remove(connection_id)
        log.info("hub.disconnected", extra={"connection_id": connection_id, "group": sorted(groups)})

    # ------------------------------------------------------------------ #
    # Group membership
    # ------------------------------------------------------------------ #

    def join_group(self, connection_id: str, group: str) -> bool:
        """
        Add the connection to ``group`` and confirm with ``JoinedGroup``.

        :returns: ``True`` if membership changed.
        :raises ValidationError: Malformed group name.
        :raises AuthorizationError: Group belongs to another tenant.
        :raises KeyError: Unknown connection.
        """
        connection = self._require(connection_id)
        key = self._parse(group)
        self._authorize(connection.principal, key)
        changed = self.registry.join(connection_id, str(key))
        log.debug("hub.joined", extra={"connection_id": connection_id, "group": str(key)})
        self._send(connection, JOINED_GROUP, {"group": str(key)})
        return changed

    def leave_group(self, connection_id: str, group: str) -> bool:
        """
        Remove the connection from ``group`` and confirm with ``LeftGroup``.

        Leaving a group the connection is not in is a no-op (still confirmed).
        """
        connection = self._require(connection_id)
        key = self._parse(group)
        changed = self.registry.leave(connection_id, str(key))
        log.debug("hub.left", extra={"connection_id": connection_id, "group": str(key)})
        self._send(connection, LEFT_GROUP, {"group": str(key)})
        return changed

    # ------------------------------------------------------------------ #
    # Delivery
    # ------------------------------------------------------------------ #

    def publish(self, group: str, event: str, payload: Any) -> int:
        """
        Entry point for domain events.

        With a relay configured the event goes through it so every worker
        delivers to its own connections; otherwise it is delivered locally.

        :returns: Relay subscriber count or local delivery count.
        """
        if self.relay is not None:
            return self.relay.publish(group, event, payload)
        return self.broadcast(group, event, payload)

    def broadcast(self, group: str, event: str, payload: Any) -> int:
        """
        Deliver ``event`` to every local connection in ``group``.

        A failing connection is logged and dropped; delivery to the rest of
        the group continues.

        :returns: Number of successful deliveries.
        """
        delivered = 0
        for connection in self.registry.members(group):
            if self._send(connection, event, payload):
                delivered += 1
        log.debug(
            "hub.broadcast",
            extra={"group": group, "event": event, "delivered": delivered},
        )
        return delivered

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _send(self, connection: Connection, event: str, payload: Any) -> bool:
        try:
            connection.send(event, payload)
        except Exception:
            log.warning(
                "hub.delivery_failed",
                extra={"connection_id": connection.id, "event": event},
                exc_info=True,
            )
            self.registry.remove(connection.id)
            return False
        return True

    def _require(self, connection_id: str) -> Connection:
        connection = self.registry.get(connection_id)
        if connection is None:
            raise KeyError(connection_id)
        return connection

    @staticmethod
    def _parse(group: str) -> GroupKey:
        try:
            return parse_group(group)
        except InvalidGroupError as exc:
            raise ValidationError(str(exc), {"group": [str(exc)]}) from exc

    def _authorize(self, principal: Principal, key: GroupKey) -> None:
        if key.kind == OWNER:
            own = principal.owner_id is not None and key.ident == str(principal.owner_id)
            if not (own or principal.is_administrator):
                raise AuthorizationError("Cannot join another owner's group.")
            return
        if not self.authorizer(principal, key):
            raise AuthorizationError(f"Cannot join group {key}.")
