"""
Domain event fan-out for fleets, vehicles and telemetry.

Fleet events go to ``owner-{ownerId}``. Vehicle events go to both
``fleet-{fleetId}`` and ``owner-{ownerId}``, so a client subscribed to both
receives the event twice; both copies carry the same ``eventId`` so clients
can drop the duplicate. Telemetry goes to ``vehicle-{vehicleId}``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from fleetapi.realtime.groups import fleet_group, owner_group, vehicle_group
from fleetapi.realtime.hub import FleetHub

FLEET_CREATED = "FleetCreated"
FLEET_UPDATED = "FleetUpdated"
FLEET_DELETED = "FleetDeleted"
VEHICLE_CREATED = "VehicleCreated"
VEHICLE_UPDATED = "VehicleUpdated"
VEHICLE_DELETED = "VehicleDeleted"
TELEMETRY_UPDATED = "TelemetryUpdated"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FleetEventPublisher:
    """
    Called by fleet/vehicle/telemetry services after a successful mutation.

    :param hub: Hub that owns the connections.
    :param clock: Source of the ``occurredAt`` timestamp.
    """

    def __init__(self, hub: FleetHub, *, clock: Callable[[], datetime] | None = None) -> None:
        self.hub = hub
        self._clock = clock or _utcnow

    def envelope(self, data: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "eventId": str(uuid4()),
            "occurredAt": self._clock().isoformat(),
            "data": dict(data),
        }

    # ------------------------------ Fleets ------------------------------ #

    def fleet_created(self, owner_id: int, fleet: Mapping[str, Any]) -> int:
        return self.hub.publish(owner_group(owner_id), FLEET_CREATED, self.envelope(fleet))

    def fleet_updated(self, owner_id: int, fleet: Mapping[str, Any]) -> int:
        return self.hub.publish(owner_group(owner_id), FLEET_UPDATED, self.envelope(fleet))

    def fleet_deleted(self, owner_id: int, fleet_id: int) -> int:
        payload = self.envelope({"fleetId": fleet_id})
        return self.hub.publish(owner_group(owner_id), FLEET_DELETED, payload)

    # ----------------------------- Vehicles ----------------------------- #

    def _vehicle_event(self, event: str, owner_id: int, fleet_id: int, data: Mapping[str, Any]) -> int:
        payload = self.envelope(data)
        delivered = self.hub.publish(fleet_group(fleet_id), event, payload)
        delivered += self.hub.publish(owner_group(owner_id), event, payload)
        return delivered

    def vehicle_created(self, owner_id: int, fleet_id: int, vehicle: Mapping[str, Any]) -> int:
        return self._vehicle_event(VEHICLE_CREATED, owner_id, fleet_id, vehicle)

    def vehicle_updated(self, owner_id: int, fleet_id: int, vehicle: Mapping[str, Any]) -> int:
        return self._vehicle_event(VEHICLE_UPDATED, owner_id, fleet_id, vehicle)

    def vehicle_deleted(self, owner_id: int, fleet_id: int, vehicle_id: int) -> int:
        data = {"vehicleId": vehicle_id, "fleetId": fleet_id}
        return self._vehicle_event(VEHICLE_DELETED, owner_id, fleet_id, data)

    # ---------------------------- Telemetry ----------------------------- #

    def telemetry_received(self, vehicle_id: int, reading: Mapping[str, Any]) -> int:
        return self.hub.publish(vehicle_group(vehicle_id), TELEMETRY_UPDATED, self.envelope(reading))
