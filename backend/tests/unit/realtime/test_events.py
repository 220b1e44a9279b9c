from __future__ import annotations

from datetime import datetime, timezone

import pytest

from fleetapi.realtime.events import (
    FLEET_CREATED,
    TELEMETRY_UPDATED,
    VEHICLE_CREATED,
    VEHICLE_DELETED,
    FleetEventPublisher,
)

FIXED = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def publisher(hub) -> FleetEventPublisher:
    return FleetEventPublisher(hub, clock=lambda: FIXED)


def test_envelope_shape(publisher):
    envelope = publisher.envelope({"id": 1})
    assert set(envelope) == {"eventId", "occurredAt", "data"}
    assert envelope["occurredAt"] == "2026-06-01T12:00:00+00:00"
    assert envelope["data"] == {"id": 1}


def test_fleet_events_go_to_owner_group(publisher, connect):
    owner = connect("c1", owner_id=1)
    other = connect("c2", owner_id=2)

    publisher.fleet_created(1, {"id": 10, "name": "North"})

    [payload] = owner.events(FLEET_CREATED)
    assert payload["data"] == {"id": 10, "name": "North"}
    assert other.events(FLEET_CREATED) == []


def test_vehicle_created_fans_out_to_fleet_and_owner(publisher, hub, connect):
    owner_only = connect("owner", owner_id=1)
    fleet_only = connect("fleet", owner_id=None, roles=("FleetManager",))
    hub.join_group("fleet", "fleet-7")
    both = connect("both", owner_id=1)
    hub.join_group("both", "fleet-7")

    delivered = publisher.vehicle_created(1, 7, {"id": 99})

    assert delivered == 4
    assert len(owner_only.events(VEHICLE_CREATED)) == 1
    assert len(fleet_only.events(VEHICLE_CREATED)) == 1
    twice = both.events(VEHICLE_CREATED)
    assert len(twice) == 2
    assert twice[0]["eventId"] == twice[1]["eventId"]


def test_vehicle_deleted_payload(publisher, connect):
    owner = connect("c1", owner_id=1)
    publisher.vehicle_deleted(1, 7, 99)
    [payload] = owner.events(VEHICLE_DELETED)
    assert payload["data"] == {"vehicleId": 99, "fleetId": 7}


def test_telemetry_goes_to_vehicle_group_only(publisher, hub, connect):
    watcher = connect("c1", owner_id=1)
    hub.join_group("c1", "vehicle-99")
    bystander = connect("c2", owner_id=1)

    publisher.telemetry_received(99, {"speedKph": 80})

    assert watcher.events(TELEMETRY_UPDATED)[0]["data"] == {"speedKph": 80}
    assert bystander.events(TELEMETRY_UPDATED) == []
