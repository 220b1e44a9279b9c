"""Group naming for realtime subscriptions (``owner-{id}``, ``fleet-{id}``, ``vehicle-{id}``)."""

from __future__ import annotations

import re
from dataclasses import dataclass

OWNER = "owner"
FLEET = "fleet"
VEHICLE = "vehicle"

_GROUP_RE = re.compile(r"^(owner|fleet|vehicle)-([A-Za-z0-9][A-Za-z0-9_-]{0,63})$")


class InvalidGroupError(ValueError):
    """Raised for group names outside the ``<kind>-<id>`` scheme."""


@dataclass(frozen=True, slots=True)
class GroupKey:
    kind: str
    ident: str

    def __str__(self) -> str:
        return f"{self.kind}-{self.ident}"


def owner_group(owner_id: int | str) -> str:
    return f"{OWNER}-{owner_id}"


def fleet_group(fleet_id: int | str) -> str:
    return f"{FLEET}-{fleet_id}"


def vehicle_group(vehicle_id: int | str) -> str:
    return f"{VEHICLE}-{vehicle_id}"


def parse_group(name: str) -> GroupKey:
    """
    Split a group name into kind and id.

    :param name: Group name such as ``"fleet-42"``.
    :raises InvalidGroupError: When the prefix is unknown or the id is empty
        or contains unexpected characters.
    """
    match = _GROUP_RE.match((name or "").strip())
    if match is None:
        raise InvalidGroupError(f"Invalid group name: {name!r}")
    return GroupKey(kind=match.group(1), ident=match.group(2))
