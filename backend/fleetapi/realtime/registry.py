"""Thread-safe map of live connections to the groups they belong to."""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import Any, Protocol

from fleetapi.services.auth.tokens import Principal


class Connection(Protocol):
    """A live client connection the hub can push events to."""

    id: str
    principal: Principal

    def send(self, event: str, payload: Any) -> None:
        """Deliver one event; raise if the connection is gone."""
        ...


class ConnectionGroupRegistry:
    """
    Two-way index between connections and group names.

    All mutations take the same lock; :meth:`members` returns a snapshot so
    callers can send without holding it.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._connections: dict[str, Connection] = {}
        self._groups: defaultdict[str, set[str]] = defaultdict(set)
        self._memberships: defaultdict[str, set[str]] = defaultdict(set)

    def add(self, connection: Connection) -> None:
        with self._lock:
            self._connections[connection.id] = connection

    def get(self, connection_id: str) -> Connection | None:
        with self._lock:
            return self._connections.get(connection_id)

    def remove(self, connection_id: str) -> frozenset[str]:
        """
        Forget a connection and every membership it held.

        :returns: Groups the connection was in (empty if it was unknown).
        """
        with self._lock:
            self._connections.pop(connection_id, None)
            groups = self._memberships.pop(connection_id, set())
            for group in groups:
                members = self._groups.get(group)
                if members is not None:
                    members.discard(connection_id)
                    if not members:
                        del self._groups[group]
            return frozenset(groups)

    def join(self, connection_id: str, group: str) -> bool:
        """
        Add ``connection_id`` to ``group``.

        :returns: ``True`` if membership changed, ``False`` if already a member.
        :raises KeyError: If the connection is not registered.
        """
        with self._lock:
            if connection_id not in self._connections:
                raise KeyError(connection_id)
            if group in self._memberships[connection_id]:
                return False
            self._memberships[connection_id].add(group)
            self._groups[group].add(connection_id)
            return True

    def leave(self, connection_id: str, group: str) -> bool:
        """
        Remove ``connection_id`` from ``group``.

        :returns: ``True`` if membership changed, ``False`` if it was not a member.
        """
        with self._lock:
            groups = self._memberships.get(connection_id)
            if not groups or group not in groups:
                return False
            groups.discard(group)
            members = self._groups.get(group)
            if members is not None:
                members.discard(connection_id)
                if not members:
                    del self._groups[group]
            return True

    def members(self, group: str) -> list[Connection]:
        """Snapshot of the connections currently in ``group``."""
        with self._lock:
            return [
                self._connections[cid]
                for cid in sorted(self._groups.get(group, ()))
                if cid in self._connections
            ]

    def groups_of(self, connection_id: str) -> frozenset[str]:
        with self._lock:
            return frozenset(self._memberships.get(connection_id, ()))

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)

    def __contains__(self, connection_id: object) -> bool:
        with self._lock:
            return connection_id in self._connections
