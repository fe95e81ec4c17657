"""In-process registry of live connections, grouped by session.

Locking
-------
The registry lock guards bucket creation and removal; each bucket has its
own lock for membership changes and snapshots. The registry lock is always
taken before a bucket lock. Sends happen outside both locks, on a snapshot,
so a slow client never blocks registration.

The hub is single-process: connections held by another worker never see
its broadcasts.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from revint.services._shared.ports import Broadcaster
from revint.services.authorization.dto import Role

log = logging.getLogger(__name__)


class Connection(Protocol):
    """Anything that can push a text frame to a client."""

    def send(self, data: str) -> None: ...


@dataclass(frozen=True, slots=True, eq=False)
class HubConnection:
    """
    A registered connection.

    Compared by identity: the same client may hold several pipes with the
    same role and uid.
    """

    connection: Connection
    role: Role
    uid: str


@dataclass(slots=True)
class _Bucket:
    lock: threading.Lock = field(default_factory=threading.Lock)
    members: set[HubConnection] = field(default_factory=set)


def _dumps(message: Mapping[str, Any]) -> str:
    return json.dumps(dict(message), separators=(",", ":"))


class ConnectionHub(Broadcaster):
    """
    Fan state changes out to the audience connections of a session.

    Created by the application factory and stored in ``app.extensions``.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._buckets: dict[str, _Bucket] = {}

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def register(
        self, session_uid: str, connection: Connection, role: Role | str, uid: str
    ) -> HubConnection:
        entry = HubConnection(connection=connection, role=Role(role), uid=uid)
        with self._lock:
            bucket = self._buckets.setdefault(session_uid, _Bucket())
            with bucket.lock:
                bucket.members.add(entry)
        log.info(
            "hub.connected",
            extra={"session_uid": session_uid, "role": entry.role.value, "uid": uid},
        )
        return entry

    def deregister(self, session_uid: str, connection: Connection) -> bool:
        """
        Remove ``connection`` from the session.

        Idempotent: returns ``False`` when it was not registered.
        """
        removed: HubConnection | None = None
        with self._lock:
            bucket = self._buckets.get(session_uid)
            if bucket is None:
                return False
            with bucket.lock:
                for entry in bucket.members:
                    if entry.connection is connection:
                        removed = entry
                        break
                if removed is not None:
                    bucket.members.discard(removed)
                if not bucket.members:
                    del self._buckets[session_uid]
        if removed is None:
            return False
        log.info(
            "hub.disconnected",
            extra={"session_uid": session_uid, "role": removed.role.value, "uid": removed.uid},
        )
        return True

    def connections(self, session_uid: str, role: Role | str | None = None) -> list[HubConnection]:
        """Snapshot of the session's connections, optionally for one role."""
        with self._lock:
            bucket = self._buckets.get(session_uid)
            if bucket is None:
                return []
            with bucket.lock:
                members = list(bucket.members)
        if role is None:
            return members
        wanted = Role(role)
        return [entry for entry in members if entry.role is wanted]

    def close_all(self) -> int:
        """Drop every registration; returns how many were dropped."""
        with self._lock:
            buckets, self._buckets = self._buckets, {}
        dropped = 0
        for bucket in buckets.values():
            with bucket.lock:
                dropped += len(bucket.members)
                bucket.members.clear()
        if dropped:
            log.info("hub.closed connections=%d", dropped)
        return dropped

    # ------------------------------------------------------------------ #
    # Delivery
    # ------------------------------------------------------------------ #

    def _send(self, session_uid: str, entry: HubConnection, payload: str) -> bool:
        try:
            entry.connection.send(payload)
        except Exception:
            log.warning(
                "hub.send_failed",
                extra={"session_uid": session_uid, "role": entry.role.value, "uid": entry.uid},
                exc_info=True,
            )
            return False
        return True

    def broadcast(self, session_uid: str, message: Mapping[str, Any]) -> int:
        """
        Deliver ``message`` to every user connection of the session.

        Host connections get a ``delivered`` confirmation instead. A failing
        send is logged and skipped.

        :returns: Number of successful user deliveries.
        """
        snapshot = self.connections(session_uid)
        payload = _dumps(message)
        delivered = sum(
            1
            for entry in snapshot
            if entry.role is Role.USER and self._send(session_uid, entry, payload)
        )

        confirmation = _dumps(
            {"type": "delivered", "sessionUid": session_uid, "delivered": delivered}
        )
        for entry in snapshot:
            if entry.role is Role.HOST:
                self._send(session_uid, entry, confirmation)

        log.debug("hub.broadcast", extra={"session_uid": session_uid, "delivered": delivered})
        return delivered

    def handle_message(self, session_uid: str, role: Role | str, uid: str, data: Any) -> int:
        """
        Acknowledge an inbound frame on the sender's pipes.

        Inbound frames never reach other clients; state changes only travel
        through ``set_state``.
        """
        wanted = Role(role)
        echo = _dumps({"type": "echo", "data": data})
        return sum(
            1
            for entry in self.connections(session_uid, wanted)
            if entry.uid == uid and self._send(session_uid, entry, echo)
        )
