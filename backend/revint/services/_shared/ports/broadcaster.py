from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol


class Broadcaster(Protocol):
    """Port for pushing a message to the live audience of a session."""

    def broadcast(self, session_uid: str, message: Mapping[str, Any]) -> int: ...


class NullBroadcaster(Broadcaster):
    """Broadcaster with no listeners (processes without live pipes)."""

    def broadcast(self, session_uid: str, message: Mapping[str, Any]) -> int:
        return 0
