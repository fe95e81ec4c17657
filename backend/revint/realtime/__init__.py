"""Live session pipes: the connection hub and its WebSocket binding."""

from __future__ import annotations

from .hub import ConnectionHub, HubConnection

__all__ = ["ConnectionHub", "HubConnection"]
