"""WebSocket binding of the connection hub (flask-sock).

Route: ``/ws/v1/session/<session_uid>/<role>/<uid>/pipe``. A pipe opens only
for a uid registered under the session's token for that role.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

from flask import Blueprint

from revint.api.deps import get_hub, get_services
from revint.core.extensions import sock
from revint.realtime.hub import ConnectionHub
from revint.services.authorization.dto import Role
from revint.services.authorization.service import AuthorizationGuard

log = logging.getLogger(__name__)

# Application close codes (4000-4999 are reserved for applications)
CLOSE_FORBIDDEN = 4003
CLOSE_NOT_FOUND = 4004

bp = Blueprint("pipes", __name__)


class Pipe(Protocol):
    def send(self, data: str) -> None: ...

    def receive(self, timeout: float | None = None) -> Any: ...

    def close(self, reason: int | None = None, message: str | None = None) -> None: ...


class PipeRejected(Exception):
    """The pipe may not open; ``code`` is the WebSocket close code."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def authorize_pipe(guard: AuthorizationGuard, session_uid: str, role: str, uid: str) -> Role:
    """
    Check that ``uid`` may listen on the session as ``role``.

    :raises PipeRejected: Unknown role or unregistered uid (4003), unknown
        session (4004).
    """
    try:
        wanted = Role(role)
    except ValueError as exc:
        raise PipeRejected(CLOSE_FORBIDDEN, "unknown role") from exc
    session = guard.find_session(session_uid)
    if session is None:
        raise PipeRejected(CLOSE_NOT_FOUND, "session not found")
    token = session.token if wanted is Role.HOST else session.user_token
    if not guard.is_registered(wanted, token, uid):
        raise PipeRejected(CLOSE_FORBIDDEN, "not registered")
    return wanted


def serve_pipe(
    ws: Pipe,
    *,
    hub: ConnectionHub,
    guard: AuthorizationGuard,
    session_uid: str,
    role: str,
    uid: str,
) -> None:
    """Register ``ws`` with the hub and pump inbound frames until it closes."""
    try:
        wanted = authorize_pipe(guard, session_uid, role, uid)
    except PipeRejected as exc:
        log.info(
            "pipe.rejected",
            extra={"session_uid": session_uid, "role": role, "uid": uid},
        )
        ws.close(reason=exc.code, message=exc.message)
        return

    hub.register(session_uid, ws, wanted, uid)
    try:
        while True:
            raw = ws.receive()
            if raw is None:
                continue
            try:
                data = json.loads(raw)
            except ValueError:
                log.warning(
                    "pipe.malformed_frame",
                    extra={"session_uid": session_uid, "role": wanted.value, "uid": uid},
                )
                continue
            hub.handle_message(session_uid, wanted, uid, data)
    finally:
        hub.deregister(session_uid, ws)


@sock.route("/session/<session_uid>/<role>/<uid>/pipe", bp=bp)
def pipe(ws, session_uid: str, role: str, uid: str):
    serve_pipe(
        ws,
        hub=get_hub(),
        guard=get_services().guard,
        session_uid=session_uid,
        role=role,
        uid=uid,
    )
