"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, jsonify, request

from revint.core.logger import ensure_request_id
from revint.realtime.hub import ConnectionHub
from revint.services._shared.context import RequestContext
from revint.services.container import Services

F = TypeVar("F", bound=Callable[..., Any])

SERVICES_KEY = "revint.services"
HUB_KEY = "revint.hub"


def get_services() -> Services:
    """Return the services wired by the application factory."""

    return cast(Services, current_app.extensions[SERVICES_KEY])


def get_hub() -> ConnectionHub:
    """Return the application's connection hub."""

    return cast(ConnectionHub, current_app.extensions[HUB_KEY])


def identity_cookie_name(session_uid: str | None) -> str:
    """Return the identity cookie name, one cookie per session."""

    base = current_app.config.get("IDENTITY_COOKIE_NAME", "uid")
    return f"{base}.{session_uid}" if session_uid else base


def request_context(session_uid: str | None = None) -> RequestContext:
    """Build the explicit service context from the current request.

    The identity marker is only read from the cookie of ``session_uid``, so a
    marker issued for one session is never presented to another.
    """

    header = current_app.config.get("CREDENTIAL_HEADER", "x-session-token")
    identity = request.cookies.get(identity_cookie_name(session_uid)) if session_uid else None
    return RequestContext(
        credential=request.headers.get(header) or None,
        identity=identity or None,
        request_id=ensure_request_id(),
        session_uid=session_uid,
    )


def apply_identity(response: Response, ctx: RequestContext) -> Response:
    """Set the session's identity cookie when the service issued a marker."""

    if ctx.issued_identity is None:
        return response
    cfg = current_app.config
    response.set_cookie(
        identity_cookie_name(ctx.session_uid),
        ctx.issued_identity,
        max_age=cfg.get("IDENTITY_COOKIE_MAX_AGE"),
        secure=bool(cfg.get("IDENTITY_COOKIE_SECURE", False)),
        httponly=True,
        samesite=cfg.get("IDENTITY_COOKIE_SAMESITE", "Lax"),
    )
    return response


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
