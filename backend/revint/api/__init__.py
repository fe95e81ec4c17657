"""API blueprint package aggregating versioned endpoints."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def register_blueprint_group(
    app: Flask,
    *,
    base_prefix: str,
    entries: Iterable[tuple[Blueprint, str]],
) -> None:
    """Register related blueprints beneath a common prefix.

    Parameters
    ----------
    app:
        Application instance receiving the blueprints.
    base_prefix:
        Prefix applied to all entries, such as ``"/api/v1"`` or ``"/ws/v1"``.
    entries:
        Iterable of ``(blueprint, relative_prefix)`` pairs where
        ``relative_prefix`` is appended to ``base_prefix``.
    """

    for bp, rel_prefix in entries:
        full_prefix = "/".join(
            segment for segment in [base_prefix.rstrip("/"), rel_prefix.strip("/")] if segment
        )
        full_prefix = "/" + full_prefix if not full_prefix.startswith("/") else full_prefix
        app.register_blueprint(bp, url_prefix=full_prefix)


def init_app(app: Flask) -> None:
    """Register the HTTP API and the live pipes on the Flask app."""

    api_base = app.config.get("API_BASE_PREFIX", "/api")
    ws_base = app.config.get("WS_BASE_PREFIX", "/ws")

    from revint.api.v1 import API_VERSION as V1
    from revint.api.v1 import REGISTRY as V1_REGISTRY
    from revint.realtime.ws import bp as pipes_bp

    register_blueprint_group(app, base_prefix=f"{api_base}/{V1}", entries=V1_REGISTRY)
    register_blueprint_group(app, base_prefix=f"{ws_base}/{V1}", entries=[(pipes_bp, "")])


__all__ = ["init_app", "register_blueprint_group"]
