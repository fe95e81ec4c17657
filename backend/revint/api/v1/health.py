"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text

from revint.api.deps import get_services, json_response, timing
from revint.core.extensions import db, get_redis

bp = Blueprint("health", __name__)


def _store_status(backend: str) -> str:
    try:
        if backend == "sql":
            db.session.execute(text("SELECT 1"))
        elif backend == "redis":
            get_redis().ping()
    except Exception:  # pragma: no cover - depends on the store backend
        current_app.logger.exception("healthcheck.store_error", extra={"backend": backend})
        return "fail"
    return "ok"


@bp.get("/health")
@timing
def healthcheck():
    """Return application and document store health information."""

    backend = get_services().stores.backend
    version = current_app.config.get("APP_VERSION", "dev")
    commit = current_app.config.get("APP_COMMIT", "unknown")
    payload = {
        "status": "ok",
        "store": backend,
        "store_status": _store_status(backend),
        "version": version,
        "commit": commit,
    }
    return json_response(payload)
