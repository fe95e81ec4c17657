"""CORS configuration helper for API resources."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS


def init_app(app: Flask) -> None:
    """Configure CORS for the session API based on application config.

    Parameters
    ----------
    app: flask.Flask
        Application whose ``CORS_ORIGINS`` and ``CORS_MAX_AGE`` settings are
        consulted. The audience SPA and the presentation plugin are served
        from other origins and must send the identity cookie, so explicit
        origins enable credentials. A blank or ``"*"`` value allows any origin
        without credentials, which breaks cookie round-tripping and is only
        suitable for local experiments.
    """
    raw_origins = app.config.get("CORS_ORIGINS", "")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
    wildcard = len(origins) == 0 or origins == ["*"]
    credential_header = app.config.get("CREDENTIAL_HEADER", "x-session-token")

    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if wildcard else origins}},
        supports_credentials=not wildcard,
        allow_headers=["Content-Type", credential_header, "X-Request-ID"],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
