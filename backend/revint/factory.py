"""Application factory wiring Flask extensions, services and blueprints."""

from __future__ import annotations

import atexit

from flask import Flask

from revint.core.config import BaseConfig, get_config
from revint.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application."""

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from revint.core import extensions

    extensions.init_app(app)

    init_logging(app)

    if app.config.get("STORE_BACKEND") == "sql" and app.config.get("SQL_CREATE_ALL", True):
        with app.app_context():
            extensions.db.create_all()

    _init_services(app)

    from revint.core import cors

    cors.init_app(app)

    from revint.api import init_app as init_api

    init_api(app)

    from revint.core import errors

    errors.init_app(app)

    return app


def _init_services(app: Flask) -> None:
    """Select the store backend and wire services and the hub into the app."""

    from revint.api.deps import HUB_KEY, SERVICES_KEY
    from revint.infra.crypto.rsa_signature import RSASignatureVerifier
    from revint.infra.stores import build_stores
    from revint.realtime.hub import ConnectionHub
    from revint.services.container import Services

    hub = ConnectionHub()
    services = Services.build(
        stores=build_stores(app),
        verifier=RSASignatureVerifier(app.config.get("PUBLIC_KEY")),
        broadcaster=hub,
    )
    app.extensions[HUB_KEY] = hub
    app.extensions[SERVICES_KEY] = services

    # Registrations die with the process
    atexit.register(hub.close_all)
