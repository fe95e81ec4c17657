"""Pytest fixtures shared by the unit and API suites.

RSA keys are generated once per session; every application gets a fresh
in-memory document store so data never leaks between cases.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from typing import Any

import fakeredis
import pytest
from flask import Flask

from revint.api.deps import HUB_KEY, SERVICES_KEY
from revint.core.config import TestingConfig
from revint.core.extensions import db as _db
from revint.factory import create_app
from revint.infra.crypto.rsa_signature import RSASignatureVerifier
from revint.infra.crypto.rsa_signer import generate_key_pair, sign_token
from revint.realtime.hub import ConnectionHub
from revint.services._shared.context import RequestContext
from revint.services._shared.stores import DocumentStores
from revint.services.container import Services
from revint.services.tokens.service import TokenService


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses the in-memory document store and an in-memory SQLite database.
    - Avoids hitting external services (no Redis connection).
    """

    TESTING = True
    DEBUG = False
    STORE_BACKEND = "memory"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    LOG_LEVEL = "WARNING"
    CORS_ORIGINS = "http://localhost:5173"


# -------------------------------- Keys ------------------------------------ #


@pytest.fixture(scope="session")
def key_pair() -> tuple[str, str]:
    """Return ``(private_pem, public_pem)`` shared by the whole run."""
    return generate_key_pair()


@pytest.fixture(scope="session")
def private_key(key_pair) -> str:
    return key_pair[0]


@pytest.fixture(scope="session")
def public_key(key_pair) -> str:
    return key_pair[1]


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture()
def sign(private_key, faker) -> Callable[..., str]:
    """Return a helper minting valid tokens: ``sign(name=None, **extra)``."""

    def _sign(name: str | None = None, **extra: Any) -> str:
        payload = {
            "name": name or faker.name(),
            "date": faker.date(),
            **extra,
        }
        return sign_token(payload, private_key)

    return _sign


@pytest.fixture()
def host_token(sign) -> str:
    return sign(host=True)


@pytest.fixture()
def user_token(sign) -> str:
    return sign()


# ------------------------------ Services ---------------------------------- #


@pytest.fixture()
def tokens(public_key) -> TokenService:
    return TokenService(verifier=RSASignatureVerifier(public_key))


@pytest.fixture()
def stores() -> DocumentStores:
    return DocumentStores.in_memory()


@pytest.fixture()
def hub() -> Generator[ConnectionHub, None, None]:
    hub = ConnectionHub()
    yield hub
    hub.close_all()


@pytest.fixture()
def services(stores, public_key, hub) -> Services:
    """Services wired to in-memory stores and a private hub."""
    return Services.build(
        stores=stores,
        verifier=RSASignatureVerifier(public_key),
        broadcaster=hub,
    )


@pytest.fixture()
def ctx_for() -> Callable[..., RequestContext]:
    """Return a helper building request contexts."""

    def _ctx(credential: str | None = None, identity: str | None = None) -> RequestContext:
        return RequestContext(credential=credential, identity=identity, request_id="test")

    return _ctx


@pytest.fixture()
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


# ------------------------------- Flask ------------------------------------ #


def _config_with(**overrides: Any) -> type[TestConfig]:
    return type("KeyedTestConfig", (TestConfig,), overrides)


@pytest.fixture()
def make_app(public_key) -> Callable[..., Flask]:
    """Return a helper creating apps: ``make_app(**config_overrides)``."""

    def _make(**overrides: Any) -> Flask:
        overrides.setdefault("PUBLIC_KEY", public_key)
        os.environ.pop("DATABASE_URL", None)
        return create_app(_config_with(**overrides), instance_relative_config=False)

    return _make


@pytest.fixture()
def app(make_app) -> Flask:
    """Create a Flask application configured for testing."""
    return make_app()


@pytest.fixture()
def client(app):
    """Return a test client bound to the application."""
    return app.test_client()


@pytest.fixture()
def app_services(app) -> Services:
    return app.extensions[SERVICES_KEY]


@pytest.fixture()
def app_hub(app) -> ConnectionHub:
    return app.extensions[HUB_KEY]


@pytest.fixture()
def sql_app(make_app) -> Generator[Flask, None, None]:
    """Application on the SQL store backend with the documents table created."""
    application = make_app(STORE_BACKEND="sql")
    with application.app_context():
        yield application
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def session(sql_app):
    """SQLAlchemy session of the SQL-backed application."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(_db.session)
    yield _db.session
    SQLAlchemySession.set(None)
