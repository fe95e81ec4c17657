"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

STORE_BACKENDS: Final[frozenset[str]] = frozenset({"memory", "sql", "redis"})


# Load .env during development (no-op when the file is missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int | None = None) -> int | None:
    """Parse an optional integer from an environment variable."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


def read_public_key() -> str | None:
    """Return the verification key from ``PUBLIC_KEY`` or ``PUBLIC_KEY_FILE``.

    The inline variable wins when both are set. Escaped newlines (``\\n``) are
    expanded so single-line env files can carry a PEM block.
    """
    inline = os.getenv("PUBLIC_KEY")
    if inline:
        return inline.replace("\\n", "\n")
    path = os.getenv("PUBLIC_KEY_FILE")
    if path and os.path.isfile(path):
        with open(path, encoding="utf-8") as fh:
            return fh.read()
    return None


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    WS_BASE_PREFIX: str
        Root path for the live session pipes.
    PUBLIC_KEY: str | None
        PEM-encoded public key used to verify session tokens. Missing keys are
        reported as configuration errors on first verification.
    STORE_BACKEND: str
        Document store implementation: ``memory``, ``sql`` or ``redis``.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy (``sql`` backend).
    SQL_CREATE_ALL: bool
        Create the documents table on startup when using the ``sql`` backend.
    REDIS_URL: str | None
        Redis connection string (``redis`` backend).
    REDIS_KEY_PREFIX: str
        Namespace prepended to every Redis key.
    CREDENTIAL_HEADER: str
        Request header carrying the signed session token.
    IDENTITY_COOKIE_NAME: str
        Cookie carrying the per-connection identity marker.
    IDENTITY_COOKIE_SECURE: bool
        Sets the ``Secure`` flag on the identity cookie.
    IDENTITY_COOKIE_SAMESITE: str
        ``SameSite`` policy of the identity cookie.
    IDENTITY_COOKIE_MAX_AGE: int | None
        Lifetime of the identity cookie in seconds (session cookie when unset).
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"
    WS_BASE_PREFIX = "/ws"

    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")

    # Token verification
    PUBLIC_KEY = read_public_key()

    # Document stores
    STORE_BACKEND = os.getenv("STORE_BACKEND", "memory").strip().lower()
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./revint.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    SQL_CREATE_ALL = env_bool("SQL_CREATE_ALL", True)
    REDIS_URL = os.getenv("REDIS_URL")
    REDIS_KEY_PREFIX = os.getenv("REDIS_KEY_PREFIX", "revint")

    # Credentials & identity marker
    CREDENTIAL_HEADER = os.getenv("CREDENTIAL_HEADER", "x-session-token")
    IDENTITY_COOKIE_NAME = os.getenv("IDENTITY_COOKIE_NAME", "uid")
    IDENTITY_COOKIE_SECURE = env_bool("IDENTITY_COOKIE_SECURE", False)
    IDENTITY_COOKIE_SAMESITE = os.getenv("IDENTITY_COOKIE_SAMESITE", "Lax")
    IDENTITY_COOKIE_MAX_AGE = env_int("IDENTITY_COOKIE_MAX_AGE")

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and keeps the in-memory store unless
    ``STORE_BACKEND`` says otherwise.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and the in-memory document store.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Propagates exceptions so pytest can surface tracebacks directly.
    """

    TESTING = True
    DEBUG = False
    STORE_BACKEND = "memory"
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled and marks the identity cookie
    ``Secure`` unless explicitly turned off.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False
    IDENTITY_COOKIE_SECURE = env_bool("IDENTITY_COOKIE_SECURE", True)


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
