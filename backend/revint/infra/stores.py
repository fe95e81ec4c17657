"""Backend selection for the document stores."""

from __future__ import annotations

import logging

from flask import Flask

from revint.core.config import STORE_BACKENDS
from revint.core.extensions import get_redis
from revint.infra.redis.redis_indexed_store import RedisIndexedStore
from revint.infra.sql.sql_indexed_store import SQLIndexedStore
from revint.services._shared.errors import ConfigurationError
from revint.services._shared.stores import DocumentStores

log = logging.getLogger(__name__)


def build_stores(app: Flask) -> DocumentStores:
    """
    Build the document stores for ``STORE_BACKEND``.

    Called once by the application factory; the result is injected into the
    services.

    :raises ConfigurationError: For an unknown backend name.
    """
    backend = app.config.get("STORE_BACKEND", "memory")
    if backend not in STORE_BACKENDS:
        raise ConfigurationError(f"STORE_BACKEND must be one of {sorted(STORE_BACKENDS)}")

    if backend == "sql":
        stores = DocumentStores.build(SQLIndexedStore)
    elif backend == "redis":
        if not app.config.get("REDIS_URL"):
            raise ConfigurationError("REDIS_URL is required for the redis store backend")
        r = get_redis()
        prefix = app.config.get("REDIS_KEY_PREFIX", "revint")
        stores = DocumentStores.build(
            lambda name, indices: RedisIndexedStore(r, name, indices, key_prefix=prefix)
        )
    else:
        stores = DocumentStores.in_memory()

    log.info("stores.ready", extra={"backend": stores.backend})
    return stores
