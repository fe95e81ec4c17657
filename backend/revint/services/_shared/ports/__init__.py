"""
revint.services._shared.ports
=============================

*Ports* (hexagonal interfaces) that decouple the service layer from the
storage technology.

Modules
-------
- :mod:`indexed_store`:
    Defines :class:`~.IndexedStore` — the keyed document store contract with
    declared index fields — and :class:`~.InMemoryIndexedStore`.

- :mod:`broadcaster`:
    Defines :class:`~.Broadcaster` — how state changes reach live clients
    (implemented by the in-process connection hub).

- :mod:`signature_verifier`:
    Defines :class:`~.SignatureVerifier` — abstraction for checking a
    detached signature with the configured public key.

Design Notes
------------
Concrete adapters (SQLAlchemy, Redis, RSA) implement the contracts under
``revint.infra``. The application factory picks one store backend at
startup and injects the resulting stores into the services.
"""

from __future__ import annotations

from .broadcaster import Broadcaster, NullBroadcaster
from .indexed_store import (
    INDEX_SEPARATOR,
    Document,
    InMemoryIndexedStore,
    IndexedStore,
    StoreKey,
    build_list_prefix,
    build_storage_key,
    matches,
)
from .signature_verifier import SignatureVerifier

__all__ = [
    "INDEX_SEPARATOR",
    "Broadcaster",
    "NullBroadcaster",
    "Document",
    "IndexedStore",
    "InMemoryIndexedStore",
    "SignatureVerifier",
    "StoreKey",
    "build_list_prefix",
    "build_storage_key",
    "matches",
]
