"""The document stores the services work with."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass

from revint.services._shared.ports import IndexedStore, InMemoryIndexedStore

# Store name -> index fields, in prefix order
STORE_LAYOUT: Mapping[str, tuple[str, ...]] = {
    "sessions": (),
    "hosts": (),
    "users": (),
    "reactions": ("sessionUid", "page", "uid"),
}

StoreMaker = Callable[[str, tuple[str, ...]], IndexedStore]


@dataclass(frozen=True, slots=True)
class DocumentStores:
    """
    One store per document kind, all sharing a backend.

    :param sessions: Session records, keyed by host token and by session uid.
    :param hosts: Host identities, keyed by host token.
    :param users: Audience identities, keyed by user token.
    :param reactions: Reactions, indexed by session uid, page and user uid.
    """

    sessions: IndexedStore
    hosts: IndexedStore
    users: IndexedStore
    reactions: IndexedStore

    @classmethod
    def build(cls, make: StoreMaker) -> DocumentStores:
        """Create every store of :data:`STORE_LAYOUT` with ``make(name, indices)``."""
        return cls(**{name: make(name, indices) for name, indices in STORE_LAYOUT.items()})

    @classmethod
    def in_memory(cls) -> DocumentStores:
        return cls.build(InMemoryIndexedStore)

    @property
    def backend(self) -> str:
        return self.sessions.backend
