"""
Indexed document store port and its in-memory implementation.

A store holds JSON documents under keys. Stores may declare *index fields*:
document fields that ``list()`` can filter on. The declared order matters for
prefix-ordered backends, which can only filter on a consecutive run of
indices starting with the first one.

Key contract
------------
- No indices: the key is a plain non-empty string and every ``store()``
  appends to the history kept under it; ``get()`` returns newest first.
- With indices: the key is a mapping holding ``id`` plus every index field.
  It maps to the composite storage key ``index1:index2:...:id`` and a write
  replaces the document stored under it.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Union
from urllib.parse import quote

from revint.services._shared.errors import ValidationError

Document = dict[str, Any]
StoreKey = Union[str, Mapping[str, Any]]

INDEX_SEPARATOR = ":"


def _escape(value: Any) -> str:
    """Escape one key component so it can never contain the separator."""
    return quote(str(value), safe="")


def build_storage_key(key: Mapping[str, Any], indices: Sequence[str]) -> str:
    """
    Build the compound storage key ``index1:index2:...:id``.

    :param key: Mapping with ``id`` and every index field.
    :param indices: Declared index order.
    :returns: Storage key with each component escaped.
    """
    parts = [_escape(key[idx]) for idx in indices]
    parts.append(_escape(key["id"]))
    return INDEX_SEPARATOR.join(parts)


def build_list_prefix(filters: Mapping[str, Any], indices: Sequence[str]) -> tuple[str, bool]:
    """
    Build a key prefix from the consecutive leading indices present in
    ``filters``.

    :param filters: Field/value filters (already validated against indices).
    :param indices: Declared index order.
    :returns: ``(prefix, used_all)`` where ``used_all`` tells whether every
        filter made it into the prefix.
    """
    parts: list[str] = []
    for idx in indices:
        if idx not in filters:
            break
        parts.append(_escape(filters[idx]))
    used_all = len(parts) == len(filters)
    prefix = INDEX_SEPARATOR.join(parts) + INDEX_SEPARATOR if parts else ""
    return prefix, used_all


def matches(doc: Mapping[str, Any], filters: Mapping[str, Any]) -> bool:
    """Return ``True`` when every filter equals the document's field value."""
    return all(str(doc.get(field)) == str(value) for field, value in filters.items())


class IndexedStore:
    """
    Base class for document stores.

    Subclasses implement ``_put``, ``_fetch`` and ``_scan``; key and filter
    validation lives here so every backend honours the same contract.

    :param name: Logical store name, used as a namespace by shared backends.
    :param indices: Filterable document fields, in prefix order.
    """

    backend = "abstract"

    def __init__(self, name: str, indices: Iterable[str] = ()) -> None:
        self.name = name
        self.indices: tuple[str, ...] = tuple(indices)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r} indices={self.indices!r}>"

    @property
    def keeps_history(self) -> bool:
        """Unindexed stores append under their key instead of replacing."""
        return not self.indices

    # ------------------------------ API ---------------------------------

    def store(self, key: StoreKey, doc: Mapping[str, Any]) -> dict[str, bool]:
        """Store ``doc`` under ``key``."""
        self._put(self.storage_key(key), dict(doc))
        return {"success": True}

    def get(self, key: StoreKey) -> list[Document]:
        """Return the documents stored under exactly ``key`` (newest first)."""
        return self._fetch(self.storage_key(key))

    def latest(self, key: StoreKey) -> Document | None:
        """Return the newest document stored under ``key``, or ``None``."""
        return self._fetch_latest(self.storage_key(key))

    def list(self, filters: Mapping[str, Any] | None = None) -> list[Document]:
        """
        Return every document whose index fields match ``filters``.

        :raises ValidationError: When filtering a store without indices or on
            a field that is not a declared index.
        """
        return self._scan(self.validate_filters(filters))

    # --------------------------- validation -----------------------------

    def storage_key(self, key: StoreKey) -> str:
        """Validate ``key`` against the index declaration and flatten it."""
        if not self.indices:
            if not isinstance(key, str) or not key:
                raise ValidationError(f"Store {self.name!r} expects a non-empty string key")
            return key

        if not isinstance(key, Mapping):
            raise ValidationError(
                f"Store {self.name!r} expects a key with 'id' and {list(self.indices)}"
            )
        missing = [f for f in ("id", *self.indices) if key.get(f) in (None, "")]
        if missing:
            raise ValidationError(
                f"Store {self.name!r} key is missing fields",
                details={"missing": missing},
            )
        return build_storage_key(key, self.indices)

    def validate_filters(self, filters: Mapping[str, Any] | None) -> dict[str, Any]:
        """Reject filters that the index declaration cannot serve."""
        if not filters:
            return {}
        if not self.indices:
            raise ValidationError(
                f"Cannot filter by fields when no indices are defined for store {self.name!r}"
            )
        unknown = sorted(set(filters) - set(self.indices))
        if unknown:
            raise ValidationError(
                f"Store {self.name!r} can only filter on indices {list(self.indices)}",
                details={"unknown": unknown},
            )
        return dict(filters)

    # ----------------------------- backend ------------------------------

    def _put(self, storage_key: str, doc: Document) -> None:
        raise NotImplementedError

    def _fetch(self, storage_key: str) -> list[Document]:
        raise NotImplementedError

    def _scan(self, filters: Mapping[str, Any]) -> list[Document]:
        raise NotImplementedError

    def _fetch_latest(self, storage_key: str) -> Document | None:
        docs = self._fetch(storage_key)
        return docs[0] if docs else None


class InMemoryIndexedStore(IndexedStore):
    """Thread-safe in-memory store used in tests and single-process setups."""

    backend = "memory"

    def __init__(self, name: str, indices: Iterable[str] = ()) -> None:
        super().__init__(name, indices)
        self._lock = threading.RLock()
        self._data: dict[str, list[Document]] = {}

    def _put(self, storage_key: str, doc: Document) -> None:
        with self._lock:
            if self.keeps_history:
                self._data.setdefault(storage_key, []).insert(0, copy.deepcopy(doc))
            else:
                self._data[storage_key] = [copy.deepcopy(doc)]

    def _fetch(self, storage_key: str) -> list[Document]:
        with self._lock:
            return copy.deepcopy(self._data.get(storage_key, []))

    def _fetch_latest(self, storage_key: str) -> Document | None:
        with self._lock:
            docs = self._data.get(storage_key)
            return copy.deepcopy(docs[0]) if docs else None

    def _scan(self, filters: Mapping[str, Any]) -> list[Document]:
        with self._lock:
            return [
                copy.deepcopy(doc)
                for docs in self._data.values()
                for doc in docs
                if matches(doc, filters)
            ]

    def clear(self) -> None:
        """Drop every document (tests)."""
        with self._lock:
            self._data.clear()
