# comments in English; reST docstrings
from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import Any

import redis  # type: ignore[import-untyped]

from revint.services._shared.errors import ValidationError
from revint.services._shared.ports import Document, IndexedStore, build_list_prefix

# Upper bound for lexicographic range scans; escaped keys are pure ASCII.
_LEX_MAX = "\xff"


def _text(value: bytes | str) -> str:
    return value.decode() if isinstance(value, bytes | bytearray) else str(value)


class RedisIndexedStore(IndexedStore):
    """
    Ordered key-value document store on Redis.

    Storage layout (``<ns>`` is ``<key_prefix>:<store name>``):

    - ``<ns>:keys`` — sorted set of storage keys, all with score 0, giving a
      lexicographically ordered key space for prefix scans (``ZRANGEBYLEX``).
    - ``<ns>:doc:<storage key>`` — a JSON string for indexed stores, or a list
      of JSON strings (newest first) for stores that keep history.

    Like any prefix-ordered store, ``list()`` only accepts filters forming a
    consecutive run of indices starting with the first declared one.

    :param r: A Redis client (already connected).
    :param name: Logical store name.
    :param indices: Filterable document fields, in prefix order.
    :param key_prefix: Namespace shared by all stores of the application.
    """

    backend = "redis"

    def __init__(
        self,
        r: redis.Redis,
        name: str,
        indices: Iterable[str] = (),
        *,
        key_prefix: str = "revint",
    ) -> None:
        super().__init__(name, indices)
        self.r = r
        self._ns = f"{key_prefix}:{name}"

    # -------------------- helpers --------------------

    @property
    def _keys(self) -> str:
        return f"{self._ns}:keys"

    def _k(self, storage_key: str) -> str:
        return f"{self._ns}:doc:{storage_key}"

    # -------------------- backend --------------------

    def _put(self, storage_key: str, doc: Document) -> None:
        payload = json.dumps(doc, separators=(",", ":"))
        pipe = self.r.pipeline(transaction=True)
        if self.keeps_history:
            pipe.lpush(self._k(storage_key), payload)
        else:
            pipe.set(self._k(storage_key), payload)
        pipe.zadd(self._keys, {storage_key: 0})
        pipe.execute()

    def _fetch(self, storage_key: str) -> list[Document]:
        if self.keeps_history:
            raw = self.r.lrange(self._k(storage_key), 0, -1)
            return [json.loads(item) for item in raw]
        item = self.r.get(self._k(storage_key))
        return [json.loads(item)] if item is not None else []

    def _fetch_latest(self, storage_key: str) -> Document | None:
        if self.keeps_history:
            item = self.r.lindex(self._k(storage_key), 0)
        else:
            item = self.r.get(self._k(storage_key))
        return json.loads(item) if item is not None else None

    def _scan(self, filters: Mapping[str, Any]) -> list[Document]:
        prefix, used_all = build_list_prefix(filters, self.indices)
        if not used_all:
            raise ValidationError(
                f"Store {self.name!r} only supports filtering by consecutive index "
                f"fields from the start of {list(self.indices)}",
                details={"filters": sorted(filters)},
            )

        if prefix:
            members = self.r.zrangebylex(self._keys, f"[{prefix}", f"[{prefix}{_LEX_MAX}")
        else:
            members = self.r.zrange(self._keys, 0, -1)
        storage_keys = [_text(m) for m in members]
        if not storage_keys:
            return []

        pipe = self.r.pipeline(transaction=False)
        for storage_key in storage_keys:
            if self.keeps_history:
                pipe.lrange(self._k(storage_key), 0, -1)
            else:
                pipe.get(self._k(storage_key))
        results = pipe.execute()

        docs: list[Document] = []
        for result in results:
            if result is None:
                continue
            if self.keeps_history:
                docs.extend(json.loads(item) for item in result)
            else:
                docs.append(json.loads(result))
        return docs
