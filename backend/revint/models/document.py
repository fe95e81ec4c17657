"""Relational row holding one JSON document of an indexed store."""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from revint.core.extensions import db

from .base import CreatedAtMixin, PKMixin, ReprMixin


class StoredDocument(PKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """
    A single document version persisted by :class:`SQLIndexedStore`.

    Fields
    ------
    store : str
        Logical store name (``sessions``, ``hosts``, ``users``, ``reactions``).
    key : str
        Plain key for unindexed stores, composite storage key
        (``index1:index2:...:id``) for indexed ones.
    data : dict
        The JSON document. Index filters compare its top-level fields.

    Notes
    -----
    Unindexed stores append a new row per write and read the newest first;
    indexed stores keep one row per composite key.
    """

    __tablename__ = "documents"

    store: Mapped[str] = mapped_column(String(64), nullable=False)
    key: Mapped[str] = mapped_column(String(1024), nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    __table_args__ = (Index("ix_documents_store_key", "store", "key"),)
