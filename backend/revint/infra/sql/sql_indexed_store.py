# comments in English; reST docstrings
from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from revint.core.extensions import db
from revint.models.document import StoredDocument
from revint.services._shared.ports import Document, IndexedStore


def _default_session() -> Session:
    return db.session


class SQLIndexedStore(IndexedStore):
    """
    Relational document store on a single ``documents`` table.

    Every logical store shares the table and is told apart by the ``store``
    column. Index filters compare top-level JSON fields
    (``data->>'field'`` on PostgreSQL, ``json_extract`` on SQLite), so any
    combination of declared indices can be served.

    Each operation commits on its own: stores never take part in a wider
    transaction, which is why two writes of the same logical change are not
    atomic.

    :param name: Logical store name.
    :param indices: Filterable document fields.
    :param session_factory: Returns the SQLAlchemy session to use (defaults to
        the Flask-SQLAlchemy scoped session).
    """

    backend = "sql"

    def __init__(
        self,
        name: str,
        indices: Iterable[str] = (),
        *,
        session_factory: Callable[[], Session] | None = None,
    ) -> None:
        super().__init__(name, indices)
        self._session_factory = session_factory or _default_session

    @property
    def session(self) -> Session:
        return self._session_factory()

    def _put(self, storage_key: str, doc: Document) -> None:
        session = self.session
        try:
            if not self.keeps_history:
                # Composite keys hold a single document
                session.execute(
                    delete(StoredDocument).where(
                        StoredDocument.store == self.name,
                        StoredDocument.key == storage_key,
                    )
                )
            session.add(StoredDocument(store=self.name, key=storage_key, data=doc))
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise

    def _fetch(self, storage_key: str) -> list[Document]:
        stmt = (
            select(StoredDocument.data)
            .where(StoredDocument.store == self.name, StoredDocument.key == storage_key)
            .order_by(StoredDocument.id.desc())
        )
        return [dict(data) for data in self.session.execute(stmt).scalars()]

    def _fetch_latest(self, storage_key: str) -> Document | None:
        stmt = (
            select(StoredDocument.data)
            .where(StoredDocument.store == self.name, StoredDocument.key == storage_key)
            .order_by(StoredDocument.id.desc())
            .limit(1)
        )
        data = self.session.execute(stmt).scalar_one_or_none()
        return dict(data) if data is not None else None

    def _scan(self, filters: Mapping[str, Any]) -> list[Document]:
        stmt = select(StoredDocument.data).where(StoredDocument.store == self.name)
        for field, value in filters.items():
            stmt = stmt.where(StoredDocument.data[field].as_string() == str(value))
        stmt = stmt.order_by(StoredDocument.id.desc())
        return [dict(data) for data in self.session.execute(stmt).scalars()]
