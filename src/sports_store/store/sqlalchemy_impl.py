"""SQLAlchemy implementation of the document store.

All documents live in one table, partitioned by collection name. Each
primitive runs in its own session and commits immediately, so a sequence of
primitives is never atomic; callers that need all-or-nothing semantics must
compensate themselves.
"""

from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import StoreOperationError, StoreUnavailable
from ..db.database import create_session_factory, init_schema
from ..db.models import StoredDocument
from ..utils.logging_config import get_logger
from .interfaces import Document, DocumentStore

logger = get_logger('database')


class SQLAlchemyDocumentStore(DocumentStore):
    """Document store backed by a relational database through SQLAlchemy."""

    def __init__(self, engine: Engine, create_schema: bool = True):
        self._engine: Optional[Engine] = engine
        self._session_factory = create_session_factory(engine)
        if create_schema:
            init_schema(engine)

    @contextmanager
    def _session(self, operation: str, collection: str) -> Iterator[Session]:
        if self._engine is None:
            raise StoreUnavailable()

        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.debug(f"{operation} on {collection} failed: {e}")
            raise StoreOperationError(
                operation, collection, f"Failed to {operation} in {collection}: {e}"
            ) from e
        finally:
            session.close()

    def _matching(self, session: Session, collection: str, field: Optional[str], value: Any):
        rows = session.execute(
            select(StoredDocument)
            .where(StoredDocument.collection == collection)
            .order_by(StoredDocument.id)
        ).scalars().all()
        if field is None:
            return list(rows)
        return [row for row in rows if row.body.get(field) == value]

    def is_open(self) -> bool:
        return self._engine is not None

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            logger.info("Document store closed")

    def insert(self, collection: str, document: Document) -> None:
        with self._session("insert", collection) as session:
            session.add(StoredDocument(collection=collection, body=document))

    def update(self, collection: str, key_field: str, key: Any, document: Document) -> int:
        with self._session("update", collection) as session:
            rows = self._matching(session, collection, key_field, key)
            for row in rows:
                row.body = document
            return len(rows)

    def remove(self, collection: str, field: str, value: Any) -> int:
        with self._session("remove", collection) as session:
            rows = self._matching(session, collection, field, value)
            for row in rows:
                session.delete(row)
            return len(rows)

    def remove_all(self, collection: str) -> int:
        with self._session("remove", collection) as session:
            rows = self._matching(session, collection, None, None)
            for row in rows:
                session.delete(row)
            return len(rows)

    def find(
        self, collection: str, field: Optional[str] = None, value: Any = None
    ) -> List[Document]:
        with self._session("find", collection) as session:
            return [dict(row.body) for row in self._matching(session, collection, field, value)]

    def count(self, collection: str, field: Optional[str] = None, value: Any = None) -> int:
        return len(self.find(collection, field, value))
