"""In-memory implementation of the document store."""

import copy
from typing import Any, Dict, List, Optional

from ..core.errors import StoreUnavailable
from .interfaces import Document, DocumentStore


class MemoryDocumentStore(DocumentStore):
    """Process-local store keeping deep copies of every document."""

    def __init__(self):
        self._collections: Dict[str, List[Document]] = {}
        self._open = True

    def _require_open(self) -> None:
        if not self._open:
            raise StoreUnavailable()

    def _collection(self, name: str) -> List[Document]:
        return self._collections.setdefault(name, [])

    def is_open(self) -> bool:
        return self._open

    def close(self) -> None:
        self._open = False

    def insert(self, collection: str, document: Document) -> None:
        self._require_open()
        self._collection(collection).append(copy.deepcopy(document))

    def update(self, collection: str, key_field: str, key: Any, document: Document) -> int:
        self._require_open()
        documents = self._collection(collection)
        replaced = 0
        for index, existing in enumerate(documents):
            if existing.get(key_field) == key:
                documents[index] = copy.deepcopy(document)
                replaced += 1
        return replaced

    def remove(self, collection: str, field: str, value: Any) -> int:
        self._require_open()
        documents = self._collection(collection)
        kept = [d for d in documents if d.get(field) != value]
        removed = len(documents) - len(kept)
        self._collections[collection] = kept
        return removed

    def remove_all(self, collection: str) -> int:
        self._require_open()
        removed = len(self._collection(collection))
        self._collections[collection] = []
        return removed

    def find(
        self, collection: str, field: Optional[str] = None, value: Any = None
    ) -> List[Document]:
        self._require_open()
        documents = self._collection(collection)
        if field is not None:
            documents = [d for d in documents if d.get(field) == value]
        return [copy.deepcopy(d) for d in documents]

    def count(self, collection: str, field: Optional[str] = None, value: Any = None) -> int:
        self._require_open()
        if field is None:
            return len(self._collection(collection))
        return sum(1 for d in self._collection(collection) if d.get(field) == value)
