"""Abstract interface of the schemaless document store."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

Document = Dict[str, Any]


class DocumentStore(ABC):
    """Collections of JSON-like documents without multi-document transactions.

    Each primitive is applied and committed on its own. Every primitive of a
    closed store raises StoreUnavailable.
    """

    @abstractmethod
    def is_open(self) -> bool:
        """Check whether the store can be used."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the store. Closing twice is a no-op."""
        pass

    @abstractmethod
    def insert(self, collection: str, document: Document) -> None:
        """Insert a document into a collection."""
        pass

    @abstractmethod
    def update(self, collection: str, key_field: str, key: Any, document: Document) -> int:
        """Replace the documents whose key field equals key. Returns the number replaced."""
        pass

    @abstractmethod
    def remove(self, collection: str, field: str, value: Any) -> int:
        """Remove the documents whose field equals value. Returns the number removed."""
        pass

    @abstractmethod
    def remove_all(self, collection: str) -> int:
        """Remove every document of a collection."""
        pass

    @abstractmethod
    def find(
        self, collection: str, field: Optional[str] = None, value: Any = None
    ) -> List[Document]:
        """Find documents by field equality, or all documents if no field is given."""
        pass

    @abstractmethod
    def count(self, collection: str, field: Optional[str] = None, value: Any = None) -> int:
        """Count documents by field equality, or all documents if no field is given."""
        pass
