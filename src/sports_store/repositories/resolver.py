"""Identity lookup of stored records."""

from typing import Any, List, Optional, Type

from ..domain.identity import strategy_for
from ..domain.models import PersistentObject
from ..store.interfaces import Document, DocumentStore
from ..utils.logging_config import get_logger
from .mapping import RecordMapper

logger = get_logger('repository')


class IdentityResolver:
    """Finds stored records by their type-specific identity key.

    MovementType is looked up by its business key, every other type by uuid.
    """

    def __init__(self, store: DocumentStore, mapper: RecordMapper):
        self._store = store
        self._mapper = mapper

    def find_documents(self, record_type: Type[PersistentObject], key: Any) -> List[Document]:
        """Return all documents matching the identity key (zero, one or many)."""
        strategy = strategy_for(record_type)
        return self._store.find(strategy.collection, strategy.key_field, key)

    def exists(self, record_type: Type[PersistentObject], key: Any) -> bool:
        strategy = strategy_for(record_type)
        return self._store.count(strategy.collection, strategy.key_field, key) > 0

    def find_by_uuid(
        self, record_type: Type[PersistentObject], key: Any
    ) -> Optional[PersistentObject]:
        """Return the record with the given identity, or None.

        More than one match is a data integrity anomaly. It is logged and the
        first match is returned.
        """
        documents = self.find_documents(record_type, key)
        if not documents:
            return None
        if len(documents) > 1:
            logger.debug(
                f"find_by_uuid has more than one result: {len(documents)} "
                f"{record_type.__name__} documents for {key!r}"
            )
        return self._mapper.from_document(record_type, documents[0])
