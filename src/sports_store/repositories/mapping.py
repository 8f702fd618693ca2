"""Conversion between domain records and stored documents.

Owned children are stored as separate documents. The parent document keeps
only the identity keys of its children, and reading a parent hydrates them
back into full records.
"""

from typing import Any, Dict, List, NamedTuple, Optional, Type

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError

from ..domain.identity import strategy_for
from ..domain.models import (
    LocationData,
    MovementType,
    PersistentObject,
    RunningPlan,
    RunningPlanEntry,
    RunningUnit,
    Track,
)
from ..store.interfaces import Document, DocumentStore
from ..utils.logging_config import get_logger

logger = get_logger('repository')


class Reference(NamedTuple):
    attribute: str
    document_field: str
    child_type: Type[PersistentObject]


# attribute holding a list of owned children -> document field of their keys
CHILD_LIST_REFERENCES: Dict[Type[PersistentObject], Reference] = {
    Track: Reference("locations", "location_uuids", LocationData),
    RunningPlan: Reference("entries", "entry_uuids", RunningPlanEntry),
    RunningPlanEntry: Reference("running_units", "running_unit_uuids", RunningUnit),
}

# attribute holding one referenced record -> document field of its key
SINGLE_REFERENCES: Dict[Type[PersistentObject], Reference] = {
    RunningUnit: Reference("movement_type", "movement_type_key", MovementType),
}


def to_document(record: PersistentObject) -> Document:
    """Serialize a record, replacing embedded children by their keys."""
    record_type = type(record)
    list_ref = CHILD_LIST_REFERENCES.get(record_type)
    single_ref = SINGLE_REFERENCES.get(record_type)

    exclude = {ref.attribute for ref in (list_ref, single_ref) if ref is not None}
    document = record.model_dump(mode="json", exclude=exclude)

    if list_ref is not None:
        child_strategy = strategy_for(list_ref.child_type)
        document[list_ref.document_field] = [
            child_strategy.key_of(child) for child in getattr(record, list_ref.attribute)
        ]
    if single_ref is not None:
        child = getattr(record, single_ref.attribute)
        document[single_ref.document_field] = strategy_for(single_ref.child_type).key_of(child)

    return document


def to_document_value(value: Any) -> Any:
    """Serialize a filter value the way record fields are stored.

    Dates, datetimes and enums are kept in their JSON form inside documents,
    so equality filters must compare against that form.
    """
    if value is None:
        return None
    try:
        return TypeAdapter(type(value)).dump_python(value, mode="json")
    except PydanticSchemaGenerationError:
        # no schema for the type, compare as given
        return value


class RecordMapper:
    """Reads documents back into records, loading referenced children from the store."""

    def __init__(self, store: DocumentStore):
        self._store = store

    def _load(self, record_type: Type[PersistentObject], key: Any) -> Optional[PersistentObject]:
        strategy = strategy_for(record_type)
        documents = self._store.find(strategy.collection, strategy.key_field, key)
        if not documents:
            logger.debug(f"Reference to missing {record_type.__name__} {key!r} skipped")
            return None
        return self.from_document(record_type, documents[0])

    def from_document(
        self, record_type: Type[PersistentObject], document: Document
    ) -> Optional[PersistentObject]:
        """Build a record from its document. Returns None if the document is unreadable."""
        data = dict(document)

        list_ref = CHILD_LIST_REFERENCES.get(record_type)
        if list_ref is not None:
            children: List[PersistentObject] = []
            for key in data.pop(list_ref.document_field, None) or []:
                child = self._load(list_ref.child_type, key)
                if child is not None:
                    children.append(child)
            data[list_ref.attribute] = children

        single_ref = SINGLE_REFERENCES.get(record_type)
        if single_ref is not None:
            key = data.pop(single_ref.document_field, None)
            child = self._load(single_ref.child_type, key) if key is not None else None
            if child is None:
                logger.debug(
                    f"{record_type.__name__} {data.get('uuid')!r} has no stored "
                    f"{single_ref.child_type.__name__}, skipped"
                )
                return None
            data[single_ref.attribute] = child

        try:
            return record_type.model_validate(data)
        except ValidationError as e:
            logger.debug(f"Unreadable {record_type.__name__} document skipped: {e}")
            return None
