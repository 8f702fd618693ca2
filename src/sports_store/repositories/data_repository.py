"""Repository facade over the document store.

The single public surface external callers use to persist the domain
records. Write operations raise synchronously; read operations never raise
and degrade to an empty result. Callers must serialize access themselves,
the repository does no internal locking.
"""

from typing import Any, List, Optional, Type

from ..core.enums import RecordAction
from ..core.errors import AlreadyExists, NotFound, SportsStoreError, StoreUnavailable
from ..domain.identity import MANAGED_TYPES, strategy_for
from ..domain.models import MovementType, PersistentObject, RunningPlan, TrainingType
from ..store.interfaces import DocumentStore
from ..utils.logging_config import get_logger, log_exception
from .cascade import CascadePlanner
from .delegate import DatastoreDelegate, NullDelegate
from .mapping import RecordMapper, to_document_value
from .resolver import IdentityResolver
from .rollback import RollbackExecutor

logger = get_logger('repository')

# the store counts as "not seeded yet" while all of these are empty
SEED_TYPES = (MovementType, TrainingType, RunningPlan)


class DataRepository:
    """Persistence layer encapsulating the document store in use."""

    def __init__(self, store: DocumentStore, delegate: Optional[DatastoreDelegate] = None):
        """
        Create the datastore access layer.

        Args:
            store: Opened document store; the repository owns its lifecycle
            delegate: Observer notified after each successful mutation
        """
        self._store = store
        self._delegate = delegate or NullDelegate()
        self._mapper = RecordMapper(store)
        self._resolver = IdentityResolver(store, self._mapper)
        self._planner = CascadePlanner(store, self._resolver, RollbackExecutor(store))

    # -- lifecycle -----------------------------------------------------------

    def is_open(self) -> bool:
        """Check whether the datastore is open."""
        return self._store.is_open()

    def close(self) -> None:
        """Close the datastore. Later writes raise StoreUnavailable."""
        self._store.close()

    def is_empty(self) -> bool:
        """
        Check whether the datastore holds no seed data yet.

        True when there are no movement types, training types and running
        plans at all, or when the store cannot be queried.
        """
        if not self.is_open():
            return True
        try:
            return all(
                self._store.count(strategy_for(record_type).collection) == 0
                for record_type in SEED_TYPES
            )
        except SportsStoreError as e:
            logger.debug(f"Could not determine whether the datastore is empty: {e}")
            return True

    # -- writes --------------------------------------------------------------

    def _require_open(self) -> None:
        if not self.is_open():
            raise StoreUnavailable()

    def _identity(self, record: PersistentObject) -> Any:
        return strategy_for(type(record)).key_of(record)

    def _apply(self, action: RecordAction, record: PersistentObject) -> bool:
        try:
            return self._planner.apply(action, record)
        except SportsStoreError as e:
            logger.debug(
                f"Operation {action.value} with the object from type {type(record).__name__} "
                f"and with id {self._identity(record)} failed: {e.message}"
            )
            raise

    def _notify(self, hook_name: str, record: PersistentObject) -> None:
        try:
            getattr(self._delegate, hook_name)(record)
        except Exception as e:
            # the mutation is already committed, a failing observer cannot undo it
            log_exception('repository', e, {"hook": hook_name, "uuid": record.uuid})

    def add(self, record: PersistentObject) -> None:
        """
        Add a new record and the children it owns.

        Raises:
            StoreUnavailable: If the datastore is not open
            AlreadyExists: If a record with the same identity is stored
            DuplicateChildRecord: If an owned child is already stored (nothing is written)
            DanglingReference: If a referenced record does not exist
            Unsupported: If the record type cannot be stored directly
        """
        self._require_open()
        record_type = type(record)
        key = self._identity(record)
        if self._resolver.exists(record_type, key):
            raise AlreadyExists(record_type.__name__, key)

        self._apply(RecordAction.INSERT, record)
        logger.info(f"Added {record_type.__name__} {key}")
        self._notify("did_object_added", record)

    def update(self, record: PersistentObject) -> None:
        """
        Save an existing record. Children are upserted one by one; a failure
        may leave the update partially applied.

        Raises:
            StoreUnavailable: If the datastore is not open
            NotFound: If the record is not stored
        """
        self._require_open()
        record_type = type(record)
        key = self._identity(record)
        if not self._resolver.exists(record_type, key):
            raise NotFound(record_type.__name__, key, "update")

        self._apply(RecordAction.UPDATE, record)
        logger.info(f"Updated {record_type.__name__} {key}")
        self._notify("did_object_updated", record)

    def delete(self, record: PersistentObject) -> None:
        """
        Remove a record and the children it owns. Referenced records are kept.

        Raises:
            StoreUnavailable: If the datastore is not open
            NotFound: If the record is not stored
        """
        self._require_open()
        record_type = type(record)
        key = self._identity(record)
        if not self._resolver.exists(record_type, key):
            raise NotFound(record_type.__name__, key, "delete")

        if self._apply(RecordAction.REMOVE, record):
            logger.info(f"Removed {record_type.__name__} {key}")
            self._notify("did_object_removed", record)

    def clear_all(self) -> None:
        """Delete every record of every managed type."""
        self._require_open()
        for record_type in MANAGED_TYPES:
            removed = self._store.remove_all(strategy_for(record_type).collection)
            logger.debug(f"Cleared {removed} {record_type.__name__} documents")
        logger.info("Cleared the datastore")

    # -- reads ---------------------------------------------------------------

    def find_by_uuid(
        self, record_type: Type[PersistentObject], key: Any
    ) -> Optional[PersistentObject]:
        """
        Get the record of the given type with the given identity.

        MovementType is looked up by its key, every other type by uuid.
        Returns None if the record was not found or the lookup failed.
        """
        if not self.is_open():
            return None
        try:
            return self._resolver.find_by_uuid(record_type, key)
        except SportsStoreError as e:
            logger.debug(f"find_by_uuid for {record_type.__name__} {key!r} failed: {e}")
            return None

    def find_all(self, record_type: Type[PersistentObject]) -> List[PersistentObject]:
        """Get all records of a type. The list is empty if an error occurred."""
        return self._find(record_type, None, None)

    def find_by_attribute(
        self, attribute_name: str, value: Any, record_type: Type[PersistentObject]
    ) -> List[PersistentObject]:
        """Find records whose attribute equals the value. The list can be empty."""
        return self._find(record_type, attribute_name, value)

    def _find(
        self, record_type: Type[PersistentObject], field: Optional[str], value: Any
    ) -> List[PersistentObject]:
        if not self.is_open():
            return []
        try:
            strategy = strategy_for(record_type)
            if field is not None:
                value = to_document_value(value)
            documents = self._store.find(strategy.collection, field, value)
            records = (self._mapper.from_document(record_type, d) for d in documents)
            return [record for record in records if record is not None]
        except SportsStoreError as e:
            logger.debug(f"Finding {record_type.__name__} records failed: {e}")
            return []
