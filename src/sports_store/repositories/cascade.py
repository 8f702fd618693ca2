"""Cascade planner and per-type write handlers.

Each handler decides the order in which a record and the children it owns
are written to the store:

- Track owns its LocationData.
- RunningPlan owns its RunningPlanEntry records, which own RunningUnit
  records. Units reference MovementType reference data, which is inserted on
  demand and never deleted with the plan.
- Training only references a TrainingType and a Track; both must already be
  stored.

Inserts of composites are all-or-nothing through compensating rollback.
Updates are applied child by child and are not rolled back on failure.
"""

from typing import Dict, Type

from ..core.enums import RecordAction
from ..core.errors import (
    AlreadyExists,
    DanglingReference,
    DuplicateChildRecord,
    SportsStoreError,
    Unsupported,
)
from ..domain.identity import REFERENCE_DATA_TYPES, strategy_for
from ..domain.models import (
    MovementType,
    PersistentObject,
    RunningPlan,
    RunningUnit,
    Track,
    Training,
    TrainingType,
    User,
)
from ..store.interfaces import DocumentStore
from ..utils.logging_config import get_logger
from .mapping import to_document
from .resolver import IdentityResolver
from .rollback import RollbackExecutor, compensating_insert

logger = get_logger('cascade')


class RecordHandler:
    """Writes records of one type as plain documents."""

    def __init__(
        self,
        store: DocumentStore,
        resolver: IdentityResolver,
        executor: RollbackExecutor,
    ):
        self._store = store
        self._resolver = resolver
        self._executor = executor

    # -- document primitives -------------------------------------------------

    def _insert_document(self, record: PersistentObject) -> None:
        strategy = strategy_for(type(record))
        self._store.insert(strategy.collection, to_document(record))

    def _update_document(self, record: PersistentObject) -> None:
        strategy = strategy_for(type(record))
        self._store.update(
            strategy.collection, strategy.key_field, strategy.key_of(record), to_document(record)
        )

    def _remove_document(self, record: PersistentObject) -> None:
        strategy = strategy_for(type(record))
        self._store.remove(strategy.collection, strategy.key_field, strategy.key_of(record))

    def _exists(self, record: PersistentObject) -> bool:
        record_type = type(record)
        return self._resolver.exists(record_type, strategy_for(record_type).key_of(record))

    def _upsert(self, record: PersistentObject) -> None:
        if self._exists(record):
            self._update_document(record)
        else:
            self._insert_document(record)

    def _check_unique_fields(self, record: PersistentObject) -> None:
        """Reject a record whose unique field value is held by another record."""
        strategy = strategy_for(type(record))
        key = strategy.key_of(record)
        for field_name in strategy.unique_fields:
            value = getattr(record, field_name)
            for document in self._store.find(strategy.collection, field_name, value):
                if document.get(strategy.key_field) != key:
                    raise AlreadyExists(
                        type(record).__name__,
                        value,
                        f"{type(record).__name__} with {field_name} {value!r} already exists.",
                    )

    # -- operations ----------------------------------------------------------

    def insert(self, record: PersistentObject) -> None:
        self._check_unique_fields(record)
        self._insert_document(record)

    def update(self, record: PersistentObject) -> None:
        self._check_unique_fields(record)
        self._update_document(record)

    def remove(self, record: PersistentObject) -> bool:
        """Remove the record. Returns False if nothing was removed."""
        self._remove_document(record)
        return True


class ReferenceDataHandler(RecordHandler):
    """Reference data is insert/update only. Other records may still point at it."""

    def remove(self, record: PersistentObject) -> bool:
        logger.info(
            f"{type(record).__name__} {strategy_for(type(record)).key_of(record)!r} "
            f"is reference data and will not be deleted"
        )
        return False


class TrackHandler(RecordHandler):
    """Track with its owned location samples."""

    def insert(self, track: Track) -> None:
        with compensating_insert(self._executor) as undo:
            for location in track.locations:
                if self._exists(location):
                    # existing location data cannot be added to a new track
                    logger.debug(
                        f"LocationData {location.uuid} of new track {track.uuid} "
                        f"already exists, rolling back {len(undo)} locations"
                    )
                    raise DuplicateChildRecord("Track", "LocationData", location.uuid)
                self._insert_document(location)
                undo.record(location)
            self._insert_document(track)

    def update(self, track: Track) -> None:
        for location in track.locations:
            self._upsert(location)
        self._update_document(track)

    def remove(self, track: Track) -> bool:
        for location in track.locations:
            if self._exists(location):
                self._remove_document(location)
        self._remove_document(track)
        return True


class TrainingHandler(RecordHandler):
    """Training referencing a TrainingType and a Track it does not own."""

    def _check_references(self, training: Training) -> None:
        if training.training_type_uuid is not None:
            if not self._resolver.exists(TrainingType, training.training_type_uuid):
                raise DanglingReference("Training", "TrainingType", training.training_type_uuid)
        if training.track_uuid is not None:
            if not self._resolver.exists(Track, training.track_uuid):
                raise DanglingReference("Training", "Track", training.track_uuid)

    def insert(self, training: Training) -> None:
        self._check_references(training)
        self._insert_document(training)

    def update(self, training: Training) -> None:
        self._check_references(training)
        self._update_document(training)

    def remove(self, training: Training) -> bool:
        # training type and track may be referenced by other records
        self._remove_document(training)
        return True


class RunningPlanHandler(RecordHandler):
    """Running plan with nested entries, units and on-demand movement types."""

    def _ensure_movement_type(self, unit: RunningUnit) -> bool:
        """Insert the unit's movement type if it is new. Returns True if inserted."""
        movement_type = unit.movement_type
        if self._resolver.exists(MovementType, movement_type.key):
            return False
        self._insert_document(movement_type)
        return True

    def insert(self, plan: RunningPlan) -> None:
        with compensating_insert(self._executor) as undo:
            for entry in plan.entries:
                if self._exists(entry):
                    logger.debug(f"The new running plan {plan.uuid} contains existing entries")
                    raise DuplicateChildRecord("RunningPlan", "RunningPlanEntry", entry.uuid)

                for unit in entry.running_units:
                    if self._exists(unit):
                        logger.debug(f"The new running plan {plan.uuid} contains existing units")
                        raise DuplicateChildRecord("RunningPlan", "RunningUnit", unit.uuid)
                    self._insert_document(unit)
                    undo.record(unit)

                    if self._ensure_movement_type(unit):
                        undo.record(unit.movement_type)

                self._insert_document(entry)
                undo.record(entry)

            self._insert_document(plan)

    def update(self, plan: RunningPlan) -> None:
        # not atomic: a failure leaves the children written so far in place
        try:
            for entry in plan.entries:
                if not self._exists(entry):
                    for unit in entry.running_units:
                        self._ensure_movement_type(unit)
                        self._upsert(unit)
                    self._insert_document(entry)
                else:
                    self._update_document(entry)
                    for unit in entry.running_units:
                        self._ensure_movement_type(unit)
                        self._upsert(unit)
            self._update_document(plan)
        except SportsStoreError:
            logger.warning(f"Update of running plan {plan.uuid} was only partially applied")
            raise

    def remove(self, plan: RunningPlan) -> bool:
        for entry in plan.entries:
            if not self._exists(entry):
                continue
            for unit in entry.running_units:
                # movement types are not deleted
                if self._exists(unit):
                    self._remove_document(unit)
            self._remove_document(entry)
        self._remove_document(plan)
        return True


class CascadePlanner:
    """Routes each write to the handler of the record's type."""

    HANDLER_TYPES: Dict[Type[PersistentObject], Type[RecordHandler]] = {
        **{record_type: ReferenceDataHandler for record_type in REFERENCE_DATA_TYPES},
        User: RecordHandler,
        Track: TrackHandler,
        Training: TrainingHandler,
        RunningPlan: RunningPlanHandler,
    }

    def __init__(
        self,
        store: DocumentStore,
        resolver: IdentityResolver,
        executor: RollbackExecutor,
    ):
        self._handlers: Dict[Type[PersistentObject], RecordHandler] = {
            record_type: handler_type(store, resolver, executor)
            for record_type, handler_type in self.HANDLER_TYPES.items()
        }

    def handler_for(self, record_type: Type[PersistentObject]) -> RecordHandler:
        """
        Return the handler for a record type.

        Raises:
            Unsupported: If no handler manages the type (e.g. a bare child type)
        """
        for klass in record_type.__mro__:
            handler = self._handlers.get(klass)
            if handler is not None:
                return handler
        raise Unsupported(record_type.__name__)

    def apply(self, action: RecordAction, record: PersistentObject) -> bool:
        """Run a write action. Returns False if the handler left the store untouched."""
        handler = self.handler_for(type(record))
        if action is RecordAction.INSERT:
            handler.insert(record)
            return True
        if action is RecordAction.UPDATE:
            handler.update(record)
            return True
        if action is RecordAction.REMOVE:
            return handler.remove(record)
        raise Unsupported(type(record).__name__, str(action))
