"""
Compensating rollback for multi-document inserts.

The document store has no multi-document transaction. A composite insert
therefore records every child it writes in an UndoLog; if a later step fails,
the log is replayed in reverse order as deletes by identity key.

Rollback is best-effort: a failing compensating delete is logged as a
RollbackFailure and never replaces the error that triggered the rollback.
"""

from contextlib import contextmanager
from typing import Any, Iterable, Iterator, List, Tuple, Type

from ..core.errors import RollbackFailure, SportsStoreError
from ..domain.identity import strategy_for
from ..domain.models import PersistentObject
from ..store.interfaces import DocumentStore
from ..utils.logging_config import get_logger

logger = get_logger('rollback')


class RollbackExecutor:
    """Issues one delete-by-key per identity of a record type."""

    def __init__(self, store: DocumentStore):
        self._store = store

    def rollback(
        self, record_type: Type[PersistentObject], keys: Iterable[Any]
    ) -> List[RollbackFailure]:
        """
        Delete the records of the given type with the given identities.

        Args:
            record_type: Type of the records to delete
            keys: Rollback identities, in the order they should be deleted

        Returns:
            The failures that occurred; empty if every delete succeeded
        """
        failures = []
        for key in keys:
            try:
                strategy = strategy_for(record_type)
                self._store.remove(strategy.collection, strategy.rollback_key_field, key)
            except Exception as e:
                # collected, never raised; later deletes still run
                message = e.message if isinstance(e, SportsStoreError) else f"{type(e).__name__}: {e}"
                failure = RollbackFailure(
                    record_type.__name__, key, f"Error while rollback: {message}"
                )
                logger.debug(failure.message, exc_info=e)
                failures.append(failure)
        return failures


class UndoLog:
    """Ordered log of the records written by one composite insert."""

    def __init__(self, executor: RollbackExecutor):
        self._executor = executor
        self._entries: List[Tuple[Type[PersistentObject], Any]] = []

    def __len__(self) -> int:
        return len(self._entries)

    def record(self, record: PersistentObject) -> None:
        """Remember a successfully written record."""
        record_type = type(record)
        self._entries.append((record_type, strategy_for(record_type).rollback_key_of(record)))

    def replay(self) -> List[RollbackFailure]:
        """Delete every recorded record, newest first, and clear the log."""
        failures = []
        for record_type, key in reversed(self._entries):
            failures.extend(self._executor.rollback(record_type, [key]))
        if self._entries:
            logger.info(
                f"Rolled back {len(self._entries)} records, {len(failures)} failed"
            )
        self._entries.clear()
        return failures


@contextmanager
def compensating_insert(executor: RollbackExecutor) -> Iterator[UndoLog]:
    """
    Context manager that undoes recorded writes if the block raises.

    Usage:
        with compensating_insert(executor) as undo:
            store.insert("locations", document)
            undo.record(location)
            ...

    The original exception is always re-raised after the rollback.
    """
    undo = UndoLog(executor)
    try:
        yield undo
    except Exception:
        try:
            undo.replay()
        except Exception as rollback_error:
            logger.error(f"Rollback aborted: {rollback_error}", exc_info=rollback_error)
        raise
