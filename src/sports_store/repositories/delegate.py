"""Observer notified after successful mutations."""

from abc import ABC, abstractmethod

from ..domain.models import PersistentObject


class DatastoreDelegate(ABC):
    """Receives the fully constructed record after each successful write."""

    @abstractmethod
    def did_object_added(self, record: PersistentObject) -> None:
        """Called after a record was added."""
        pass

    @abstractmethod
    def did_object_updated(self, record: PersistentObject) -> None:
        """Called after a record was updated."""
        pass

    @abstractmethod
    def did_object_removed(self, record: PersistentObject) -> None:
        """Called after a record was removed."""
        pass


class NullDelegate(DatastoreDelegate):
    """Delegate that ignores every notification."""

    def did_object_added(self, record: PersistentObject) -> None:
        pass

    def did_object_updated(self, record: PersistentObject) -> None:
        pass

    def did_object_removed(self, record: PersistentObject) -> None:
        pass
