"""
Exception classes for the Sports Store persistence layer.

Write operations raise these synchronously. Read operations never raise them
to the caller; they log and return an empty result instead.
"""

from typing import Any, Dict, Optional


class SportsStoreError(Exception):
    """Base exception for all persistence errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class StoreUnavailable(SportsStoreError):
    """Raised when the document store is not open."""

    def __init__(self, message: str = "Database not available."):
        super().__init__(message)


class StoreOperationError(SportsStoreError):
    """Raised when a primitive of the underlying store fails."""

    def __init__(self, operation: str, collection: str, message: str):
        super().__init__(message, {"operation": operation, "collection": collection})


class AlreadyExists(SportsStoreError):
    """Raised when inserting a record whose identity is already stored."""

    def __init__(self, record_type: str, key: Any, message: Optional[str] = None):
        details = {"record_type": record_type, "key": key}
        msg = message or f"{record_type} with identity {key!r} already exists."
        super().__init__(msg, details)


class NotFound(SportsStoreError):
    """Raised when updating or deleting a record that is not stored."""

    def __init__(self, record_type: str, key: Any, operation: str):
        details = {"record_type": record_type, "key": key, "operation": operation}
        msg = f"{record_type} with identity {key!r} was not found, cannot {operation} it."
        super().__init__(msg, details)


class DanglingReference(SportsStoreError):
    """Raised when a referenced record must exist but does not."""

    def __init__(self, record_type: str, reference_type: str, reference_key: Any):
        details = {
            "record_type": record_type,
            "reference_type": reference_type,
            "reference_key": reference_key,
        }
        msg = (
            f"The {reference_type} {reference_key!r} referenced by the {record_type} "
            f"must exist before writing."
        )
        super().__init__(msg, details)


class DuplicateChildRecord(SportsStoreError):
    """Raised when a new composite record contains an already stored child."""

    def __init__(self, parent_type: str, child_type: str, child_key: Any):
        details = {
            "parent_type": parent_type,
            "child_type": child_type,
            "child_key": child_key,
        }
        msg = f"The new {parent_type} contains an existing {child_type} ({child_key!r})."
        super().__init__(msg, details)


class RollbackFailure(SportsStoreError):
    """A compensating delete failed. Logged only, never raised over the original error."""

    def __init__(self, record_type: str, key: Any, message: str):
        super().__init__(message, {"record_type": record_type, "key": key})


class Unsupported(SportsStoreError):
    """Raised for a record type that no cascade handler manages."""

    def __init__(self, record_type: str, operation: Optional[str] = None):
        details = {"record_type": record_type, "operation": operation}
        super().__init__(f"Unsupported datastore operation for type {record_type}.", details)
