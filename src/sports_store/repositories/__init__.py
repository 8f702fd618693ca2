"""Repository layer: identity lookup, cascading writes and rollback."""

from .data_repository import DataRepository
from .delegate import DatastoreDelegate, NullDelegate
from .dependencies import create_data_repository, create_document_store

__all__ = [
    "DataRepository",
    "DatastoreDelegate",
    "NullDelegate",
    "create_data_repository",
    "create_document_store",
]
