"""Factories wiring the configured document store into a repository."""

from pathlib import Path
from typing import Optional

from ..config import SportsStoreConfig, get_config
from ..db.database import create_database_engine
from ..store.interfaces import DocumentStore
from ..store.memory_impl import MemoryDocumentStore
from ..store.sqlalchemy_impl import SQLAlchemyDocumentStore
from ..utils.logging_config import get_logger
from .data_repository import DataRepository
from .delegate import DatastoreDelegate

logger = get_logger('main')


def create_document_store(config: Optional[SportsStoreConfig] = None) -> DocumentStore:
    """Open the document store selected by the configuration."""
    if config is None:
        config = get_config()

    if config.database.is_memory:
        logger.info("Using in-memory document store")
        return MemoryDocumentStore()

    database_url = config.database_url
    if database_url.startswith("sqlite:///"):
        db_file = database_url[len("sqlite:///"):]
        if db_file and db_file != ":memory:":
            Path(db_file).parent.mkdir(parents=True, exist_ok=True)

    engine = create_database_engine(
        database_url,
        echo=config.database.echo,
        enable_query_logging=config.database.log_queries,
    )
    logger.info(f"Using document store at {engine.url.render_as_string(hide_password=True)}")
    return SQLAlchemyDocumentStore(engine)


def create_data_repository(
    config: Optional[SportsStoreConfig] = None,
    delegate: Optional[DatastoreDelegate] = None,
) -> DataRepository:
    """Open the configured store and wrap it in a repository."""
    return DataRepository(create_document_store(config), delegate=delegate)
