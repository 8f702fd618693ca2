"""Engine and session setup for the SQL-backed document store."""

import time

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from ..utils.logging_config import get_logger

logger = get_logger('database')

Base = declarative_base()

# Applied on every new SQLite connection, in this order
SQLITE_PRAGMAS = (
    ("journal_mode", "WAL"),
    ("synchronous", "NORMAL"),
    ("busy_timeout", "5000"),
    ("cache_size", "1000"),
    ("temp_store", "MEMORY"),
)

SLOW_QUERY_SECONDS = 0.1


def _is_sqlite_url(url: str) -> bool:
    """Check if database URL is for SQLite."""
    return url.startswith("sqlite:")


def _setup_sqlite_pragma(dbapi_connection, connection_record):
    """Set SQLite pragmas on a fresh connection."""
    cursor = dbapi_connection.cursor()
    try:
        for name, value in SQLITE_PRAGMAS:
            cursor.execute(f"PRAGMA {name}={value}")
    finally:
        cursor.close()


def _setup_query_logging(engine: Engine) -> None:
    """Time every statement; slow ones are logged as warnings."""

    @event.listens_for(engine, "before_cursor_execute")
    def _start_timer(conn, cursor, statement, parameters, context, executemany):
        context._query_start_time = time.perf_counter()

    @event.listens_for(engine, "after_cursor_execute")
    def _log_duration(conn, cursor, statement, parameters, context, executemany):
        elapsed = time.perf_counter() - context._query_start_time
        if elapsed > SLOW_QUERY_SECONDS:
            logger.warning(f"Slow query ({elapsed:.3f}s): {statement[:200]}")
        else:
            logger.debug(f"Query ({elapsed:.3f}s): {statement[:100]}")


def create_database_engine(
    database_url: str, echo: bool = False, enable_query_logging: bool = False
) -> Engine:
    """Create an engine for the document table.

    SQLite files are opened for cross-thread use with WAL journaling; other
    backends get connection liveness checks.
    """
    if _is_sqlite_url(database_url):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=echo,
        )
        event.listen(engine, "connect", _setup_sqlite_pragma)
    else:
        engine = create_engine(database_url, echo=echo, pool_pre_ping=True)

    if enable_query_logging:
        _setup_query_logging(engine)

    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    """Sessions keep loaded documents usable after commit."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def init_schema(engine: Engine) -> None:
    """Create the document table if it does not exist yet."""
    # registers StoredDocument on Base.metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
