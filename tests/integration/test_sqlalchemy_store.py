"""Integration tests for the SQLAlchemy document store on SQLite."""

import pytest
from sqlalchemy import inspect, text

from sports_store.core.errors import StoreOperationError, StoreUnavailable
from sports_store.db.database import _is_sqlite_url, create_database_engine
from sports_store.store.sqlalchemy_impl import SQLAlchemyDocumentStore


@pytest.mark.integration
class TestSQLiteEngine:
    """Test engine configuration for SQLite files."""

    def test_sqlite_url_detection(self):
        assert _is_sqlite_url("sqlite:///store.db") is True
        assert _is_sqlite_url("postgresql://localhost/store") is False

    def test_wal_mode_enabled(self, tmp_path):
        engine = create_database_engine(f"sqlite:///{tmp_path / 'wal.db'}")
        try:
            with engine.connect() as conn:
                assert conn.execute(text("PRAGMA journal_mode")).scalar() == "wal"
                assert conn.execute(text("PRAGMA busy_timeout")).scalar() == 5000
        finally:
            engine.dispose()

    def test_schema_is_created(self, sqlite_store, tmp_path):
        engine = create_database_engine(f"sqlite:///{tmp_path / 'store.db'}")
        try:
            assert "documents" in inspect(engine).get_table_names()
        finally:
            engine.dispose()


@pytest.mark.integration
class TestDocumentPrimitives:
    """Test the store primitives against a real database file."""

    def test_insert_and_find(self, sqlite_store):
        sqlite_store.insert("users", {"uuid": "A", "first_name": "Alex"})
        sqlite_store.insert("users", {"uuid": "B", "first_name": "Sam"})
        sqlite_store.insert("tracks", {"uuid": "A", "name": "Loop"})

        assert [d["uuid"] for d in sqlite_store.find("users")] == ["A", "B"]
        assert sqlite_store.find("users", "first_name", "Sam") == [{"uuid": "B", "first_name": "Sam"}]
        assert sqlite_store.count("users", "uuid", "A") == 1
        assert sqlite_store.count("tracks") == 1

    def test_update_replaces_matching_documents(self, sqlite_store):
        sqlite_store.insert("movement_types", {"key": "L", "color_string": "green"})

        replaced = sqlite_store.update("movement_types", "key", "L", {"key": "L", "color_string": "red"})

        assert replaced == 1
        assert sqlite_store.find("movement_types", "key", "L")[0]["color_string"] == "red"
        assert sqlite_store.update("movement_types", "key", "R", {"key": "R"}) == 0

    def test_remove_by_field(self, sqlite_store):
        for name in ("Tempo", "Tempo", "Easy"):
            sqlite_store.insert("training_types", {"name": name})

        assert sqlite_store.remove("training_types", "name", "Tempo") == 2
        assert [d["name"] for d in sqlite_store.find("training_types")] == ["Easy"]

    def test_remove_all_is_scoped_to_collection(self, sqlite_store):
        sqlite_store.insert("users", {"uuid": "A"})
        sqlite_store.insert("tracks", {"uuid": "T"})

        assert sqlite_store.remove_all("users") == 1
        assert sqlite_store.count("users") == 0
        assert sqlite_store.count("tracks") == 1

    def test_nested_values_round_trip(self, sqlite_store):
        document = {"uuid": "P", "entry_uuids": ["E1", "E2"], "start_date": "2024-05-06", "order_number": 3}
        sqlite_store.insert("running_plans", document)

        assert sqlite_store.find("running_plans", "uuid", "P") == [document]

    def test_documents_persist_across_engines(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'persist.db'}"
        first = SQLAlchemyDocumentStore(create_database_engine(url))
        first.insert("users", {"uuid": "A"})
        first.close()

        second = SQLAlchemyDocumentStore(create_database_engine(url))
        try:
            assert second.count("users") == 1
        finally:
            second.close()

    def test_closed_store_is_unavailable(self, sqlite_store):
        sqlite_store.close()
        sqlite_store.close()

        assert sqlite_store.is_open() is False
        with pytest.raises(StoreUnavailable):
            sqlite_store.insert("users", {"uuid": "A"})
        with pytest.raises(StoreUnavailable):
            sqlite_store.find("users")

    def test_database_errors_are_wrapped(self, tmp_path):
        engine = create_database_engine(f"sqlite:///{tmp_path / 'broken.db'}")
        store = SQLAlchemyDocumentStore(engine)
        with engine.begin() as conn:
            conn.execute(text("DROP TABLE documents"))

        try:
            with pytest.raises(StoreOperationError) as exc_info:
                store.insert("users", {"uuid": "A"})
            assert exc_info.value.details == {"operation": "insert", "collection": "users"}
        finally:
            store.close()
