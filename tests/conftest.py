"""Pytest configuration and shared fixtures."""

import os
import shutil
import tempfile
from datetime import date, datetime, timezone
from typing import Callable, Dict, Generator, List, Optional

# Point the configuration at a throwaway directory before sports_store is imported;
# module level loggers load the configuration on import.
_TEST_USER_DATA_DIR = tempfile.mkdtemp(prefix="sports_store_tests_")
os.environ["SPORTS_STORE_USER_DATA_DIR"] = _TEST_USER_DATA_DIR
os.environ["SPORTS_STORE_LOG_TO_FILE"] = "0"
os.environ.pop("SPORTS_STORE_DATABASE_URL", None)
os.environ.pop("SPORTS_STORE_DEBUG", None)
os.environ.pop("SPORTS_STORE_LOG_DIR", None)

import pytest

from sports_store.config import reset_config
from sports_store.core.enums import MovementTypeKey
from sports_store.db.database import create_database_engine
from sports_store.domain.models import (
    LocationData,
    MovementType,
    PersistentObject,
    RunningPlan,
    RunningPlanEntry,
    RunningUnit,
    Track,
    Training,
    TrainingType,
    User,
)
from sports_store.repositories import DataRepository, DatastoreDelegate
from sports_store.store.memory_impl import MemoryDocumentStore
from sports_store.store.sqlalchemy_impl import SQLAlchemyDocumentStore
from sports_store.utils.logging_config import shutdown_logging


def pytest_sessionfinish(session, exitstatus):
    shutdown_logging()
    shutil.rmtree(_TEST_USER_DATA_DIR, ignore_errors=True)


class RecordingDelegate(DatastoreDelegate):
    """Delegate remembering every notification it received."""

    def __init__(self):
        self.events: List[tuple] = []

    def did_object_added(self, record: PersistentObject) -> None:
        self.events.append(("added", record))

    def did_object_updated(self, record: PersistentObject) -> None:
        self.events.append(("updated", record))

    def did_object_removed(self, record: PersistentObject) -> None:
        self.events.append(("removed", record))

    def kinds(self) -> List[str]:
        return [kind for kind, _ in self.events]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolated configuration environment rooted at a temporary directory."""
    monkeypatch.setenv("SPORTS_STORE_USER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("SPORTS_STORE_LOG_TO_FILE", "0")
    for name in ("SPORTS_STORE_DATABASE_URL", "SPORTS_STORE_DEBUG", "SPORTS_STORE_LOG_DIR"):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield tmp_path
    reset_config()


@pytest.fixture
def delegate() -> RecordingDelegate:
    return RecordingDelegate()


@pytest.fixture
def memory_store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def sqlite_store(tmp_path) -> Generator[SQLAlchemyDocumentStore, None, None]:
    """Document store backed by a SQLite file in a temporary directory."""
    engine = create_database_engine(f"sqlite:///{tmp_path / 'store.db'}")
    store = SQLAlchemyDocumentStore(engine)
    yield store
    store.close()


@pytest.fixture
def repository(memory_store, delegate) -> DataRepository:
    """Repository over the in-memory store with a recording delegate."""
    return DataRepository(memory_store, delegate=delegate)


@pytest.fixture(params=["memory", "sqlite"])
def any_repository(request, delegate) -> Generator[DataRepository, None, None]:
    """Repository over each store implementation."""
    if request.param == "memory":
        store = MemoryDocumentStore()
    else:
        store = request.getfixturevalue("sqlite_store")
    repo = DataRepository(store, delegate=delegate)
    yield repo
    repo.close()


# Record factories


@pytest.fixture
def make_track() -> Callable[..., Track]:
    def _make(num_locations: int = 2, **kwargs) -> Track:
        locations = [
            LocationData(
                timestamp=datetime(2024, 5, 1, 8, 0, i, tzinfo=timezone.utc),
                latitude=48.1 + i / 1000,
                longitude=11.5 + i / 1000,
            )
            for i in range(num_locations)
        ]
        kwargs.setdefault("name", "Morning loop")
        return Track(locations=locations, **kwargs)

    return _make


@pytest.fixture
def make_plan() -> Callable[..., RunningPlan]:
    def _make(
        units_per_entry: Optional[Dict[tuple, List[str]]] = None, **kwargs
    ) -> RunningPlan:
        """Build a plan from {(week, day): [movement type keys]}."""
        if units_per_entry is None:
            units_per_entry = {
                (1, 1): [MovementTypeKey.SLOW_WALKING.value, MovementTypeKey.RUNNING.value],
                (1, 3): [MovementTypeKey.SPRINT.value],
            }
        entries = [
            RunningPlanEntry(
                week=week,
                day=day,
                running_units=[
                    RunningUnit(duration=5, movement_type=MovementType(key=key)) for key in keys
                ],
            )
            for (week, day), keys in units_per_entry.items()
        ]
        kwargs.setdefault("name", "Beginner 5k")
        kwargs.setdefault("start_date", date(2024, 5, 6))
        return RunningPlan(entries=entries, **kwargs)

    return _make


@pytest.fixture
def make_user() -> Callable[..., User]:
    def _make(**kwargs) -> User:
        kwargs.setdefault("first_name", "Alex")
        kwargs.setdefault("last_name", "Runner")
        return User(**kwargs)

    return _make


@pytest.fixture
def make_training() -> Callable[..., Training]:
    def _make(training_type: Optional[TrainingType] = None, track: Optional[Track] = None,
              **kwargs) -> Training:
        kwargs.setdefault("name", "Tempo run")
        return Training(
            training_type_uuid=training_type.uuid if training_type else None,
            track_uuid=track.uuid if track else None,
            **kwargs,
        )

    return _make
