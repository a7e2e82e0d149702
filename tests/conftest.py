"""Shared pytest fixtures for planner tests."""

import os
import tempfile
from datetime import datetime

import pytest

from planner.database.factories import create_sqlite_storage
from planner.database.memory import MemoryStorage
from planner.domain.currency import CurrencyService
from planner.domain.habits import HabitTracker
from planner.domain.store import Store

# Naive local time: "today" is 2025-06-15 everywhere in the suite
FIXED_NOW = datetime(2025, 6, 15, 12, 0, 0)
FIXED_EPOCH = 1_750_000_000.0


class RecordingStorage(MemoryStorage):
    """MemoryStorage that remembers which keys were written."""

    def __init__(self, capacity=None):
        super().__init__(capacity=capacity)
        self.writes: list[str] = []

    def set(self, key, value):
        self.writes.append(key)
        super().set(key, value)


@pytest.fixture
def memory_storage():
    """Create an empty recording in-memory storage."""
    return RecordingStorage()


@pytest.fixture
def temp_storage():
    """Create a temporary SQLite-backed storage for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    storage = create_sqlite_storage(database_path=db_path)
    # Store the path for tests that need it
    storage.database_path = db_path
    storage.connect()

    yield storage

    storage.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def store(memory_storage, clock):
    """Create a loaded Store over in-memory storage with a fixed clock."""
    return Store(memory_storage, clock=clock).load()


@pytest.fixture
def currency_service(memory_storage):
    """Create a CurrencyService with a fixed clock."""
    return CurrencyService(memory_storage, clock=lambda: FIXED_EPOCH)


@pytest.fixture
def habit_tracker(memory_storage, clock):
    """Create a HabitTracker with a fixed clock."""
    return HabitTracker(memory_storage, clock=clock)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def db_path(tmp_path):
    """Return a path for a fresh CLI database file."""
    return str(tmp_path / "planner.db")
