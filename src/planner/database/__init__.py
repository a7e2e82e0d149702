"""Storage layer for planner application."""

from planner.database.base import Storage
from planner.database.memory import MemoryStorage
from planner.database.factories import create_sqlite_storage

__all__ = ["Storage", "MemoryStorage", "create_sqlite_storage"]
