"""Storage factory functions."""

import os
from pathlib import Path
from typing import Optional

from planner.database.sqlalchemy_db import SQLAlchemyStorage


def create_sqlite_storage(database_path: Optional[str] = None) -> SQLAlchemyStorage:
    """Create a SQLite-backed storage instance.

    Args:
        database_path: Path to SQLite database file. If None, checks PLANNER_DB_PATH
            environment variable, then defaults to ~/.planner/planner.db

    Returns:
        SQLAlchemyStorage instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get("PLANNER_DB_PATH")

    if database_path is None:
        db_dir = Path.home() / ".planner"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "planner.db")

    return SQLAlchemyStorage(f"sqlite:///{database_path}")
