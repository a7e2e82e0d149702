"""Generic SQLAlchemy storage implementation."""

from typing import Optional
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from planner.database.base import Storage
from planner.database.models import StorageEntry, create_session_factory
from planner.domain.errors import StorageError, StorageQuotaExceededError, StorageReadError

# SQLite reports SQLITE_FULL with this message
_QUOTA_MARKERS = ("database or disk is full", "disk quota exceeded")


def _is_quota_error(error: SQLAlchemyError) -> bool:
    message = str(getattr(error, "orig", error)).lower()
    return isinstance(error, OperationalError) and any(m in message for m in _QUOTA_MARKERS)


class SQLAlchemyStorage(Storage):
    """SQLAlchemy-based implementation of the Storage interface."""

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy storage.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db')
        """
        self.database_url = database_url
        self.session_factory = create_session_factory(database_url)
        self._session: Optional[Session] = None

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    def connect(self) -> None:
        """Connect to the database."""
        # Connection is lazy, so this is a no-op
        pass

    def disconnect(self) -> None:
        """Disconnect from the database."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def get(self, key: str) -> Optional[str]:
        session = self._get_session()
        try:
            entry = session.get(StorageEntry, key)
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageReadError(f"Could not read '{key}': {e}") from e
        return None if entry is None else entry.value

    def set(self, key: str, value: str) -> None:
        session = self._get_session()
        try:
            entry = session.get(StorageEntry, key)
            if entry is None:
                session.add(StorageEntry(key=key, value=value))
            else:
                entry.value = value
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            if _is_quota_error(e):
                raise StorageQuotaExceededError(f"Storage full while writing '{key}'") from e
            raise StorageError(f"Could not write '{key}': {e}") from e

    def remove(self, key: str) -> None:
        session = self._get_session()
        try:
            session.query(StorageEntry).filter(StorageEntry.key == key).delete()
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Could not remove '{key}': {e}") from e

    def keys(self) -> list[str]:
        session = self._get_session()
        try:
            rows = session.query(StorageEntry.key).order_by(StorageEntry.key).all()
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageReadError(f"Could not list keys: {e}") from e
        return [row[0] for row in rows]
