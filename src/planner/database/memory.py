"""In-memory storage implementation."""

from typing import Optional

from planner.database.base import Storage
from planner.domain.errors import StorageQuotaExceededError


class MemoryStorage(Storage):
    """Dictionary-backed Storage, used for tests and ephemeral sessions."""

    def __init__(self, capacity: Optional[int] = None):
        """Initialize memory storage.

        Args:
            capacity: Optional limit on the total number of stored characters.
                Writes that would exceed it raise StorageQuotaExceededError.
        """
        self.capacity = capacity
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.capacity is not None:
            used = sum(len(v) for k, v in self._data.items() if k != key)
            if used + len(value) > self.capacity:
                raise StorageQuotaExceededError(
                    f"Writing '{key}' would exceed capacity of {self.capacity} characters"
                )
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)
