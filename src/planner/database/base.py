"""Abstract durable storage interface."""

from abc import ABC, abstractmethod
from typing import Optional


class Storage(ABC):
    """Key/value store holding one JSON document per key.

    Implementations raise planner.domain.errors.StorageError (or a subclass)
    when the backend rejects an operation.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value for key, or None if absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove key. Removing an absent key is not an error."""
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List all stored keys."""
        pass
