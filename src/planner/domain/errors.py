"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class StorageError(Exception):
    """A durable storage backend rejected a read or write."""


class StorageQuotaExceededError(StorageError):
    """Storage write rejected because the backend is out of capacity."""


class StorageReadError(StorageError):
    """Stored value could not be read back."""


def habit_not_found(habit_id: str) -> str:
    """Return message for missing habit."""
    return f"Habit {habit_id} not found"


def note_not_found(note_id: str) -> str:
    """Return message for missing note."""
    return f"Note {note_id} not found"


def unknown_currency(code: str) -> str:
    """Return message for a currency code outside the catalog."""
    return f"Unknown currency '{code}'"
