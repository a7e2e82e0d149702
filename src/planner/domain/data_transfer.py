"""Backup export and import of planner storage keys."""

import json
import logging
from dataclasses import dataclass
from typing import Any

from planner.database.base import Storage
from planner.domain.errors import StorageError, ValidationError

logger = logging.getLogger(__name__)

BACKUP_PREFIXES = ("planner-", "invoice_sequence_")


def is_backup_key(key: str) -> bool:
    return key.startswith(BACKUP_PREFIXES)


@dataclass(frozen=True)
class ImportResult:
    restored: int
    message: str


def export_all(storage: Storage) -> dict[str, Any]:
    """Collect every backup key into one JSON-compatible document.

    Values that are valid JSON are embedded decoded; others as raw strings.
    Unreadable keys are skipped.
    """
    data: dict[str, Any] = {}
    for key in storage.keys():
        if not is_backup_key(key):
            continue
        try:
            value = storage.get(key)
        except StorageError as e:
            logger.warning("Skipping %s due to read error: %s", key, e)
            continue
        if value is None:
            continue
        try:
            data[key] = json.loads(value)
        except (ValueError, RecursionError):
            data[key] = value
    logger.info("Exported %d keys", len(data))
    return data


def import_all(storage: Storage, backup: Any) -> ImportResult:
    """Replace all backup keys in storage with the contents of backup.

    Raises:
        ValidationError: If backup is not an object or holds no planner keys
        StorageError: If storage rejects the restore
    """
    if not isinstance(backup, dict):
        raise ValidationError("Invalid backup file format")
    valid_keys = [k for k in backup if isinstance(k, str) and is_backup_key(k)]
    if not valid_keys:
        raise ValidationError("No planner data found in backup")

    for key in [k for k in storage.keys() if is_backup_key(k)]:
        storage.remove(key)

    for key in valid_keys:
        value = backup[key]
        storage.set(key, value if isinstance(value, str) else json.dumps(value))

    logger.info("Restored %d keys from backup", len(valid_keys))
    return ImportResult(restored=len(valid_keys), message=f"Restored {len(valid_keys)} items")
