"""Tests for backup export and import."""

import json

import pytest

from planner.database.memory import MemoryStorage
from planner.domain.data_transfer import export_all, import_all
from planner.domain.errors import ValidationError


def test_export_collects_planner_keys(memory_storage):
    """Test export embeds JSON values and skips foreign keys."""
    memory_storage.set("planner-notes", json.dumps([{"id": "n1"}]))
    memory_storage.set("invoice_sequence_default_2025", "3")
    memory_storage.set("planner-raw", "not json")
    memory_storage.set("other-app", "x")

    backup = export_all(memory_storage)

    assert backup == {
        "planner-notes": [{"id": "n1"}],
        "invoice_sequence_default_2025": 3,
        "planner-raw": "not json",
    }


def test_import_replaces_existing_keys(memory_storage):
    """Test import removes stale planner keys and restores the backup."""
    memory_storage.set("planner-goals", "[]")
    memory_storage.set("other-app", "x")

    result = import_all(memory_storage, {
        "planner-notes": [{"id": "n1"}],
        "planner-raw": "text",
        "unrelated": 1,
    })

    assert result.restored == 2
    assert result.message == "Restored 2 items"
    assert memory_storage.get("planner-goals") is None
    assert json.loads(memory_storage.get("planner-notes")) == [{"id": "n1"}]
    assert memory_storage.get("planner-raw") == "text"
    assert memory_storage.get("other-app") == "x"
    assert memory_storage.get("unrelated") is None


def test_export_import_round_trip(store, memory_storage):
    """Test a backup restores the same store contents."""
    note = store.notes.add(title="Backup me", content="")
    backup = export_all(memory_storage)

    target = MemoryStorage()
    import_all(target, json.loads(json.dumps(backup)))

    assert json.loads(target.get("planner-notes"))[0]["id"] == note.id


@pytest.mark.parametrize("backup,message", [
    (["planner-notes"], "Invalid backup file format"),
    ({"something": 1}, "No planner data found in backup"),
])
def test_import_rejects_invalid_backup(memory_storage, backup, message):
    """Test invalid backups raise and leave storage alone."""
    memory_storage.set("planner-notes", "[]")

    with pytest.raises(ValidationError, match=message):
        import_all(memory_storage, backup)

    assert memory_storage.get("planner-notes") == "[]"
