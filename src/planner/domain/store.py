"""Local-first domain store.

The store owns every entity collection and the budget settings singleton,
applies create/update/delete operations in memory and mirrors each changed
collection to its own storage key. Storage problems never escape: load
failures fall back to empty collections and write failures are reported
through logging and the optional ``on_write_error`` callback while the
in-memory state stays as mutated.
"""

import json
import logging
from dataclasses import fields as dataclass_fields, replace
from datetime import datetime, UTC
from enum import Enum
from typing import Any, Callable, Generic, Iterable, Iterator, Optional, TypeVar

from planner.database import mappers
from planner.database.base import Storage
from planner.domain.entities import (
    BudgetSettings,
    Client,
    CompanyProfile,
    Drawing,
    Goal,
    Invoice,
    Note,
    PlanItem,
    Subscription,
    Transaction,
)
from planner.domain.errors import StorageError, StorageQuotaExceededError
from planner.domain.recurring import expand_recurring, is_recurring_master
from planner.utils.date_parser import local_date, parse_datetime
from planner.utils.ids import new_id

logger = logging.getLogger(__name__)

E = TypeVar("E")

NOTES_KEY = "planner-notes"
GOALS_KEY = "planner-goals"
PLANS_KEY = "planner-plans"
DRAWINGS_KEY = "planner-drawings"
SUBSCRIPTIONS_KEY = "planner-subscriptions"
TRANSACTIONS_KEY = "planner-transactions"
INVOICES_KEY = "planner-invoices"
CLIENTS_KEY = "planner-clients"
COMPANY_PROFILES_KEY = "planner-company-profiles"
BUDGET_SETTINGS_KEY = "planner-budget-settings"
RECURRING_SKIPS_KEY = "planner-recurring-skips"

IMMUTABLE_FIELDS = frozenset({"id", "created_at"})

# Updates to these transaction fields can change recurring output
_RECURRING_FIELDS = frozenset({"recurring", "period", "date", "kind"})


class WriteFailureKind(str, Enum):
    """Classification of a rejected storage write."""

    QUOTA_EXCEEDED = "quota_exceeded"
    OTHER = "other"


WriteErrorHandler = Callable[[str, WriteFailureKind, Exception], None]


class EntityCollection(Generic[E]):
    """In-memory collection of one entity type mirrored to one storage key."""

    def __init__(
        self,
        store: "Store",
        key: str,
        entity_type: type,
        to_record: Callable[[E], dict[str, Any]],
        from_record: Callable[[dict[str, Any]], E],
    ):
        self.store = store
        self.key = key
        self.entity_type = entity_type
        self.to_record = to_record
        self.from_record = from_record
        self.timestamped = any(f.name == "created_at" for f in dataclass_fields(entity_type))
        self._items: list[E] = []

    def __iter__(self) -> Iterator[E]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, entity_id: object) -> bool:
        return self.get(entity_id) is not None

    def all(self) -> list[E]:
        """Return a snapshot list of the collection."""
        return list(self._items)

    def get(self, entity_id) -> Optional[E]:
        """Return the entity with entity_id, or None."""
        for item in self._items:
            if item.id == entity_id:
                return item
        return None

    def add(self, **values) -> E:
        """Create an entity with a fresh id (and created_at) and append it.

        Returns:
            The created entity
        """
        values = self._without_immutable(values)
        values["id"] = new_id()
        if self.timestamped:
            values["created_at"] = self.store.now()
        entity = self.entity_type(**values)
        self._items = self._items + [entity]
        self._changed()
        return entity

    def update(self, entity_id: str, **changes) -> None:
        """Merge changes into the entity with entity_id.

        Unknown ids are ignored. id and created_at are never changed.
        """
        changes = self._without_immutable(changes)
        index = self._index_of(entity_id)
        if index is None:
            return
        items = list(self._items)
        items[index] = replace(items[index], **changes)
        self._items = items
        self._changed()

    def delete(self, entity_id: str) -> None:
        """Remove the entity with entity_id. Unknown ids are ignored."""
        if self._index_of(entity_id) is None:
            return
        self._items = [item for item in self._items if item.id != entity_id]
        self._changed()

    def serialize(self) -> str:
        """Return the JSON document stored under this collection's key."""
        return json.dumps([self.to_record(item) for item in self._items])

    def load_records(self, records: Any) -> None:
        """Replace contents from decoded JSON records.

        Raises:
            TypeError, KeyError, ValueError: If records do not match the entity shape
        """
        if not isinstance(records, list):
            raise TypeError(f"expected a list, got {type(records).__name__}")
        items = []
        for record in records:
            if not isinstance(record, dict):
                raise TypeError(f"expected an object, got {type(record).__name__}")
            items.append(self.from_record(record))
        self._items = items

    def reset(self) -> None:
        self._items = []

    def _index_of(self, entity_id) -> Optional[int]:
        for index, item in enumerate(self._items):
            if item.id == entity_id:
                return index
        return None

    def _without_immutable(self, values: dict[str, Any]) -> dict[str, Any]:
        dropped = IMMUTABLE_FIELDS.intersection(values)
        if dropped:
            logger.debug("Ignoring store-managed fields %s on %s", sorted(dropped), self.key)
        return {k: v for k, v in values.items() if k not in IMMUTABLE_FIELDS}

    def _changed(self) -> None:
        self.store.persist(self)


class TransactionCollection(EntityCollection[Transaction]):
    """Transactions, including catch-up of recurring masters."""

    def add(self, **values) -> Transaction:
        if "date" in values:
            values["date"] = parse_datetime(values["date"])
        if values.get("recurring") and values.get("period") not in (None, "oneTime"):
            values["kind"] = "master"
        entity = super().add(**values)
        if is_recurring_master(entity):
            self.process_recurring()
        return entity

    def update(self, entity_id: str, **changes) -> None:
        existing = self.get(entity_id)
        if existing is None:
            return
        if changes.get("date") is not None:
            changes["date"] = parse_datetime(changes["date"])
        super().update(entity_id, **changes)
        if existing.is_master or _RECURRING_FIELDS.intersection(changes):
            self.process_recurring()

    def delete(self, entity_id: str) -> None:
        target = self.get(entity_id)
        if target is None:
            return
        if target.is_master:
            # Masters take their generated history with them
            self._items = [
                tx for tx in self._items
                if tx.id != entity_id and tx.origin_id != entity_id
            ]
            self._changed()
            self.process_recurring()
            return
        if target.is_history:
            self.store.skip_occurrences([target.id])
        super().delete(entity_id)

    def delete_many(self, entity_ids: Iterable[str]) -> None:
        """Delete several transactions in one write."""
        ids = set(entity_ids)
        if not ids:
            return
        masters = {tx.id for tx in self._items if tx.id in ids and tx.is_master}
        history = [tx.id for tx in self._items if tx.id in ids and tx.is_history]
        if history:
            self.store.skip_occurrences(history)
        remaining = [
            tx for tx in self._items
            if tx.id not in ids and tx.origin_id not in masters
        ]
        if len(remaining) == len(self._items):
            return
        self._items = remaining
        self._changed()
        if masters:
            self.process_recurring()

    def process_recurring(self) -> None:
        """Generate missing history rows for every recurring master."""
        if not self.store.loaded:
            return
        items, changed = expand_recurring(
            self._items,
            self.store.skips,
            today=local_date(self.store.now()),
            now=self.store.now(),
        )
        if changed:
            self._items = items
            self._changed()


class Store:
    """Owner of all planner entity collections."""

    def __init__(
        self,
        storage: Storage,
        on_write_error: Optional[WriteErrorHandler] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the store.

        Collections start empty and nothing is written until load() has run.

        Args:
            storage: Durable storage port
            on_write_error: Optional callback receiving (key, kind, error) for
                every rejected write
            clock: Optional source of the current time (defaults to UTC now)
        """
        self.storage = storage
        self.on_write_error = on_write_error
        self._clock = clock or (lambda: datetime.now(UTC))
        self.loaded = False

        self.notes: EntityCollection[Note] = EntityCollection(
            self, NOTES_KEY, Note, mappers.note_to_record, mappers.note_from_record
        )
        self.goals: EntityCollection[Goal] = EntityCollection(
            self, GOALS_KEY, Goal, mappers.goal_to_record, mappers.goal_from_record
        )
        self.plans: EntityCollection[PlanItem] = EntityCollection(
            self, PLANS_KEY, PlanItem, mappers.plan_to_record, mappers.plan_from_record
        )
        self.drawings: EntityCollection[Drawing] = EntityCollection(
            self, DRAWINGS_KEY, Drawing, mappers.drawing_to_record, mappers.drawing_from_record
        )
        self.subscriptions: EntityCollection[Subscription] = EntityCollection(
            self,
            SUBSCRIPTIONS_KEY,
            Subscription,
            mappers.subscription_to_record,
            mappers.subscription_from_record,
        )
        self.transactions = TransactionCollection(
            self,
            TRANSACTIONS_KEY,
            Transaction,
            mappers.transaction_to_record,
            mappers.transaction_from_record,
        )
        self.invoices: EntityCollection[Invoice] = EntityCollection(
            self, INVOICES_KEY, Invoice, mappers.invoice_to_record, mappers.invoice_from_record
        )
        self.clients: EntityCollection[Client] = EntityCollection(
            self, CLIENTS_KEY, Client, mappers.client_to_record, mappers.client_from_record
        )
        self.company_profiles: EntityCollection[CompanyProfile] = EntityCollection(
            self,
            COMPANY_PROFILES_KEY,
            CompanyProfile,
            mappers.company_profile_to_record,
            mappers.company_profile_from_record,
        )
        self.budget_settings = BudgetSettings()
        self.skips: frozenset[str] = frozenset()

    @property
    def collections(self) -> list[EntityCollection]:
        return [
            self.notes,
            self.goals,
            self.plans,
            self.drawings,
            self.subscriptions,
            self.transactions,
            self.invoices,
            self.clients,
            self.company_profiles,
        ]

    @property
    def owned_keys(self) -> list[str]:
        return [c.key for c in self.collections] + [BUDGET_SETTINGS_KEY, RECURRING_SKIPS_KEY]

    def now(self) -> datetime:
        return self._clock()

    # Lifecycle

    def load(self) -> "Store":
        """Read every owned key and start persisting.

        Missing or unreadable keys leave their collection empty; nothing is
        raised.
        """
        if self.loaded:
            return self

        for collection in self.collections:
            records = self._read_json(collection.key)
            if records is None:
                continue
            try:
                collection.load_records(records)
            except (TypeError, KeyError, ValueError, AttributeError, OverflowError) as e:
                collection.reset()
                logger.warning("Failed to load %s, starting empty: %s", collection.key, e)

        settings = self._read_json(BUDGET_SETTINGS_KEY)
        if settings is not None:
            try:
                self.budget_settings = mappers.budget_settings_from_record(settings)
            except (TypeError, ValueError, AttributeError, OverflowError) as e:
                logger.warning("Failed to load %s, using defaults: %s", BUDGET_SETTINGS_KEY, e)

        skips = self._read_json(RECURRING_SKIPS_KEY)
        if isinstance(skips, list):
            self.skips = frozenset(str(s) for s in skips)
        elif skips is not None:
            logger.warning("Failed to load %s: expected a list", RECURRING_SKIPS_KEY)

        self.loaded = True
        logger.debug("Store loaded: %s", {c.key: len(c) for c in self.collections})
        self.transactions.process_recurring()
        return self

    def clear_all_data(self) -> None:
        """Empty every collection, reset settings and erase owned keys."""
        for collection in self.collections:
            collection.reset()
        self.budget_settings = BudgetSettings()
        self.skips = frozenset()
        for key in self.owned_keys:
            try:
                self.storage.remove(key)
            except StorageError as e:
                logger.error("Failed to remove %s: %s", key, e)
        logger.info("All planner data cleared")

    # Singletons

    def update_budget_settings(self, **changes) -> BudgetSettings:
        """Merge changes into the budget settings and persist them."""
        self.budget_settings = replace(self.budget_settings, **changes)
        if self.loaded:
            self._write(
                BUDGET_SETTINGS_KEY,
                lambda: json.dumps(mappers.budget_settings_to_record(self.budget_settings)),
            )
        return self.budget_settings

    def skip_occurrences(self, history_ids: Iterable[str]) -> None:
        """Record deleted recurring occurrences so they are not regenerated."""
        self.skips = self.skips | frozenset(history_ids)
        if self.loaded:
            self._write(RECURRING_SKIPS_KEY, lambda: json.dumps(sorted(self.skips)))

    # Weak references

    def client_for(self, invoice: Invoice) -> Optional[Client]:
        """Resolve an invoice's client; None if it was deleted."""
        return self.clients.get(invoice.client_id)

    def notes_for(self, plan: PlanItem) -> list[Note]:
        """Resolve a plan's linked notes, skipping dangling ids."""
        return [n for n in (self.notes.get(i) for i in plan.linked_notes) if n is not None]

    def plans_for(self, note: Note) -> list[PlanItem]:
        """Resolve a note's linked plans, skipping dangling ids."""
        return [p for p in (self.plans.get(i) for i in note.linked_plans) if p is not None]

    # Persistence

    def persist(self, collection: EntityCollection) -> None:
        """Write one collection to its key once loading has finished."""
        if not self.loaded:
            return
        self._write(collection.key, collection.serialize)

    def _write(self, key: str, serialize: Callable[[], str]) -> None:
        try:
            self.storage.set(key, serialize())
        except StorageQuotaExceededError as e:
            self._report_write_failure(key, WriteFailureKind.QUOTA_EXCEEDED, e)
        except (StorageError, TypeError, ValueError) as e:
            self._report_write_failure(key, WriteFailureKind.OTHER, e)

    def _report_write_failure(self, key: str, kind: WriteFailureKind, error: Exception) -> None:
        logger.error("Failed to save %s (%s): %s", key, kind.value, error)
        if self.on_write_error is not None:
            self.on_write_error(key, kind, error)

    def _read_json(self, key: str) -> Any:
        try:
            raw = self.storage.get(key)
        except StorageError as e:
            logger.warning("Failed to read %s: %s", key, e)
            return None
        if raw is None or raw == "undefined":
            return None
        try:
            return json.loads(raw)
        except (ValueError, RecursionError) as e:
            logger.warning("Failed to parse %s: %s", key, e)
            return None


def open_store(storage: Storage, on_write_error: Optional[WriteErrorHandler] = None) -> Store:
    """Create a store over storage and load it."""
    return Store(storage, on_write_error=on_write_error).load()
