"""Recurring transaction catch-up."""

from dataclasses import replace
from datetime import date, datetime, UTC
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from planner.domain.entities import Transaction, TransactionPeriod
from planner.utils.date_parser import local_date

# Upper bound on generated occurrences per master and run
MAX_CATCHUP = {
    TransactionPeriod.DAILY.value: 3660,
    TransactionPeriod.WEEKLY.value: 1040,
    TransactionPeriod.MONTHLY.value: 600,
}
DEFAULT_MAX_CATCHUP = 200

_STEPS = {
    TransactionPeriod.DAILY.value: relativedelta(days=1),
    TransactionPeriod.WEEKLY.value: relativedelta(weeks=1),
    # relativedelta clamps to month end (Jan 31 -> Feb 28/29)
    TransactionPeriod.MONTHLY.value: relativedelta(months=1),
    TransactionPeriod.YEARLY.value: relativedelta(years=1),
}


def is_recurring_master(tx: Transaction) -> bool:
    """Return True if tx generates history occurrences."""
    return tx.recurring and tx.period not in (None, TransactionPeriod.ONE_TIME.value)


def advance_by_period(value: datetime, period: Optional[str]) -> datetime:
    """Return the next occurrence after value; unknown periods step one day."""
    return value + _STEPS.get(period, relativedelta(days=1))


def history_id(master_id: str, day: date) -> str:
    """Identifier of the history row generated for master on day."""
    return f"{master_id}_{day.isoformat()}"


def expand_recurring(
    transactions: list[Transaction],
    skips: Iterable[str],
    today: date,
    now: Optional[datetime] = None,
) -> tuple[list[Transaction], bool]:
    """Materialize past occurrences of every recurring master.

    For each master, one history transaction is created for every occurrence
    on or before today unless its id already exists or has been skipped. The
    master's date is then moved to its next future occurrence.

    Args:
        transactions: Current transaction collection
        skips: History ids that were deleted and must not be regenerated
        today: Last local calendar day to catch up to (inclusive)
        now: Timestamp recorded on generated rows

    Returns:
        Tuple of (new collection, whether anything changed)
    """
    now = now or datetime.now(UTC)
    skipped = set(skips)
    existing_ids = {tx.id for tx in transactions}
    changed = False
    updated: list[Transaction] = []
    new_history: list[Transaction] = []

    for tx in transactions:
        if not is_recurring_master(tx):
            updated.append(tx)
            continue

        master = tx if tx.is_master else replace(tx, kind="master")
        if master is not tx:
            changed = True
        if local_date(master.date) > today:
            updated.append(master)
            continue

        limit = MAX_CATCHUP.get(master.period, DEFAULT_MAX_CATCHUP)
        current = master.date
        iterations = 0
        while local_date(current) <= today and iterations < limit:
            day = local_date(current)
            occurrence_id = history_id(master.id, day)
            if occurrence_id not in existing_ids and occurrence_id not in skipped:
                existing_ids.add(occurrence_id)
                new_history.append(replace(
                    master,
                    id=occurrence_id,
                    origin_id=master.id,
                    kind="history",
                    date=current,
                    effective_date_ymd=day.isoformat(),
                    recurring=False,
                    created_at_iso=now.isoformat(),
                ))
                changed = True
            current = advance_by_period(current, master.period)
            iterations += 1

        if current != master.date:
            changed = True
        updated.append(replace(master, date=current))

    if not changed:
        return transactions, False
    return updated + new_history, True
