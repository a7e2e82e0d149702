"""Invoice numbering, totals and revenue summaries."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence

from planner.database.base import Storage
from planner.domain.currency import CurrencyService, ZERO_DECIMAL_CURRENCIES
from planner.domain.entities import Invoice, InvoiceStatus

SEQUENCE_KEY_PREFIX = "invoice_sequence_"

# Statuses that count as billed revenue
REVENUE_STATUSES = frozenset({
    InvoiceStatus.PAID.value,
    InvoiceStatus.SENT.value,
    InvoiceStatus.OVERDUE.value,
})


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: float
    tax_amount: float
    total: float
    fraction_digits: int


@dataclass(frozen=True)
class FinancialSummary:
    """Invoice amounts converted to one currency."""

    currency: str
    revenue: float
    paid: float
    pending: float
    overdue: float


def _round(value: float, digits: int) -> float:
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def calculate_totals(
    items: Iterable[tuple[float, float]],
    tax_rate: float,
    currency: str,
    discount: float = 0,
) -> InvoiceTotals:
    """Calculate subtotal, tax and total for invoice lines.

    Args:
        items: (quantity, rate) pairs
        tax_rate: Tax percentage, e.g. 27 for 27%
        currency: Currency code; zero-decimal currencies round to whole units
        discount: Amount subtracted from the subtotal before tax

    Returns:
        InvoiceTotals rounded to the currency's precision
    """
    digits = 0 if currency in ZERO_DECIMAL_CURRENCIES else 2
    subtotal = sum(quantity * rate for quantity, rate in items)
    taxable = max(0, subtotal - discount)
    tax_amount = taxable * tax_rate / 100
    return InvoiceTotals(
        subtotal=_round(subtotal, digits),
        tax_amount=_round(tax_amount, digits),
        total=_round(taxable + tax_amount, digits),
        fraction_digits=digits,
    )


def financial_summary(
    invoices: Sequence[Invoice], currency_service: CurrencyService, target_currency: str
) -> FinancialSummary:
    """Sum invoice totals by status in target_currency."""

    def total(statuses: frozenset[str]) -> float:
        return sum(
            currency_service.convert(inv.total or 0, inv.currency or target_currency, target_currency)
            for inv in invoices
            if inv.status in statuses
        )

    return FinancialSummary(
        currency=target_currency,
        revenue=total(REVENUE_STATUSES),
        paid=total(frozenset({InvoiceStatus.PAID.value})),
        pending=total(frozenset({InvoiceStatus.SENT.value})),
        overdue=total(frozenset({InvoiceStatus.OVERDUE.value})),
    )


class InvoiceNumberSequence:
    """Per company and year invoice counter kept in storage."""

    def __init__(self, storage: Storage):
        self.storage = storage

    @staticmethod
    def key(company_id: str, year: int) -> str:
        return f"{SEQUENCE_KEY_PREFIX}{company_id}_{year}"

    def current(self, company_id: str = "default", year: Optional[int] = None) -> int:
        """Return the last issued sequence number (0 if none)."""
        year = year or date.today().year
        raw = self.storage.get(self.key(company_id, year))
        try:
            return int(raw) if raw else 0
        except ValueError:
            return 0

    def next_number(self, company_id: str = "default", year: Optional[int] = None) -> str:
        """Issue the next invoice number, e.g. INV-2025-0001.

        Raises:
            StorageError: If the counter cannot be saved
        """
        year = year or date.today().year
        sequence = self.current(company_id, year) + 1
        self.storage.set(self.key(company_id, year), str(sequence))
        return f"INV-{year}-{sequence:04d}"
