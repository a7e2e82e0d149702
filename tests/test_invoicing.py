"""Tests for invoice totals, numbering and summaries."""

from datetime import datetime

import pytest

from planner.domain.entities import Invoice
from planner.domain.invoicing import (
    InvoiceNumberSequence,
    calculate_totals,
    financial_summary,
)


def _invoice(status, total, currency, **overrides):
    values = dict(
        id=f"{status}-{currency}",
        invoice_number="INV-2025-0001",
        client_id="c1",
        issue_date=datetime(2025, 6, 1, 12),
        due_date=datetime(2025, 6, 30, 12),
        created_at=datetime(2025, 6, 1, 12),
        total=total,
        currency=currency,
        status=status,
    )
    values.update(overrides)
    return Invoice(**values)


def test_calculate_totals_with_tax():
    """Test subtotal, tax and total for two-decimal currencies."""
    totals = calculate_totals([(2, 100), (1, 50)], tax_rate=27, currency="EUR")

    assert totals.subtotal == 250.0
    assert totals.tax_amount == 67.5
    assert totals.total == 317.5
    assert totals.fraction_digits == 2


def test_calculate_totals_zero_decimal_currency():
    """Test HUF totals round to whole forints."""
    totals = calculate_totals([(3, 333.3)], tax_rate=0, currency="HUF")

    assert totals.subtotal == 1000.0
    assert totals.total == 1000.0
    assert totals.fraction_digits == 0


def test_calculate_totals_discount_floor():
    """Test a discount larger than the subtotal gives zero."""
    totals = calculate_totals([(1, 100)], tax_rate=10, currency="EUR", discount=150)

    assert totals.tax_amount == 0
    assert totals.total == 0


def test_financial_summary_converts_and_groups(currency_service):
    """Test totals are converted and grouped by status."""
    currency_service.set_rate("EUR", 385)
    invoices = [
        _invoice("paid", 10, "EUR"),
        _invoice("sent", 3850, "HUF"),
        _invoice("overdue", 1, "EUR"),
        _invoice("draft", 1000, "EUR"),
    ]

    summary = financial_summary(invoices, currency_service, "EUR")

    assert summary.currency == "EUR"
    assert summary.paid == pytest.approx(10)
    assert summary.pending == pytest.approx(10)
    assert summary.overdue == pytest.approx(1)
    assert summary.revenue == pytest.approx(21)


def test_invoice_number_sequence(memory_storage):
    """Test numbers increase per company and year."""
    sequence = InvoiceNumberSequence(memory_storage)

    assert sequence.next_number("acme", 2025) == "INV-2025-0001"
    assert sequence.next_number("acme", 2025) == "INV-2025-0002"
    assert sequence.next_number("acme", 2026) == "INV-2026-0001"
    assert sequence.next_number("other", 2025) == "INV-2025-0001"
    assert sequence.current("acme", 2025) == 2
    assert memory_storage.get("invoice_sequence_acme_2025") == "2"


def test_invoice_number_sequence_ignores_garbage(memory_storage):
    """Test an unreadable counter restarts at one."""
    memory_storage.set(InvoiceNumberSequence.key("acme", 2025), "abc")

    assert InvoiceNumberSequence(memory_storage).next_number("acme", 2025) == "INV-2025-0001"
