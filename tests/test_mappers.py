"""Tests for entity/record mappers."""

from datetime import datetime, timezone

import pytest

from planner.database import mappers
from planner.domain.entities import (
    BudgetSettings,
    Client,
    CompanyProfile,
    Drawing,
    Invoice,
    InvoiceItem,
    Note,
    PlanItem,
    Subscription,
    Transaction,
)


def test_note_round_trip():
    """Test a note survives conversion to a record and back."""
    note = Note(
        id="n1",
        title="Ideas",
        content="text",
        created_at=datetime(2025, 6, 1, 8, 30, tzinfo=timezone.utc),
        linked_plans=("p1",),
        tags=("work",),
    )

    record = mappers.note_to_record(note)

    assert record["createdAt"] == "2025-06-01T08:30:00+00:00"
    assert record["linkedPlans"] == ["p1"]
    assert mappers.note_from_record(record) == note


def test_plan_date_only_is_local_noon():
    """Test a bare date keeps its calendar day."""
    plan = mappers.plan_from_record({"id": "p1", "title": "Trip", "date": "2025-10-26"})

    assert plan.date == datetime(2025, 10, 26, 12, 0)
    assert plan.start_time is None


def test_plan_record_omits_missing_times():
    """Test unset optional fields are left out of the record."""
    plan = PlanItem(id="p1", title="Trip", date=datetime(2025, 10, 26, 12))

    record = mappers.plan_to_record(plan)

    assert "startTime" not in record
    assert record["date"] == "2025-10-26T12:00:00"


def test_plan_with_times_round_trip():
    """Test optional start and end times are reconstructed."""
    plan = PlanItem(
        id="p1",
        title="Call",
        date=datetime(2025, 6, 16, 12),
        start_time=datetime(2025, 6, 16, 9),
        end_time=datetime(2025, 6, 16, 10),
        linked_notes=("n1", "n2"),
    )

    assert mappers.plan_from_record(mappers.plan_to_record(plan)) == plan


def test_transaction_legacy_recurring_becomes_master():
    """Test old recurring rows without kind are treated as masters."""
    tx = mappers.transaction_from_record({
        "id": "t1",
        "amount": 12.5,
        "date": "2025-06-01T12:00:00",
        "recurring": True,
        "period": "monthly",
    })

    assert tx.kind == "master"
    assert tx.is_master


def test_transaction_round_trip_drops_unset_fields():
    """Test optional transaction fields are omitted when unset."""
    tx = Transaction(id="t1", amount=5.0, date=datetime(2025, 6, 1, 12), category="food")

    record = mappers.transaction_to_record(tx)

    assert "originId" not in record
    assert "period" not in record
    assert mappers.transaction_from_record(record) == tx


def test_invoice_round_trip():
    """Test invoices keep their items and optional dates."""
    invoice = Invoice(
        id="i1",
        invoice_number="INV-2025-0007",
        client_id="c1",
        issue_date=datetime(2025, 6, 1, 12),
        due_date=datetime(2025, 6, 15, 12),
        created_at=datetime(2025, 6, 1, 9),
        total=127.0,
        currency="EUR",
        status="paid",
        items=(InvoiceItem(id="l1", description="Work", quantity=1, rate=100, amount=100),),
        subtotal=100.0,
        tax_rate=27.0,
        tax=27.0,
        paid_date=datetime(2025, 6, 10, 12),
    )

    record = mappers.invoice_to_record(invoice)

    assert record["invoiceNumber"] == "INV-2025-0007"
    assert "fulfillmentDate" not in record
    assert mappers.invoice_from_record(record) == invoice


def test_client_missing_created_at_raises():
    """Test a record without its required timestamp is rejected."""
    with pytest.raises(KeyError):
        mappers.client_from_record({"id": "c1", "name": "Acme"})


def test_client_round_trip():
    client = Client(id="c1", name="Acme", created_at=datetime(2025, 1, 2, 3, 4), tax_id="HU123")

    assert mappers.client_from_record(mappers.client_to_record(client)) == client


def test_budget_settings_defaults():
    """Test missing settings fields fall back to defaults."""
    settings = mappers.budget_settings_from_record({"monthlyBudget": 900})

    assert settings == BudgetSettings(monthly_budget=900)


def test_budget_settings_wrong_shape():
    with pytest.raises(TypeError):
        mappers.budget_settings_from_record(["not", "an", "object"])


def test_subscription_round_trip():
    """Test next payment and creation dates are reconstructed."""
    sub = Subscription(
        id="s1",
        name="Cloud",
        cost=9.99,
        currency="USD",
        next_payment=datetime(2025, 7, 1, 12),
        created_at=datetime(2025, 6, 1, 8, 15, tzinfo=timezone.utc),
        billing_cycle="yearly",
        is_active=False,
    )

    record = mappers.subscription_to_record(sub)

    assert record["nextPayment"] == "2025-07-01T12:00:00"
    assert record["billingCycle"] == "yearly"
    assert mappers.subscription_from_record(record) == sub


def test_subscription_date_only_next_payment():
    """Test a bare next payment date lands on local noon."""
    sub = mappers.subscription_from_record({
        "id": "s1",
        "name": "Cloud",
        "nextPayment": "2025-07-01",
        "createdAt": "2025-06-01T08:15:00",
    })

    assert sub.next_payment == datetime(2025, 7, 1, 12)
    assert sub.created_at == datetime(2025, 6, 1, 8, 15)


def test_drawing_round_trip():
    drawing = Drawing(
        id="d1",
        title="Sketch",
        data="data:image/png;base64,AAAA",
        created_at=datetime(2025, 6, 2, 17, 45),
    )

    record = mappers.drawing_to_record(drawing)

    assert record["createdAt"] == "2025-06-02T17:45:00"
    assert mappers.drawing_from_record(record) == drawing


def test_company_profile_round_trip():
    """Test company profiles keep optional fields and creation time."""
    profile = CompanyProfile(
        id="cp1",
        name="Studio Kft.",
        created_at=datetime(2025, 3, 4, 10, 0),
        address="Fő utca 1",
        tax_number="12345678-1-42",
        city="Budapest",
        bank_account="HU00 1234",
    )

    record = mappers.company_profile_to_record(profile)

    assert "logo" not in record
    assert record["taxNumber"] == "12345678-1-42"
    assert mappers.company_profile_from_record(record) == profile


def test_drawing_missing_created_at_raises():
    with pytest.raises(KeyError):
        mappers.drawing_from_record({"id": "d1", "title": "Sketch", "data": ""})
