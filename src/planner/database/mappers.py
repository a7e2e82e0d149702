"""Mapper functions between domain entities and stored JSON records.

Records keep the camelCase field names of the planner's browser storage so
existing backups stay readable. Every entity with a date/time field has an
explicit reconstruction rule here; a record that cannot be reconstructed
raises KeyError, TypeError or ValueError and the caller treats the whole key
as unreadable.
"""

from datetime import datetime
from typing import Any, Optional

from planner.domain import entities as domain
from planner.utils.date_parser import parse_datetime


def _iso(value: Optional[datetime]) -> Optional[str]:
    return None if value is None else value.isoformat()


def _optional_dt(record: dict[str, Any], key: str) -> Optional[datetime]:
    raw = record.get(key)
    return None if raw in (None, "") else parse_datetime(raw)


def _str_tuple(record: dict[str, Any], key: str) -> tuple[str, ...]:
    values = record.get(key) or []
    if not isinstance(values, list):
        raise TypeError(f"'{key}' must be a list")
    return tuple(str(v) for v in values)


def _drop_none(record: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in record.items() if v is not None}


# Notes

def note_to_record(note: domain.Note) -> dict[str, Any]:
    return {
        "id": note.id,
        "title": note.title,
        "content": note.content,
        "createdAt": _iso(note.created_at),
        "linkedPlans": list(note.linked_plans),
        "tags": list(note.tags),
    }


def note_from_record(record: dict[str, Any]) -> domain.Note:
    return domain.Note(
        id=str(record["id"]),
        title=record.get("title", ""),
        content=record.get("content", ""),
        created_at=parse_datetime(record["createdAt"]),
        linked_plans=_str_tuple(record, "linkedPlans"),
        tags=_str_tuple(record, "tags"),
    )


# Goals

def goal_to_record(goal: domain.Goal) -> dict[str, Any]:
    return {
        "id": goal.id,
        "title": goal.title,
        "description": goal.description,
        "targetDate": _iso(goal.target_date),
        "progress": goal.progress,
        "status": goal.status,
        "createdAt": _iso(goal.created_at),
    }


def goal_from_record(record: dict[str, Any]) -> domain.Goal:
    return domain.Goal(
        id=str(record["id"]),
        title=record.get("title", ""),
        description=record.get("description", ""),
        target_date=parse_datetime(record["targetDate"]),
        progress=record.get("progress", 0),
        status=record.get("status", "not-started"),
        created_at=parse_datetime(record["createdAt"]),
    )


# Plans

def plan_to_record(plan: domain.PlanItem) -> dict[str, Any]:
    return _drop_none({
        "id": plan.id,
        "title": plan.title,
        "description": plan.description,
        "date": _iso(plan.date),
        "startTime": _iso(plan.start_time),
        "endTime": _iso(plan.end_time),
        "completed": plan.completed,
        "priority": plan.priority,
        "linkedNotes": list(plan.linked_notes),
    })


def plan_from_record(record: dict[str, Any]) -> domain.PlanItem:
    return domain.PlanItem(
        id=str(record["id"]),
        title=record.get("title", ""),
        description=record.get("description", ""),
        date=parse_datetime(record["date"]),
        start_time=_optional_dt(record, "startTime"),
        end_time=_optional_dt(record, "endTime"),
        completed=bool(record.get("completed", False)),
        priority=record.get("priority", "medium"),
        linked_notes=_str_tuple(record, "linkedNotes"),
    )


# Drawings

def drawing_to_record(drawing: domain.Drawing) -> dict[str, Any]:
    return {
        "id": drawing.id,
        "title": drawing.title,
        "data": drawing.data,
        "createdAt": _iso(drawing.created_at),
    }


def drawing_from_record(record: dict[str, Any]) -> domain.Drawing:
    return domain.Drawing(
        id=str(record["id"]),
        title=record.get("title", ""),
        data=record.get("data", ""),
        created_at=parse_datetime(record["createdAt"]),
    )


# Subscriptions

def subscription_to_record(sub: domain.Subscription) -> dict[str, Any]:
    return {
        "id": sub.id,
        "name": sub.name,
        "description": sub.description,
        "cost": sub.cost,
        "currency": sub.currency,
        "billingCycle": sub.billing_cycle,
        "nextPayment": _iso(sub.next_payment),
        "isActive": sub.is_active,
        "category": sub.category,
        "createdAt": _iso(sub.created_at),
    }


def subscription_from_record(record: dict[str, Any]) -> domain.Subscription:
    return domain.Subscription(
        id=str(record["id"]),
        name=record.get("name", ""),
        description=record.get("description", ""),
        cost=record.get("cost", 0),
        currency=record.get("currency", "USD"),
        billing_cycle=record.get("billingCycle", "monthly"),
        next_payment=parse_datetime(record["nextPayment"]),
        is_active=bool(record.get("isActive", True)),
        category=record.get("category", ""),
        created_at=parse_datetime(record["createdAt"]),
    )


# Transactions

def transaction_to_record(tx: domain.Transaction) -> dict[str, Any]:
    return _drop_none({
        "id": tx.id,
        "amount": tx.amount,
        "description": tx.description,
        "date": _iso(tx.date),
        "type": tx.type,
        "category": tx.category,
        "currency": tx.currency,
        "period": tx.period,
        "recurring": tx.recurring,
        "interestRate": tx.interest_rate,
        "subscriptionId": tx.subscription_id,
        "kind": tx.kind,
        "originId": tx.origin_id,
        "effectiveDateYMD": tx.effective_date_ymd,
        "createdAtISO": tx.created_at_iso,
    })


def transaction_from_record(record: dict[str, Any]) -> domain.Transaction:
    recurring = bool(record.get("recurring", False))
    period = record.get("period")
    kind = record.get("kind")
    # Older records may lack the master marker on recurring rows
    if recurring and period not in (None, domain.TransactionPeriod.ONE_TIME.value) and not kind:
        kind = "master"
    return domain.Transaction(
        id=str(record["id"]),
        amount=record["amount"],
        date=parse_datetime(record["date"]),
        description=record.get("description", ""),
        type=record.get("type", "expense"),
        category=record.get("category", ""),
        currency=record.get("currency"),
        period=period,
        recurring=recurring,
        interest_rate=record.get("interestRate"),
        subscription_id=record.get("subscriptionId"),
        kind=kind,
        origin_id=record.get("originId"),
        effective_date_ymd=record.get("effectiveDateYMD"),
        created_at_iso=record.get("createdAtISO"),
    )


# Invoices

def invoice_item_to_record(item: domain.InvoiceItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "description": item.description,
        "quantity": item.quantity,
        "rate": item.rate,
        "amount": item.amount,
    }


def invoice_item_from_record(record: dict[str, Any]) -> domain.InvoiceItem:
    return domain.InvoiceItem(
        id=str(record["id"]),
        description=record.get("description", ""),
        quantity=record.get("quantity", 0),
        rate=record.get("rate", 0),
        amount=record.get("amount", 0),
    )


def invoice_to_record(invoice: domain.Invoice) -> dict[str, Any]:
    return _drop_none({
        "id": invoice.id,
        "invoiceNumber": invoice.invoice_number,
        "clientId": invoice.client_id,
        "companyProfileId": invoice.company_profile_id,
        "items": [invoice_item_to_record(i) for i in invoice.items],
        "subtotal": invoice.subtotal,
        "taxRate": invoice.tax_rate,
        "tax": invoice.tax,
        "total": invoice.total,
        "status": invoice.status,
        "issueDate": _iso(invoice.issue_date),
        "dueDate": _iso(invoice.due_date),
        "fulfillmentDate": _iso(invoice.fulfillment_date),
        "paymentMethod": invoice.payment_method,
        "paidDate": _iso(invoice.paid_date),
        "currency": invoice.currency,
        "notes": invoice.notes,
        "createdAt": _iso(invoice.created_at),
    })


def invoice_from_record(record: dict[str, Any]) -> domain.Invoice:
    items = record.get("items") or []
    if not isinstance(items, list):
        raise TypeError("'items' must be a list")
    return domain.Invoice(
        id=str(record["id"]),
        invoice_number=record.get("invoiceNumber", ""),
        client_id=record.get("clientId", ""),
        company_profile_id=record.get("companyProfileId"),
        items=tuple(invoice_item_from_record(i) for i in items),
        subtotal=record.get("subtotal", 0),
        tax_rate=record.get("taxRate", 0),
        tax=record.get("tax", 0),
        total=record.get("total", 0),
        status=record.get("status", domain.InvoiceStatus.DRAFT.value),
        issue_date=parse_datetime(record["issueDate"]),
        due_date=parse_datetime(record["dueDate"]),
        fulfillment_date=_optional_dt(record, "fulfillmentDate"),
        payment_method=record.get("paymentMethod"),
        paid_date=_optional_dt(record, "paidDate"),
        currency=record.get("currency", "USD"),
        notes=record.get("notes", ""),
        created_at=parse_datetime(record["createdAt"]),
    )


# Clients and company profiles

def client_to_record(client: domain.Client) -> dict[str, Any]:
    return _drop_none({
        "id": client.id,
        "name": client.name,
        "email": client.email,
        "phone": client.phone,
        "address": client.address,
        "city": client.city,
        "country": client.country,
        "company": client.company,
        "taxId": client.tax_id,
        "createdAt": _iso(client.created_at),
    })


def client_from_record(record: dict[str, Any]) -> domain.Client:
    return domain.Client(
        id=str(record["id"]),
        name=record.get("name", ""),
        email=record.get("email", ""),
        phone=record.get("phone"),
        address=record.get("address"),
        city=record.get("city"),
        country=record.get("country"),
        company=record.get("company"),
        tax_id=record.get("taxId"),
        created_at=parse_datetime(record["createdAt"]),
    )


def company_profile_to_record(profile: domain.CompanyProfile) -> dict[str, Any]:
    return _drop_none({
        "id": profile.id,
        "name": profile.name,
        "address": profile.address,
        "city": profile.city,
        "country": profile.country,
        "email": profile.email,
        "phone": profile.phone,
        "taxNumber": profile.tax_number,
        "bankAccount": profile.bank_account,
        "logo": profile.logo,
        "createdAt": _iso(profile.created_at),
    })


def company_profile_from_record(record: dict[str, Any]) -> domain.CompanyProfile:
    return domain.CompanyProfile(
        id=str(record["id"]),
        name=record.get("name", ""),
        address=record.get("address", ""),
        city=record.get("city"),
        country=record.get("country"),
        email=record.get("email", ""),
        phone=record.get("phone", ""),
        tax_number=record.get("taxNumber", ""),
        bank_account=record.get("bankAccount"),
        logo=record.get("logo"),
        created_at=parse_datetime(record["createdAt"]),
    )


# Budget settings

def budget_settings_to_record(settings: domain.BudgetSettings) -> dict[str, Any]:
    return {
        "monthlyBudget": settings.monthly_budget,
        "currency": settings.currency,
        "notifications": settings.notifications,
        "warningThreshold": settings.warning_threshold,
    }


def budget_settings_from_record(record: dict[str, Any]) -> domain.BudgetSettings:
    if not isinstance(record, dict):
        raise TypeError("budget settings must be an object")
    defaults = domain.BudgetSettings()
    return domain.BudgetSettings(
        monthly_budget=record.get("monthlyBudget", defaults.monthly_budget),
        currency=record.get("currency", defaults.currency),
        notifications=bool(record.get("notifications", defaults.notifications)),
        warning_threshold=record.get("warningThreshold", defaults.warning_threshold),
    )
