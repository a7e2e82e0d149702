"""Domain model entities for planner.

These are pure data classes representing business concepts, independent of
how they are stored. Cross-entity links (Invoice.client_id,
PlanItem.linked_notes) are plain identifiers resolved by lookup; a missing
target is a normal state, not an error.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


@dataclass(frozen=True)
class Note:
    """Free-form note."""

    id: str
    title: str
    content: str
    created_at: datetime
    linked_plans: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class Goal:
    """Goal with a target date and progress percentage."""

    id: str
    title: str
    target_date: datetime
    created_at: datetime
    description: str = ""
    progress: int = 0
    status: str = "not-started"


@dataclass(frozen=True)
class PlanItem:
    """Scheduled plan entry."""

    id: str
    title: str
    date: datetime
    description: str = ""
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    completed: bool = False
    priority: str = "medium"
    linked_notes: tuple[str, ...] = ()


@dataclass(frozen=True)
class Drawing:
    """Saved sketch; data is an encoded image payload."""

    id: str
    title: str
    data: str
    created_at: datetime


@dataclass(frozen=True)
class Subscription:
    """Recurring paid service."""

    id: str
    name: str
    cost: float
    currency: str
    next_payment: datetime
    created_at: datetime
    description: str = ""
    billing_cycle: str = "monthly"
    is_active: bool = True
    category: str = ""


class TransactionPeriod(str, Enum):
    """Recurrence period of a transaction."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    ONE_TIME = "oneTime"


@dataclass(frozen=True)
class Transaction:
    """Income or expense entry.

    A recurring transaction whose period is not one-time is a master; the
    store materializes its past occurrences as history transactions that
    point back at it through origin_id.
    """

    id: str
    amount: float
    date: datetime
    description: str = ""
    type: str = "expense"
    category: str = ""
    currency: Optional[str] = None
    period: Optional[str] = None
    recurring: bool = False
    interest_rate: Optional[float] = None
    subscription_id: Optional[str] = None
    kind: Optional[str] = None
    origin_id: Optional[str] = None
    effective_date_ymd: Optional[str] = None
    created_at_iso: Optional[str] = None

    @property
    def is_master(self) -> bool:
        return self.kind == "master"

    @property
    def is_history(self) -> bool:
        return self.kind == "history"


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status."""

    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class InvoiceItem:
    """Single invoice line."""

    id: str
    description: str
    quantity: float
    rate: float
    amount: float


@dataclass(frozen=True)
class Invoice:
    """Invoice issued to a client."""

    id: str
    invoice_number: str
    client_id: str
    issue_date: datetime
    due_date: datetime
    created_at: datetime
    total: float
    currency: str
    status: str = InvoiceStatus.DRAFT.value
    items: tuple[InvoiceItem, ...] = ()
    subtotal: float = 0.0
    tax_rate: float = 0.0
    tax: float = 0.0
    notes: str = ""
    company_profile_id: Optional[str] = None
    fulfillment_date: Optional[datetime] = None
    paid_date: Optional[datetime] = None
    payment_method: Optional[str] = None


@dataclass(frozen=True)
class Client:
    """Invoice recipient."""

    id: str
    name: str
    created_at: datetime
    email: str = ""
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    company: Optional[str] = None
    tax_id: Optional[str] = None


@dataclass(frozen=True)
class CompanyProfile:
    """Issuer details printed on invoices."""

    id: str
    name: str
    created_at: datetime
    address: str = ""
    email: str = ""
    phone: str = ""
    tax_number: str = ""
    city: Optional[str] = None
    country: Optional[str] = None
    bank_account: Optional[str] = None
    logo: Optional[str] = None


@dataclass(frozen=True)
class BudgetSettings:
    """Singleton budget configuration."""

    monthly_budget: float = 0
    currency: str = "USD"
    notifications: bool = True
    warning_threshold: float = 80


class HabitFrequency(str, Enum):
    """How often a habit is meant to be done."""

    DAILY = "daily"
    WEEKLY = "weekly"


@dataclass(frozen=True)
class Habit:
    """Tracked habit with local-calendar check-in days (YYYY-MM-DD)."""

    id: str
    name: str
    created_at_iso: str
    description: str = ""
    frequency: str = HabitFrequency.DAILY.value
    target_per_week: int = 7
    mastery: int = 0
    checkins_iso: tuple[str, ...] = ()


@dataclass(frozen=True)
class CurrencyConfig:
    """Base currency and each other currency's rate to it."""

    base_currency: str
    rates: dict[str, float] = field(default_factory=dict)
    last_updated: float = 0


@dataclass(frozen=True)
class WorkflowNode:
    """Step in a workflow graph."""

    id: str
    type: str
    title: str
    position: dict[str, float]
    status: str = "pending"
    description: Optional[str] = None
    due_date: Optional[str] = None
    data: Optional[dict[str, Any]] = None
    parent_id: Optional[str] = None
    is_group: bool = False


@dataclass(frozen=True)
class WorkflowEdge:
    """Directed connection between two workflow nodes."""

    id: str
    source: str
    target: str
    label: Optional[str] = None
    animated: bool = False


@dataclass(frozen=True)
class WorkflowTemplate:
    """Reusable workflow blueprint."""

    id: str
    name: str
    description: str
    category: str
    nodes: tuple[WorkflowNode, ...]
    edges: tuple[WorkflowEdge, ...]
    created_at: datetime
    icon: str = ""
    is_built_in: bool = False


@dataclass(frozen=True)
class ProjectWorkflow:
    """Project instance created from a template."""

    id: str
    name: str
    nodes: tuple[WorkflowNode, ...]
    edges: tuple[WorkflowEdge, ...]
    created_at: datetime
    updated_at: datetime
    description: Optional[str] = None
    template_id: Optional[str] = None
    status: str = "planning"
    progress: int = 0
