"""Domain layer for planner application."""

from planner.domain.store import Store, open_store
from planner.domain.habits import HabitTracker
from planner.domain.currency import CurrencyService
from planner.domain.workflow import clone_template_for_project

__all__ = [
    "Store",
    "open_store",
    "HabitTracker",
    "CurrencyService",
    "clone_template_for_project",
]
