"""Utility functions for planner."""

from planner.utils.date_parser import parse_date, parse_datetime, to_iso_date
from planner.utils.amount_parser import parse_amount
from planner.utils.ids import new_id

__all__ = ["parse_date", "parse_datetime", "to_iso_date", "parse_amount", "new_id"]
