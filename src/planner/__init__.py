"""Planner - local-first notes, habits and money tracking."""

__version__ = "0.1.0"
