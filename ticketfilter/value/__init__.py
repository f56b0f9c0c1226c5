"""
Single-field filter value helper for the ticket filter engine.
"""

from .filter_value import FilterValue

__all__ = ["FilterValue"]
