"""
Filter-type registry for the ticket filter engine.

This module maps field kinds (text, select, date, ...) to their operators and defaults.
"""

from .registry import (
    FilterType,
    FilterTypeDefinition,
    FilterTypeRegistry,
    DEFAULT_FILTER_TYPES,
    filter_type_id,
)

__all__ = [
    "FilterType",
    "FilterTypeDefinition",
    "FilterTypeRegistry",
    "DEFAULT_FILTER_TYPES",
    "filter_type_id",
]
