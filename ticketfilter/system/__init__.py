"""
Filter system for the ticket filter engine.

This module composes the operator and filter-type registries behind one lookup/evaluation API.
"""

from .filter_system import (
    FilterSystem,
    build_filter_system,
    default_filter_system,
    FALLBACK_OPERATOR,
    FALLBACK_VALUE,
)

__all__ = [
    "FilterSystem",
    "build_filter_system",
    "default_filter_system",
    "FALLBACK_OPERATOR",
    "FALLBACK_VALUE",
]
