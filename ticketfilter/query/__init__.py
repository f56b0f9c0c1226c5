"""
Backend query serialization for the ticket filter engine.

This module turns filter trees and flat filter lists into the nested-object filter dialect.
"""

from .builder import (
    BackendFilter,
    DEFAULT_OPERATOR_MAPPING,
    ParseFilterOptions,
    parse_condition,
    parse_group,
    parse_filter_state,
    parse_filter_to_backend,
)

__all__ = [
    "BackendFilter",
    "DEFAULT_OPERATOR_MAPPING",
    "ParseFilterOptions",
    "parse_condition",
    "parse_group",
    "parse_filter_state",
    "parse_filter_to_backend",
]
