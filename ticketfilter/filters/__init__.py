"""
Filter tree models for the ticket filter engine.

This module provides the condition/group tree, its camelCase JSON interop and schema validation.
"""

from .models import (
    ALL_VALUE,
    LogicOperator,
    FilterCondition,
    FilterGroup,
    FilterState,
    FILTER_GROUP_SCHEMA,
    is_empty_value,
    parse_filter_group_json,
    dump_filter_group_json,
)

__all__ = [
    "ALL_VALUE",
    "LogicOperator",
    "FilterCondition",
    "FilterGroup",
    "FilterState",
    "FILTER_GROUP_SCHEMA",
    "is_empty_value",
    "parse_filter_group_json",
    "dump_filter_group_json",
]
