"""
Ticket filter engine.

Pluggable operators and filter types, a condition/group filter tree with local
row evaluation, and serialization to the backend nested-object filter dialect.
"""

from .filters import (
    ALL_VALUE,
    LogicOperator,
    FilterCondition,
    FilterGroup,
    FilterState,
    parse_filter_group_json,
)
from .operators import Operator, OperatorDefinition, OperatorRegistry
from .filtertypes import FilterType, FilterTypeDefinition, FilterTypeRegistry
from .config import (
    FilterFieldConfig,
    FilterConfiguration,
    load_filter_configuration,
    parse_filter_configuration,
)
from .system import FilterSystem, build_filter_system, default_filter_system
from .manager import FilterManager, FilterManagerState
from .value import FilterValue
from .query import ParseFilterOptions, parse_filter_to_backend

__all__ = [
    "ALL_VALUE",
    "LogicOperator",
    "FilterCondition",
    "FilterGroup",
    "FilterState",
    "parse_filter_group_json",
    "Operator",
    "OperatorDefinition",
    "OperatorRegistry",
    "FilterType",
    "FilterTypeDefinition",
    "FilterTypeRegistry",
    "FilterFieldConfig",
    "FilterConfiguration",
    "load_filter_configuration",
    "parse_filter_configuration",
    "FilterSystem",
    "build_filter_system",
    "default_filter_system",
    "FilterManager",
    "FilterManagerState",
    "FilterValue",
    "ParseFilterOptions",
    "parse_filter_to_backend",
]
