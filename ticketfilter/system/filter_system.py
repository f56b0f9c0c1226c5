from __future__ import annotations
from copy import deepcopy
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional, Union
import logging

from ..config.models import FilterConfiguration, FilterFieldConfig
from ..filters import ALL_VALUE
from ..filtertypes import FilterTypeDefinition, FilterTypeRegistry
from ..operators import (
    EMPTINESS_OPERATORS,
    Operator,
    OperatorDefinition,
    OperatorRegistry,
    operator_id,
)

log = logging.getLogger("filters.system")

FALLBACK_OPERATOR = Operator.CONTAINS.value
FALLBACK_VALUE = ""


class FilterSystem:
    """
    Single entry point over the operator and filter-type registries.
    Resolves the effective operators and defaults for a field and evaluates conditions.
    """

    def __init__(
        self,
        operators: Optional[Iterable[OperatorDefinition]] = None,
        filter_types: Optional[Iterable[Union[FilterTypeDefinition, Dict[str, Any]]]] = None,
    ):
        self.operators = OperatorRegistry(operators)
        self.filter_types = FilterTypeRegistry(filter_types)

    @classmethod
    def from_configuration(cls, configuration: FilterConfiguration) -> "FilterSystem":
        return cls(
            operators=configuration.operator_overrides,
            filter_types=configuration.filter_type_overrides,
        )

    # ---- registry lookups --------------------------------------------------

    def get_operators(self) -> Dict[str, OperatorDefinition]:
        return self.operators.definitions()

    def get_operator(self, op: Union[str, Operator]) -> Optional[OperatorDefinition]:
        return self.operators.get(op)

    def get_filter_types(self) -> Dict[str, FilterTypeDefinition]:
        return self.filter_types.definitions()

    def get_filter_type(self, type_id: str) -> Optional[FilterTypeDefinition]:
        return self.filter_types.get(type_id)

    def get_operators_for_filter_type(self, type_id: str) -> List[OperatorDefinition]:
        # ids with no registered operator are skipped
        out: List[OperatorDefinition] = []
        for op in self.filter_types.operators_for(type_id):
            d = self.operators.get(op)
            if d is not None:
                out.append(d)
        return out

    def get_operators_for_field(self, field: FilterFieldConfig) -> List[Dict[str, str]]:
        """
        [{value, label}] for the field: its own operator list when set, else its type's.
        """
        if field.available_operators:
            return [
                {"value": op, "label": self.operators.label_for(op)}
                for op in field.available_operators
            ]
        return [d.to_option() for d in self.get_operators_for_filter_type(field.filter_type)]

    def get_default_operator(self, type_id: str) -> str:
        return self.filter_types.default_operator(type_id) or FALLBACK_OPERATOR

    def get_default_value(self, type_id: str) -> Any:
        if type_id not in self.filter_types:
            return FALLBACK_VALUE
        return self.filter_types.default_value(type_id)

    def default_operator_for(self, field: FilterFieldConfig) -> str:
        if field.default_operator:
            return field.default_operator
        return self.get_default_operator(field.filter_type)

    def default_value_for(self, field: FilterFieldConfig) -> Any:
        if field.has_default_value:
            return deepcopy(field.default_value)
        return self.get_default_value(field.filter_type)

    # ---- registration ------------------------------------------------------

    def add_operator(self, definition: OperatorDefinition) -> OperatorDefinition:
        return self.operators.add(definition)

    def add_filter_type(
        self, definition: Union[FilterTypeDefinition, Dict[str, Any]]
    ) -> FilterTypeDefinition:
        return self.filter_types.add(definition)

    # ---- evaluation --------------------------------------------------------

    def evaluate_filter(
        self,
        op: Union[str, Operator],
        target: Any,
        filter_value: Any,
        field: Optional[FilterFieldConfig] = None,
    ) -> bool:
        """
        `ALL_VALUE` and None impose no constraint, except for isEmpty/isNotEmpty which
        always look at the target.
        """
        if operator_id(op) not in EMPTINESS_OPERATORS:
            if filter_value is None:
                return True
            if isinstance(filter_value, str) and filter_value == ALL_VALUE:
                return True
        return self.operators.evaluate(op, target, filter_value, field)


def build_filter_system(configuration: FilterConfiguration) -> FilterSystem:
    """Filter system with the configuration's operator and filter-type overrides applied."""
    system = FilterSystem.from_configuration(configuration)
    log.debug(
        "Built filter system: %d operators, %d filter types",
        len(system.operators), len(system.filter_types),
    )
    return system


@lru_cache(maxsize=1)
def default_filter_system() -> FilterSystem:
    """Shared system built from the built-in operators and filter types only."""
    return FilterSystem()


__all__ = [
    "FilterSystem",
    "build_filter_system",
    "default_filter_system",
    "FALLBACK_OPERATOR",
    "FALLBACK_VALUE",
]
