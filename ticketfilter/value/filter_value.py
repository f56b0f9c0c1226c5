from __future__ import annotations
from copy import deepcopy
from typing import Any, Optional, Union

from ..config.models import FilterFieldConfig
from ..filters import ALL_VALUE, FilterState, is_empty_value
from ..filtertypes import FilterType
from ..operators import EMPTINESS_OPERATORS, Operator, operator_id
from ..system import FilterSystem, default_filter_system

# Used when no FilterSystem is supplied.
_FALLBACK_OPERATORS = {
    FilterType.SELECT.value: Operator.EQUALS.value,
    FilterType.BOOLEAN.value: Operator.EQUALS.value,
    FilterType.MULTI_SELECT.value: Operator.IN.value,
}
_FALLBACK_VALUES = {
    FilterType.MULTI_SELECT.value: [],
    FilterType.BOOLEAN.value: False,
    FilterType.NUMBER.value: None,
    FilterType.SELECT.value: ALL_VALUE,
}

_RANGE_TYPES = (FilterType.NUMBER.value, FilterType.DATE.value)


def _is_pair(v: Any) -> bool:
    return isinstance(v, (list, tuple)) and len(v) == 2


class FilterValue:
    """
    The {operator, value} pair behind one field of a flat filter list.
    """

    def __init__(
        self,
        field: FilterFieldConfig,
        initial_state: Optional[Union[FilterState, dict]] = None,
        filter_system: Optional[FilterSystem] = None,
    ):
        self.field = field
        self._system = filter_system
        if isinstance(initial_state, dict):
            initial_state = FilterState.from_dict({"id": field.id, **initial_state})

        state_op = initial_state.operator if initial_state is not None else None
        state_value = initial_state.value if initial_state is not None else None
        self._operator: str = operator_id(state_op) if state_op else self._default_operator()
        self._value: Any = state_value if state_value is not None else self._default_value()

    # ---- defaults ----------------------------------------------------------

    def _default_operator(self) -> str:
        if self._system is not None:
            return self._system.default_operator_for(self.field)
        if self.field.default_operator:
            return self.field.default_operator
        return _FALLBACK_OPERATORS.get(self.field.filter_type, Operator.CONTAINS.value)

    def _default_value(self) -> Any:
        if self._system is not None:
            return self._system.default_value_for(self.field)
        if self.field.has_default_value:
            return deepcopy(self.field.default_value)
        return deepcopy(_FALLBACK_VALUES.get(self.field.filter_type, ""))

    # ---- accessors ---------------------------------------------------------

    @property
    def value(self) -> Any:
        return self._value

    @property
    def operator(self) -> str:
        return self._operator

    def set_value(self, value: Any) -> None:
        self._value = value

    def set_operator(self, operator: Union[str, Operator]) -> None:
        new_op = operator_id(operator)
        old_op = self._operator
        between = Operator.BETWEEN.value

        if new_op == between and old_op != between and self.field.filter_type in _RANGE_TYPES:
            if not _is_pair(self._value):
                self._value = [None, None]
        elif old_op == between and new_op != between and isinstance(self._value, (list, tuple)):
            self._value = self._default_value()

        self._operator = new_op

    def clear(self) -> None:
        self._operator = self._default_operator()
        self._value = self._default_value()

    def is_empty(self) -> bool:
        # isEmpty/isNotEmpty carry their own meaning without a value
        if self._operator in EMPTINESS_OPERATORS:
            return False
        if isinstance(self._value, str) and self._value == ALL_VALUE:
            return True
        if self._operator == Operator.BETWEEN.value and _is_pair(self._value):
            low, high = self._value
            return low is None and high is None
        return is_empty_value(self._value)

    def to_state(self) -> FilterState:
        return FilterState(id=self.field.id, operator=self._operator, value=self._value)

    def evaluate(self, target: Any) -> bool:
        if self.is_empty():
            return True
        system = self._system or default_filter_system()
        return system.evaluate_filter(self._operator, target, self._value, self.field)

    def __repr__(self) -> str:
        return f"FilterValue(field={self.field.id!r}, operator={self._operator!r}, value={self._value!r})"
