from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Union
import logging
import math

log = logging.getLogger("filters.operators")

# ---------------------------------------------------------------------------
# Built-in operator ids
# ---------------------------------------------------------------------------

class Operator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    CONTAINS = "contains"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    GREATER_OR_EQUAL = "greaterOrEqual"
    LESS_OR_EQUAL = "lessOrEqual"
    BETWEEN = "between"
    IN = "in"
    NOT_IN = "notIn"
    IS_EMPTY = "isEmpty"
    IS_NOT_EMPTY = "isNotEmpty"
    CUSTOM = "custom"


# Operators that look at the target only and ignore the filter value.
EMPTINESS_OPERATORS = frozenset({Operator.IS_EMPTY.value, Operator.IS_NOT_EMPTY.value})

OperatorEvaluator = Callable[[Any, Any, Any], bool]


def operator_id(op: Union[str, Operator]) -> str:
    """Plain string id for an Operator member or a caller-defined id."""
    return op.value if isinstance(op, Enum) else str(op)


@dataclass(frozen=True)
class OperatorDefinition:
    id: str
    label: str
    evaluator: Optional[OperatorEvaluator] = None

    def to_option(self) -> Dict[str, str]:
        return {"value": self.id, "label": self.label}


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------

def _text(v: Any) -> str:
    if isinstance(v, bool):
        return "true" if v else "false"
    return str(v).lower()


def _to_number(v: Any) -> Optional[float]:
    """
    Numeric coercion; None when the value has no numeric reading.
    """
    if v is None:
        return None
    if isinstance(v, bool):
        return float(v)
    if isinstance(v, (int, float, Decimal)):
        num = float(v)
    elif isinstance(v, str):
        s = v.strip()
        if not s:
            return None
        try:
            num = float(s)
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(num) else num


def _to_timestamp(v: Any) -> Optional[float]:
    """
    Epoch seconds for datetimes, dates, ISO-8601 strings and epoch-millisecond numbers.
    Naive values are read as UTC.
    """
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, datetime):
        dt_ = v if v.tzinfo else v.replace(tzinfo=timezone.utc)
        return dt_.timestamp()
    if isinstance(v, date):
        return datetime(v.year, v.month, v.day, tzinfo=timezone.utc).timestamp()
    if isinstance(v, (int, float)):
        return float(v) / 1000.0
    if isinstance(v, str):
        s = v.strip()
        if not s:
            return None
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            return _to_timestamp(datetime.fromisoformat(s))
        except ValueError:
            pass
        try:
            return _to_timestamp(date.fromisoformat(s[:10]))
        except ValueError:
            return None
    return None


def _is_date_field(config: Any) -> bool:
    return getattr(config, "filter_type", None) == "date"


def _ordinal(v: Any, config: Any) -> Optional[float]:
    return _to_timestamp(v) if _is_date_field(config) else _to_number(v)


def _is_sequence(v: Any) -> bool:
    return isinstance(v, (list, tuple, set, frozenset))


def _is_empty_target(v: Any) -> bool:
    if v is None:
        return True
    if isinstance(v, str):
        return v.strip() == ""
    if isinstance(v, (list, tuple)):
        return len(v) == 0
    return False


# ---------------------------------------------------------------------------
# Built-in evaluators: (target, filter_value, field_config) -> bool
# ---------------------------------------------------------------------------

def _equals(target: Any, value: Any, config: Any = None) -> bool:
    if target is None:
        return False
    if isinstance(value, bool):
        return isinstance(target, bool) and target == value
    if isinstance(value, (int, float, Decimal)):
        num = _to_number(target)
        return num is not None and num == float(value)
    return _text(target) == _text(value)


def _not_equals(target: Any, value: Any, config: Any = None) -> bool:
    if target is None:
        return False
    return not _equals(target, value, config)


def _contains(target: Any, value: Any, config: Any = None) -> bool:
    if target is None:
        return False
    return _text(value) in _text(target)


def _starts_with(target: Any, value: Any, config: Any = None) -> bool:
    if target is None:
        return False
    return _text(target).startswith(_text(value))


def _ends_with(target: Any, value: Any, config: Any = None) -> bool:
    if target is None:
        return False
    return _text(target).endswith(_text(value))


def _comparison(compare: Callable[[float, float], bool]) -> OperatorEvaluator:
    def evaluator(target: Any, value: Any, config: Any = None) -> bool:
        if target is None:
            return False
        lhs, rhs = _ordinal(target, config), _ordinal(value, config)
        if lhs is None or rhs is None:
            return False
        return compare(lhs, rhs)
    return evaluator


def _between(target: Any, value: Any, config: Any = None) -> bool:
    if not _is_sequence(value) or len(value) != 2:
        log.warning("Malformed between value %r; treating as unconstrained", value)
        return True
    low, high = list(value)
    if low is None and high is None:
        return True
    if target is None:
        return False

    lo = None if low is None else _ordinal(low, config)
    hi = None if high is None else _ordinal(high, config)
    if (low is not None and lo is None) or (high is not None and hi is None):
        log.warning("Uncoercible between bounds %r; treating as unconstrained", value)
        return True

    t = _ordinal(target, config)
    if t is None:
        return False
    return (lo is None or t >= lo) and (hi is None or t <= hi)


def _member(target: Any, value: Iterable[Any]) -> bool:
    needle = _text(target)
    return any(_text(v) == needle for v in value)


def _in(target: Any, value: Any, config: Any = None) -> bool:
    if not _is_sequence(value):
        log.warning("Non-list value %r for 'in'; treating as unconstrained", value)
        return True
    if len(value) == 0 or target is None:
        return False
    return _member(target, value)


def _not_in(target: Any, value: Any, config: Any = None) -> bool:
    if not _is_sequence(value):
        log.warning("Non-list value %r for 'notIn'; treating as unconstrained", value)
        return True
    if len(value) == 0:
        return True
    if target is None:
        return False
    return not _member(target, value)


def _is_empty(target: Any, value: Any = None, config: Any = None) -> bool:
    return _is_empty_target(target)


def _is_not_empty(target: Any, value: Any = None, config: Any = None) -> bool:
    return not _is_empty_target(target)


DEFAULT_OPERATOR_DEFINITIONS: Dict[str, OperatorDefinition] = {
    d.id: d
    for d in (
        OperatorDefinition(Operator.EQUALS.value, "Equals", _equals),
        OperatorDefinition(Operator.NOT_EQUALS.value, "Not equals", _not_equals),
        OperatorDefinition(Operator.CONTAINS.value, "Contains", _contains),
        OperatorDefinition(Operator.STARTS_WITH.value, "Starts with", _starts_with),
        OperatorDefinition(Operator.ENDS_WITH.value, "Ends with", _ends_with),
        OperatorDefinition(Operator.GREATER_THAN.value, "Greater than", _comparison(lambda a, b: a > b)),
        OperatorDefinition(Operator.LESS_THAN.value, "Less than", _comparison(lambda a, b: a < b)),
        OperatorDefinition(Operator.GREATER_OR_EQUAL.value, "Greater than or equal", _comparison(lambda a, b: a >= b)),
        OperatorDefinition(Operator.LESS_OR_EQUAL.value, "Less than or equal", _comparison(lambda a, b: a <= b)),
        OperatorDefinition(Operator.BETWEEN.value, "Between", _between),
        OperatorDefinition(Operator.IN.value, "In", _in),
        OperatorDefinition(Operator.NOT_IN.value, "Not in", _not_in),
        OperatorDefinition(Operator.IS_EMPTY.value, "Is empty", _is_empty),
        OperatorDefinition(Operator.IS_NOT_EMPTY.value, "Is not empty", _is_not_empty),
        # no evaluator until a caller registers one
        OperatorDefinition(Operator.CUSTOM.value, "Custom"),
    )
}


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class OperatorRegistry:
    """
    Operators keyed by id. Registering an existing id overrides it; a registration
    without an evaluator (or label) keeps the one already registered.
    """

    def __init__(
        self,
        definitions: Optional[Iterable[OperatorDefinition]] = None,
        *,
        include_defaults: bool = True,
    ):
        self._operators: Dict[str, OperatorDefinition] = (
            dict(DEFAULT_OPERATOR_DEFINITIONS) if include_defaults else {}
        )
        for d in definitions or []:
            self.add(d)

    def register(
        self,
        op: Union[str, Operator],
        label: Optional[str] = None,
        evaluator: Optional[OperatorEvaluator] = None,
    ) -> OperatorDefinition:
        key = operator_id(op)
        prior = self._operators.get(key)
        definition = OperatorDefinition(
            id=key,
            label=label or (prior.label if prior else key),
            evaluator=evaluator or (prior.evaluator if prior else None),
        )
        self._operators[key] = definition
        log.debug("Registered operator %s (override=%s)", key, prior is not None)
        return definition

    def add(self, definition: OperatorDefinition) -> OperatorDefinition:
        return self.register(definition.id, definition.label, definition.evaluator)

    def get(self, op: Union[str, Operator]) -> Optional[OperatorDefinition]:
        return self._operators.get(operator_id(op))

    def definitions(self) -> Dict[str, OperatorDefinition]:
        return dict(self._operators)

    def label_for(self, op: Union[str, Operator]) -> str:
        d = self.get(op)
        return d.label if d else operator_id(op)

    def evaluate(
        self,
        op: Union[str, Operator],
        target: Any,
        filter_value: Any,
        config: Any = None,
    ) -> bool:
        """
        Run the operator's evaluator. Unknown operators and operators without an
        evaluator match everything.
        """
        d = self.get(op)
        if d is None or d.evaluator is None:
            log.warning("No evaluator found for operator: %s", operator_id(op))
            return True
        return bool(d.evaluator(target, filter_value, config))

    def __contains__(self, op: object) -> bool:
        return isinstance(op, (str, Operator)) and operator_id(op) in self._operators

    def __iter__(self) -> Iterator[str]:
        return iter(self._operators)

    def __len__(self) -> int:
        return len(self._operators)


# ---------------------------------------------------------------------------
# Public exports
# ---------------------------------------------------------------------------

__all__ = [
    "Operator",
    "OperatorEvaluator",
    "OperatorDefinition",
    "OperatorRegistry",
    "DEFAULT_OPERATOR_DEFINITIONS",
    "EMPTINESS_OPERATORS",
    "operator_id",
]
