from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Union
import logging

from ..config import settings
from ..filters import (
    ALL_VALUE,
    FilterCondition,
    FilterGroup,
    FilterState,
    LogicOperator,
    is_empty_value,
)
from ..filters.models import _coerce_logic
from ..operators import EMPTINESS_OPERATORS, Operator

log = logging.getLogger("filters.query")

BackendFilter = Dict[str, Any]

# operator id -> backend token; ids not listed serialize as "_<id>"
DEFAULT_OPERATOR_MAPPING: Dict[str, str] = {
    Operator.EQUALS.value: "_eq",
    Operator.NOT_EQUALS.value: "_neq",
    Operator.CONTAINS.value: "_contains",
    Operator.STARTS_WITH.value: "_starts_with",
    Operator.ENDS_WITH.value: "_ends_with",
    Operator.GREATER_THAN.value: "_gt",
    Operator.LESS_THAN.value: "_lt",
    Operator.GREATER_OR_EQUAL.value: "_gte",
    Operator.LESS_OR_EQUAL.value: "_lte",
    Operator.BETWEEN.value: "_between",
    Operator.IN.value: "_in",
    Operator.NOT_IN.value: "_nin",
    Operator.IS_EMPTY.value: "_null",
    Operator.IS_NOT_EMPTY.value: "_nnull",
    Operator.CUSTOM.value: "_custom",
}

ValueTransformer = Callable[[Any, str, str], Any]
FieldTransformer = Callable[[str], str]


@dataclass
class ParseFilterOptions:
    """
    Knobs for the backend serializer.

    `operator_mapping`, when given, replaces the default token table entirely.
    `value_transformer` is called as (value, operator, field) with the untransformed field name.
    """
    operator_mapping: Optional[Dict[str, str]] = None
    field_transformer: Optional[FieldTransformer] = None
    value_transformer: Optional[ValueTransformer] = None
    relation_separator: str = field(default_factory=lambda: settings.FILTER_RELATION_SEPARATOR)

    def token_for(self, operator: str) -> str:
        mapping = DEFAULT_OPERATOR_MAPPING if self.operator_mapping is None else self.operator_mapping
        return mapping.get(operator) or f"_{operator}"


def _is_sentinel(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == ALL_VALUE)


def _nest(path: Sequence[str], leaf: BackendFilter) -> BackendFilter:
    # build from the last segment inward: a.b.c -> {a: {b: {c: leaf}}}
    result = leaf
    for part in reversed(path):
        result = {part: result}
    return result


# ---------------------------------------------------------------------------
# Conditions and groups
# ---------------------------------------------------------------------------

def _is_open_range(operator: str, value: Any) -> bool:
    return (
        operator == Operator.BETWEEN.value
        and isinstance(value, (list, tuple))
        and len(value) == 2
        and value[0] is None
        and value[1] is None
    )


def parse_condition(condition: FilterCondition, options: Optional[ParseFilterOptions] = None) -> BackendFilter:
    """
    One condition -> {field: {token: value}}, nested along relation paths.
    Inactive conditions and conditions carrying no constraint serialize to {}.
    """
    options = options or ParseFilterOptions()
    if condition.active is False:
        return {}

    operator = str(condition.operator)
    raw = condition.value
    if operator in EMPTINESS_OPERATORS:
        if is_empty_value(raw) or _is_sentinel(raw):
            raw = True
    elif _is_sentinel(raw) or _is_open_range(operator, raw):
        log.debug("Eliding unconstrained condition on %s", condition.field)
        return {}

    name = options.field_transformer(condition.field) if options.field_transformer else condition.field
    value = options.value_transformer(raw, operator, condition.field) if options.value_transformer else raw
    leaf = {options.token_for(operator): value}

    sep = options.relation_separator
    if sep and sep in name:
        parts = name.split(sep)
        return _nest(parts[:-1], {parts[-1]: leaf})
    return {name: leaf}


def parse_group(group: FilterGroup, options: Optional[ParseFilterOptions] = None) -> BackendFilter:
    options = options or ParseFilterOptions()
    if group.active is False:
        return {}

    rules: List[BackendFilter] = [
        parse_condition(c, options) for c in group.conditions if c.active is not False
    ]
    rules += [parse_group(g, options) for g in group.groups if g.active is not False]
    rules = [r for r in rules if r]

    if not rules:
        return {}
    if len(rules) == 1:
        return rules[0]

    key = "_or" if group.logic_operator == LogicOperator.OR else "_and"
    return {key: rules}


def parse_filter_state(state: Union[FilterState, Dict[str, Any]], options: Optional[ParseFilterOptions] = None) -> BackendFilter:
    """One flat {id, operator, value} entry -> backend rule."""
    if isinstance(state, dict):
        state = FilterState.from_dict(state)
    return parse_condition(state.to_condition(), options)


def _basic_group(filters: Sequence[Union[FilterState, Dict[str, Any]]]) -> FilterGroup:
    states = []
    for f in filters:
        if isinstance(f, FilterState):
            states.append(f)
        elif isinstance(f, dict) and f.get("id"):
            states.append(FilterState.from_dict(f))
        else:
            log.warning("Skipping flat filter without an id: %r", f)
    return FilterGroup(
        id="root",
        logic_operator=LogicOperator.AND,
        conditions=[s.to_condition() for s in states],
    )


def _clean_group_dict(raw: Dict[str, Any]) -> Dict[str, Any]:
    # drop what FilterGroup.from_dict cannot build; the rest still serializes
    conditions = []
    for c in raw.get("conditions") or []:
        if isinstance(c, dict) and c.get("field"):
            conditions.append(c)
        else:
            log.warning("Skipping condition without a field: %r", c)
    groups = [_clean_group_dict(g) for g in raw.get("groups") or [] if isinstance(g, dict)]
    cleaned = {**raw, "conditions": conditions, "groups": groups}
    try:
        _coerce_logic(raw.get("logicOperator"))
    except ValueError:
        log.warning("Unknown logic operator %r; using AND", raw.get("logicOperator"))
        cleaned.pop("logicOperator")
    return cleaned


def _as_group(raw: Any) -> Optional[FilterGroup]:
    if isinstance(raw, FilterGroup):
        return raw
    if isinstance(raw, dict) and raw:
        return FilterGroup.from_dict(_clean_group_dict(raw))
    return None


# ---------------------------------------------------------------------------
# Top-level entry
# ---------------------------------------------------------------------------

def parse_filter_to_backend(state: Any, options: Optional[ParseFilterOptions] = None) -> BackendFilter:
    """
    Serialize whatever filter input is present into the backend filter dialect.

    `state` may be a FilterGroup, a FilterManagerState, or a mapping carrying
    `rootGroup`, `advancedFilter` and/or `filters` (flat list). When several are
    present the tree wins over the advanced object, which wins over the flat list.
    No input serializes to {}.
    """
    options = options or ParseFilterOptions()
    if state is None:
        return {}
    if isinstance(state, FilterGroup):
        return parse_group(state, options)

    if isinstance(state, dict):
        root_raw = state.get("rootGroup")
        advanced_raw = state.get("advancedFilter")
        flat = state.get("filters")
    else:
        root_raw = getattr(state, "root_group", None)
        advanced_raw = getattr(state, "advanced_filter", None)
        flat = getattr(state, "filters", None)

    root = _as_group(root_raw)
    if root is not None:
        return parse_group(root, options)

    advanced = _as_group(advanced_raw)
    if advanced is not None:
        return parse_group(advanced, options)

    if flat:
        return parse_group(_basic_group(flat), options)
    return {}


__all__ = [
    "BackendFilter",
    "DEFAULT_OPERATOR_MAPPING",
    "ParseFilterOptions",
    "parse_condition",
    "parse_group",
    "parse_filter_state",
    "parse_filter_to_backend",
]
