from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union
import logging

from ..config import settings
from ..config.models import FilterConfiguration, FilterFieldConfig
from ..filters import (
    FilterCondition,
    FilterGroup,
    FilterState,
    LogicOperator,
    parse_filter_group_json,
)
from ..filters.models import _coerce_logic, _new_id
from ..system import FilterSystem, build_filter_system
from ..validation import (
    _assert_configuration_valid,
    _assert_group_allowed,
    _exceeds_max_conditions,
)

log = logging.getLogger("filters.manager")

MODES = ("basic", "advanced")

_CONDITION_FIELDS = {"field", "operator", "value", "active"}
_GROUP_FIELDS = {"logic_operator", "conditions", "groups", "active"}


# ---------------------------------------------------------------------------
# State snapshot
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FilterManagerState:
    """
    Everything needed to restore a manager: the tree and the presentation mode.
    The flat "basic" list is derived from the tree, never stored alongside it.
    """
    root_group: FilterGroup
    mode: str = "basic"

    def basic_filters(self) -> List[FilterState]:
        return [
            FilterState(id=c.field, operator=c.operator, value=c.value)
            for c in self.root_group.conditions
            if c.active
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "rootGroup": self.root_group.to_dict(),
            "filters": [f.to_dict() for f in self.basic_filters()],
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        *,
        default_logic: LogicOperator = LogicOperator.AND,
        validate: bool = False,
    ) -> "FilterManagerState":
        """
        Accepts {rootGroup}, {advancedFilter} or {filters} payloads, in that order of precedence.
        """
        mode = data.get("mode") if data.get("mode") in MODES else "basic"
        if data.get("rootGroup"):
            root = parse_filter_group_json(data["rootGroup"], validate=validate, default_logic=default_logic)
        elif data.get("advancedFilter"):
            root = parse_filter_group_json(data["advancedFilter"], validate=validate, default_logic=default_logic)
            mode = data.get("mode") if data.get("mode") in MODES else "advanced"
        else:
            conditions = [FilterState.from_dict(f).to_condition() for f in data.get("filters") or []]
            root = FilterGroup(logic_operator=LogicOperator.AND, conditions=conditions)
        return cls(root_group=root, mode=mode)


# ---------------------------------------------------------------------------
# Pure tree helpers: rebuild only the path from the edited node to the root
# ---------------------------------------------------------------------------

def _update_group(
    group: FilterGroup, group_id: str, fn: Callable[[FilterGroup], FilterGroup]
) -> Optional[FilterGroup]:
    if group.id == group_id:
        return fn(group)
    for i, sub in enumerate(group.groups):
        updated = _update_group(sub, group_id, fn)
        if updated is not None:
            groups = list(group.groups)
            groups[i] = updated
            return replace(group, groups=groups)
    return None


def _update_condition(
    group: FilterGroup,
    condition_id: str,
    fn: Callable[[FilterCondition], Optional[FilterCondition]],
) -> Optional[FilterGroup]:
    """
    Apply `fn` to the condition with `condition_id`; `fn` returning None removes it.
    """
    for i, c in enumerate(group.conditions):
        if c.id == condition_id:
            conditions = list(group.conditions)
            updated = fn(c)
            if updated is None:
                del conditions[i]
            else:
                conditions[i] = updated
            return replace(group, conditions=conditions)
    for i, sub in enumerate(group.groups):
        updated_sub = _update_condition(sub, condition_id, fn)
        if updated_sub is not None:
            groups = list(group.groups)
            groups[i] = updated_sub
            return replace(group, groups=groups)
    return None


def _remove_subgroup(group: FilterGroup, group_id: str) -> Optional[FilterGroup]:
    for i, sub in enumerate(group.groups):
        if sub.id == group_id:
            return replace(group, groups=group.groups[:i] + group.groups[i + 1:])
        updated = _remove_subgroup(sub, group_id)
        if updated is not None:
            groups = list(group.groups)
            groups[i] = updated
            return replace(group, groups=groups)
    return None


def _find_condition(group: FilterGroup, condition_id: str) -> Optional[FilterCondition]:
    for c in group.iter_conditions():
        if c.id == condition_id:
            return c
    return None


def _find_group(group: FilterGroup, group_id: str) -> Optional[FilterGroup]:
    if group.id == group_id:
        return group
    for sub in group.groups:
        found = _find_group(sub, group_id)
        if found is not None:
            return found
    return None


def _safe_logic(raw: Any, default: LogicOperator = LogicOperator.AND) -> Optional[LogicOperator]:
    try:
        return _coerce_logic(raw, default)
    except ValueError:
        log.warning("Ignoring unknown logic operator %r", raw)
        return None


def _normalize_updates(updates: Mapping[str, Any], allowed: set) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in updates.items():
        name = "logic_operator" if key == "logicOperator" else key
        if name not in allowed:
            log.debug("Ignoring update of %r", key)
            continue
        out[name] = value
    return out


# ---------------------------------------------------------------------------
# Manager
# ---------------------------------------------------------------------------

class FilterManager:
    """
    Owns one filter tree. Structural edits replace nodes along the path to the root,
    so a previously returned root is never modified. Mutators return None/False
    instead of raising when an id can't be found.
    """

    def __init__(
        self,
        configuration: FilterConfiguration,
        state: Optional[Union[FilterManagerState, FilterGroup, Dict[str, Any]]] = None,
        on_state_change: Optional[Callable[[FilterManagerState], None]] = None,
        *,
        filter_system: Optional[FilterSystem] = None,
        id_factory: Optional[Callable[[], str]] = None,
        strict: Optional[bool] = None,
    ):
        self.configuration = configuration
        self.filter_system = filter_system or build_filter_system(configuration)
        self._id_factory = id_factory or _new_id
        self._on_state_change = on_state_change
        self._strict = settings.FILTER_STRICT_CONFIG if strict is None else strict

        if self._strict:
            _assert_configuration_valid(configuration, self.filter_system)

        self._fields: Dict[str, FilterFieldConfig] = {
            f.id: configuration.resolved_field(f.id) for f in configuration.filters
        }
        self.mode: str = configuration.default_mode
        self._root: FilterGroup = self.create_empty_group(configuration.default_logic_operator)
        if state is not None:
            self._apply_state(state)
        self._last_notified: Optional[Dict[str, Any]] = self.get_state().to_dict()

    # ---- state -------------------------------------------------------------

    @property
    def root_group(self) -> FilterGroup:
        return self._root

    def get_state(self) -> FilterManagerState:
        return FilterManagerState(root_group=self._root, mode=self.mode)

    def set_state(self, state: Union[FilterManagerState, FilterGroup, Dict[str, Any]]) -> None:
        self._apply_state(state)
        self._notify()

    def _apply_state(self, state: Union[FilterManagerState, FilterGroup, Dict[str, Any]]) -> None:
        default_logic = self.configuration.default_logic_operator
        if isinstance(state, dict):
            state = FilterManagerState.from_dict(state, default_logic=default_logic)
        if isinstance(state, FilterGroup):
            state = FilterManagerState(root_group=state, mode=self.mode)

        root = self._normalize_group(state.root_group, set())
        if self._strict:
            _assert_group_allowed(root, self.configuration, self.filter_system)
        self._root = root
        self.mode = state.mode if state.mode in MODES else self.mode

    def _fresh_id(self, node_id: Optional[str], seen: set) -> str:
        # ids must be unique across the whole tree; blanks and repeats get a new one
        while not node_id or node_id in seen:
            node_id = self._id_factory()
        seen.add(node_id)
        return node_id

    def _normalize_group(self, group: FilterGroup, seen: set) -> FilterGroup:
        # snapshots may come from callers with blank or repeated ids or string logic operators
        default_logic = self.configuration.default_logic_operator
        return replace(
            group,
            id=self._fresh_id(group.id, seen),
            logic_operator=_safe_logic(group.logic_operator, default_logic) or default_logic,
            conditions=[replace(c, id=self._fresh_id(c.id, seen)) for c in group.conditions],
            groups=[self._normalize_group(g, seen) for g in group.groups],
            active=group.active is not False,
        )

    def _commit(self, root: FilterGroup) -> None:
        self._root = root
        self._notify()

    def _notify(self) -> None:
        if self._on_state_change is None:
            return
        state = self.get_state()
        snapshot = state.to_dict()
        if snapshot == self._last_notified:
            return
        self._last_notified = snapshot
        self._on_state_change(state)

    # ---- lookups -----------------------------------------------------------

    def get_filter_config(self, field_id: str) -> Optional[FilterFieldConfig]:
        return self._fields.get(field_id)

    def find_condition(self, condition_id: str) -> Optional[FilterCondition]:
        return _find_condition(self._root, condition_id)

    def find_group(self, group_id: str) -> Optional[FilterGroup]:
        return _find_group(self._root, group_id)

    def get_operators_for_field(self, field_id: str) -> List[Dict[str, str]]:
        f = self._fields.get(field_id)
        if f is None:
            return []
        return self.filter_system.get_operators_for_field(f)

    # ---- structural edits --------------------------------------------------

    def create_empty_group(self, logic_operator: Union[LogicOperator, str] = LogicOperator.AND) -> FilterGroup:
        return FilterGroup(
            id=self._id_factory(),
            logic_operator=_safe_logic(logic_operator) or LogicOperator.AND,
            conditions=[],
            groups=[],
            active=True,
        )

    def add_condition(self, group_id: str, field: str) -> Optional[FilterCondition]:
        f = self._fields.get(field)
        if f is None:
            log.debug("add_condition: unknown field %s", field)
            return None

        condition = FilterCondition(
            id=self._id_factory(),
            field=field,
            operator=self.filter_system.default_operator_for(f),
            value=self.filter_system.default_value_for(f),
            active=True,
        )
        updated = _update_group(
            self._root, group_id, lambda g: replace(g, conditions=[*g.conditions, condition])
        )
        if updated is None:
            log.debug("add_condition: unknown group %s", group_id)
            return None
        self._commit(updated)
        return condition

    def update_condition(self, condition_id: str, updates: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> bool:
        changes = _normalize_updates({**(updates or {}), **kwargs}, _CONDITION_FIELDS)
        updated = _update_condition(self._root, condition_id, lambda c: replace(c, **changes))
        if updated is None:
            return False
        self._commit(updated)
        return True

    def remove_condition(self, condition_id: str) -> bool:
        updated = _update_condition(self._root, condition_id, lambda c: None)
        if updated is None:
            return False
        self._commit(updated)
        return True

    def add_group(
        self, parent_group_id: str, logic_operator: Optional[Union[LogicOperator, str]] = None
    ) -> Optional[FilterGroup]:
        logic = _safe_logic(logic_operator or self.configuration.default_logic_operator)
        if logic is None:
            return None
        group = self.create_empty_group(logic)
        updated = _update_group(
            self._root, parent_group_id, lambda g: replace(g, groups=[*g.groups, group])
        )
        if updated is None:
            return None
        self._commit(updated)
        return group

    def update_group(self, group_id: str, updates: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> bool:
        changes = _normalize_updates({**(updates or {}), **kwargs}, _GROUP_FIELDS)
        if "logic_operator" in changes:
            changes["logic_operator"] = _safe_logic(changes["logic_operator"])
            if changes["logic_operator"] is None:
                return False
        updated = _update_group(self._root, group_id, lambda g: replace(g, **changes))
        if updated is None:
            return False
        self._commit(updated)
        return True

    def remove_group(self, group_id: str) -> bool:
        if group_id == self._root.id:
            return False
        updated = _remove_subgroup(self._root, group_id)
        if updated is None:
            return False
        self._commit(updated)
        return True

    def toggle_condition_active(self, condition_id: str) -> bool:
        c = self.find_condition(condition_id)
        if c is None:
            return False
        return self.update_condition(condition_id, active=not c.active)

    def toggle_group_active(self, group_id: str) -> bool:
        g = self.find_group(group_id)
        if g is None:
            return False
        return self.update_group(group_id, active=not g.active)

    def reset(self) -> None:
        self._commit(self.create_empty_group(self.configuration.default_logic_operator))

    # ---- basic (flat) view over the root group -----------------------------

    def is_basic_compatible(self) -> bool:
        return self._root.logic_operator == LogicOperator.AND and not self._root.groups

    def basic_filters(self) -> List[FilterState]:
        return self.get_state().basic_filters()

    def _root_condition_for(self, field_id: str) -> Optional[FilterCondition]:
        for c in self._root.conditions:
            if c.field == field_id:
                return c
        return None

    def set_filter(self, field_id: str, value: Any) -> Optional[FilterCondition]:
        """
        Set the value of the root-level condition on `field_id`, adding one if needed.
        """
        existing = self._root_condition_for(field_id)
        if existing is None:
            condition = self.add_condition(self._root.id, field_id)
            if condition is None:
                return None
            existing = condition
        if existing.value == value and existing.active:
            return existing
        self.update_condition(existing.id, value=value, active=True)
        return self.find_condition(existing.id)

    def set_filter_operator(self, field_id: str, operator: str) -> bool:
        existing = self._root_condition_for(field_id)
        if existing is None:
            return False
        return self.update_condition(existing.id, operator=operator)

    def clear_filter(self, field_id: str) -> bool:
        ids = [c.id for c in self._root.conditions if c.field == field_id]
        for cid in ids:
            self.remove_condition(cid)
        return bool(ids)

    def set_mode(self, mode: str) -> bool:
        if mode not in MODES:
            return False
        if mode == "advanced" and not self.configuration.enable_advanced_filter:
            return False
        if mode == "basic" and not self.is_basic_compatible():
            return False
        self.mode = mode
        self._notify()
        return True

    # ---- evaluation --------------------------------------------------------

    def evaluate_row(self, row: Mapping[str, Any]) -> bool:
        return self._evaluate_group(self._root, row)

    def filter_rows(self, rows: Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
        return [r for r in rows if self.evaluate_row(r)]

    def _evaluate_group(self, group: FilterGroup, row: Mapping[str, Any]) -> bool:
        if not group.active:
            return True

        results = [self._evaluate_condition(c, row) for c in group.conditions if c.active]
        results += [self._evaluate_group(g, row) for g in group.groups if g.active]

        # nothing active here constrains the row
        if not results:
            return True
        if group.logic_operator == LogicOperator.OR:
            return any(results)
        return all(results)

    def _evaluate_condition(self, condition: FilterCondition, row: Mapping[str, Any]) -> bool:
        # a field missing from the row never matches, unlike an empty group
        if condition.field not in row:
            return False
        f = self._fields.get(condition.field)
        if f is None:
            log.debug("Evaluating condition on unconfigured field %s", condition.field)
        return self.filter_system.evaluate_filter(
            condition.operator, row[condition.field], condition.value, f
        )

    # ---- counters ----------------------------------------------------------

    def get_active_conditions_count(self) -> int:
        def count(group: FilterGroup) -> int:
            if not group.active:
                return 0
            return sum(1 for c in group.conditions if c.active) + sum(count(g) for g in group.groups)

        return count(self._root)

    def can_add_condition(self) -> bool:
        total = sum(1 for _ in self._root.iter_conditions())
        return not _exceeds_max_conditions(total, self.configuration)


__all__ = [
    "FilterManager",
    "FilterManagerState",
    "MODES",
]
