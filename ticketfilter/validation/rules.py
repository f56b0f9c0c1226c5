from typing import Set

from ..config.models import FilterConfiguration, FilterFieldConfig
from ..filters import FilterGroup
from ..system import FilterSystem


def _effective_operator_ids(field: FilterFieldConfig, system: FilterSystem) -> list[str]:
    return [o["value"] for o in system.get_operators_for_field(field)]


def _assert_configuration_valid(configuration: FilterConfiguration, system: FilterSystem) -> None:
    seen: Set[str] = set()
    for f in configuration.filters:
        if f.id in seen:
            raise ValueError(f"Duplicate filter field id: {f.id}")
        seen.add(f.id)

        if system.get_filter_type(f.filter_type) is None:
            raise ValueError(f"Unknown filter type {f.filter_type!r} for field {f.id}")

        for op in f.available_operators or []:
            if system.get_operator(op) is None:
                raise ValueError(f"Unknown operator {op!r} for field {f.id}")

        if f.default_operator and f.default_operator not in _effective_operator_ids(f, system):
            raise ValueError(
                f"Default operator {f.default_operator!r} not available on field {f.id}"
            )


def _assert_unique_ids(group: FilterGroup) -> None:
    seen: Set[str] = set()

    def walk(node: FilterGroup):
        for nid in [node.id] + [c.id for c in node.conditions]:
            if nid in seen:
                raise ValueError(f"Duplicate node id in filter tree: {nid}")
            seen.add(nid)
        for g in node.groups:
            walk(g)

    walk(group)


def _assert_group_allowed(
    group: FilterGroup, configuration: FilterConfiguration, system: FilterSystem
) -> None:
    _assert_unique_ids(group)
    for c in group.iter_conditions():
        f = configuration.get_field(c.field)
        if f is None:
            raise ValueError(f"Filter field not configured: {c.field}")
        if c.operator not in _effective_operator_ids(f, system):
            raise ValueError(f"Operator {c.operator} not allowed on field {c.field}")


def _exceeds_max_conditions(count: int, configuration: FilterConfiguration) -> bool:
    cap = configuration.max_conditions
    return cap is not None and count >= cap
