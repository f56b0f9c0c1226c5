import pytest
from pydantic import ValidationError

from ticketfilter.filters import ALL_VALUE
from ticketfilter.filtertypes import (
    DEFAULT_FILTER_TYPES,
    FilterType,
    FilterTypeDefinition,
    FilterTypeRegistry,
)


@pytest.mark.parametrize(
    "kind, default_operator, default_value",
    [
        ("text", "contains", ""),
        ("select", "equals", ALL_VALUE),
        ("multi-select", "in", []),
        ("date", "equals", None),
        ("number", "equals", None),
        ("boolean", "equals", None),
        ("custom", "custom", None),
    ],
)
def test_builtin_defaults(kind, default_operator, default_value):
    registry = FilterTypeRegistry()
    assert registry.default_operator(kind) == default_operator
    assert registry.default_value(kind) == default_value


def test_default_operator_is_listed_for_every_builtin():
    for d in DEFAULT_FILTER_TYPES.values():
        assert d.default_operator in d.operators


def test_operator_order_is_preserved():
    registry = FilterTypeRegistry()
    assert registry.operators_for(FilterType.SELECT) == ["equals", "notEquals", "isEmpty"]
    assert registry.operators_for("date")[:2] == ["equals", "notEquals"]


def test_default_operator_must_be_listed():
    with pytest.raises(ValidationError):
        FilterTypeDefinition(id="bad", operators=["equals"], default_operator="contains")


def test_add_accepts_camel_case_mapping():
    registry = FilterTypeRegistry()
    d = registry.add({"id": "rating", "operators": ["equals", "greaterThan"], "defaultOperator": "greaterThan", "defaultValue": 3})
    assert d.default_operator == "greaterThan"
    assert registry.default_value("rating") == 3
    assert "rating" in registry


def test_later_definitions_win():
    registry = FilterTypeRegistry([
        {"id": "text", "operators": ["equals"], "defaultOperator": "equals", "defaultValue": None},
    ])
    assert registry.operators_for("text") == ["equals"]
    assert registry.default_operator("text") == "equals"
    # the shared defaults table is untouched
    assert DEFAULT_FILTER_TYPES["text"].default_operator == "contains"


def test_default_value_is_a_copy():
    registry = FilterTypeRegistry()
    registry.default_value("multi-select").append("open")
    assert registry.default_value("multi-select") == []


def test_unknown_type():
    registry = FilterTypeRegistry()
    assert registry.get("nope") is None
    assert registry.operators_for("nope") == []
    assert registry.default_operator("nope") is None


def test_registry_without_defaults():
    registry = FilterTypeRegistry(include_defaults=False)
    assert len(registry) == 0
    assert "text" not in registry
