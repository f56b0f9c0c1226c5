import json

import jsonschema
import pytest

from ticketfilter.filters import (
    FilterCondition,
    FilterGroup,
    FilterState,
    LogicOperator,
    dump_filter_group_json,
    is_empty_value,
    parse_filter_group_json,
)


SNAPSHOT = {
    "id": "root",
    "logicOperator": "AND",
    "conditions": [
        {"id": "c1", "field": "status", "operator": "equals", "value": "done", "active": True},
    ],
    "groups": [
        {
            "id": "g1",
            "logicOperator": "OR",
            "conditions": [
                {"id": "c2", "field": "title", "operator": "contains", "value": "login"},
                {"id": "c3", "field": "points", "operator": "greaterThan", "value": 3, "active": False},
            ],
        }
    ],
}


def test_parse_snapshot():
    root = parse_filter_group_json(SNAPSHOT)
    assert root.id == "root"
    assert root.logic_operator is LogicOperator.AND
    assert root.conditions[0] == FilterCondition("c1", "status", "equals", "done", True)
    sub = root.groups[0]
    assert sub.logic_operator is LogicOperator.OR
    assert sub.active is True
    assert [c.active for c in sub.conditions] == [True, False]


def test_parse_json_string():
    root = parse_filter_group_json(json.dumps(SNAPSHOT))
    assert [c.id for c in root.iter_conditions()] == ["c1", "c2", "c3"]


def test_to_dict_uses_camel_case():
    root = parse_filter_group_json(SNAPSHOT)
    data = root.to_dict()
    assert data["logicOperator"] == "AND"
    assert data["groups"][0]["conditions"][1]["active"] is False
    assert parse_filter_group_json(dump_filter_group_json(root)) == root


def test_missing_members_are_defaulted():
    root = FilterGroup.from_dict(
        {"conditions": [{"field": "status", "operator": "equals"}]},
        default_logic=LogicOperator.OR,
    )
    assert root.id
    assert root.logic_operator is LogicOperator.OR
    assert root.active is True
    assert root.groups == []
    # a condition without an id is keyed by its field
    assert root.conditions[0].id == "status"
    assert root.conditions[0].value is None


def test_lowercase_logic_operator():
    root = parse_filter_group_json({"logicOperator": "or"})
    assert root.logic_operator is LogicOperator.OR


@pytest.mark.parametrize(
    "payload",
    [
        {"logicOperator": "XOR"},
        {"conditions": [{"operator": "equals"}]},
        {"conditions": [{"field": "status", "operator": "equals", "active": "yes"}]},
        {"groups": "nope"},
    ],
)
def test_schema_rejects_malformed_trees(payload):
    with pytest.raises(jsonschema.ValidationError):
        parse_filter_group_json(payload)


def test_open_operator_set_passes_schema():
    root = parse_filter_group_json({"conditions": [{"field": "assignee", "operator": "assignedToMe"}]})
    assert root.conditions[0].operator == "assignedToMe"


def test_filter_state_to_condition():
    state = FilterState.from_dict({"id": "status", "operator": "in", "value": ["open"]})
    condition = state.to_condition()
    assert condition.id == "status"
    assert condition.field == "status"
    assert condition.value == ["open"]
    assert condition.active is True
    assert state.to_dict() == {"id": "status", "operator": "in", "value": ["open"]}


def test_nodes_are_immutable():
    condition = FilterCondition("c1", "status", "equals", "done")
    with pytest.raises(AttributeError):
        condition.value = "open"


@pytest.mark.parametrize("value, expected", [
    (None, True), ("", True), ("  ", True), ([], True),
    ("x", False), (0, False), (False, False), ([None], False),
])
def test_is_empty_value(value, expected):
    assert is_empty_value(value) is expected
