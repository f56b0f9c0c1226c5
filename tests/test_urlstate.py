import json
import logging
from urllib.parse import parse_qs

from ticketfilter.filters import FilterCondition, FilterGroup, LogicOperator
from ticketfilter.manager import FilterManagerState
from ticketfilter.urlstate import decode_filter_state, encode_filter_state, to_query_string

STATE = FilterManagerState(
    root_group=FilterGroup(
        id="root",
        logic_operator=LogicOperator.OR,
        conditions=[FilterCondition("c1", "title", "contains", "login page")],
        groups=[FilterGroup(id="g1", conditions=[FilterCondition("c2", "status", "in", ["open"])])],
    ),
    mode="advanced",
)


def test_encode_parameter_names():
    params = encode_filter_state("tickets", STATE)
    assert set(params) == {"tickets_mode", "tickets_filter"}
    assert params["tickets_mode"] == "advanced"
    assert json.loads(params["tickets_filter"]) == STATE.root_group.to_dict()


def test_decode_restores_state():
    state = decode_filter_state("tickets", encode_filter_state("tickets", STATE))
    assert state == STATE


def test_query_string_round_trip_through_parse_qs():
    qs = to_query_string("tickets", STATE)
    assert "tickets_mode=advanced" in qs
    state = decode_filter_state("tickets", parse_qs(qs))
    assert state.root_group.conditions[0].value == "login page"


def test_parameters_of_other_tables_are_ignored():
    state = decode_filter_state("projects", encode_filter_state("tickets", STATE))
    assert state.mode == "basic"
    assert state.root_group.conditions == []
    assert state.root_group.groups == []


def test_malformed_json_decodes_to_empty_tree(caplog):
    with caplog.at_level(logging.WARNING, logger="filters.urlstate"):
        state = decode_filter_state("tickets", {"tickets_mode": "advanced", "tickets_filter": "{not json"})
    assert state.mode == "advanced"
    assert state.root_group.conditions == []
    assert "Ignoring malformed tickets filter state" in caplog.text


def test_schema_invalid_tree_decodes_to_empty_tree(caplog):
    bad = json.dumps({"logicOperator": "XOR"})
    with caplog.at_level(logging.WARNING, logger="filters.urlstate"):
        state = decode_filter_state("tickets", {"tickets_filter": bad}, validate=True)
    assert state.root_group.conditions == []
    assert "Ignoring malformed" in caplog.text


def test_unknown_mode_is_basic():
    assert decode_filter_state("t", {"t_mode": "sideways"}).mode == "basic"


def test_legacy_parameters():
    basic = json.dumps([{"id": "status", "operator": "equals", "value": "done"}])
    state = decode_filter_state("tickets", {"tickets_basic": basic})
    assert state.root_group.conditions[0].field == "status"
    assert state.root_group.logic_operator is LogicOperator.AND

    advanced = json.dumps({"logicOperator": "OR", "conditions": [{"field": "title", "operator": "contains", "value": "x"}]})
    state = decode_filter_state("tickets", {"tickets_mode": "advanced", "tickets_advanced": advanced})
    assert state.mode == "advanced"
    assert state.root_group.logic_operator is LogicOperator.OR


def test_legacy_null_advanced_falls_back_to_basic():
    state = decode_filter_state("tickets", {"tickets_advanced": "null", "tickets_basic": "[]"})
    assert state.root_group.conditions == []


def test_malformed_legacy_basic(caplog):
    with caplog.at_level(logging.WARNING, logger="filters.urlstate"):
        state = decode_filter_state("tickets", {"tickets_basic": "[oops"})
    assert state.root_group.conditions == []
    assert "basic filters" in caplog.text
