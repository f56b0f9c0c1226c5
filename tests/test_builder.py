import logging

from ticketfilter.filters import ALL_VALUE, FilterCondition, FilterGroup, FilterState, LogicOperator
from ticketfilter.manager import FilterManagerState
from ticketfilter.query import (
    DEFAULT_OPERATOR_MAPPING,
    ParseFilterOptions,
    parse_condition,
    parse_filter_state,
    parse_filter_to_backend,
    parse_group,
)


def cond(field, operator, value=None, active=True, id=None):
    return FilterCondition(id or field, field, operator, value, active)


class TestParseCondition:
    def test_simple(self):
        assert parse_condition(cond("title", "equals", "Directus")) == {"title": {"_eq": "Directus"}}

    def test_inactive_is_empty(self):
        assert parse_condition(cond("title", "equals", "x", active=False)) == {}

    def test_every_builtin_token(self):
        for op, token in DEFAULT_OPERATOR_MAPPING.items():
            assert parse_condition(cond("f", op, "v")) == {"f": {token: "v"}}

    def test_unmapped_operator_gets_underscore_prefix(self):
        assert parse_condition(cond("assignee", "assignedToMe", True)) == {"assignee": {"_assignedToMe": True}}

    def test_custom_mapping_replaces_defaults(self):
        options = ParseFilterOptions(operator_mapping={"contains": "_icontains"})
        assert parse_condition(cond("title", "contains", "d"), options) == {"title": {"_icontains": "d"}}
        assert parse_condition(cond("title", "equals", "d"), options) == {"title": {"_equals": "d"}}

    def test_relation_path(self):
        assert parse_condition(cond("author.name", "equals", "Rijk")) == {
            "author": {"name": {"_eq": "Rijk"}}
        }
        assert parse_condition(cond("project.owner.email", "endsWith", "@x.io")) == {
            "project": {"owner": {"email": {"_ends_with": "@x.io"}}}
        }

    def test_custom_relation_separator(self):
        options = ParseFilterOptions(relation_separator="__")
        assert parse_condition(cond("author__name", "equals", "Rijk"), options) == {
            "author": {"name": {"_eq": "Rijk"}}
        }
        assert parse_condition(cond("a.b", "equals", 1), options) == {"a.b": {"_eq": 1}}

    def test_field_transformer(self):
        options = ParseFilterOptions(field_transformer=lambda f: f"{f}_transformed")
        assert parse_condition(cond("title", "equals", "x"), options) == {"title_transformed": {"_eq": "x"}}

    def test_value_transformer_receives_operator_and_original_field(self):
        calls = []

        def to_now(value, operator, field):
            calls.append((value, operator, field))
            return "$NOW" if value == "today" else value

        options = ParseFilterOptions(value_transformer=to_now, field_transformer=str.upper)
        assert parse_condition(cond("date", "equals", "today"), options) == {"DATE": {"_eq": "$NOW"}}
        assert calls == [("today", "equals", "date")]

    def test_sentinel_values_are_not_serialized(self):
        assert parse_condition(cond("status", "equals", ALL_VALUE)) == {}
        assert parse_condition(cond("status", "in", None)) == {}

    def test_emptiness_operators_default_to_true(self):
        assert parse_condition(cond("assignee", "isEmpty")) == {"assignee": {"_null": True}}
        assert parse_condition(cond("assignee", "isNotEmpty", "")) == {"assignee": {"_nnull": True}}
        assert parse_condition(cond("assignee", "isEmpty", ALL_VALUE)) == {"assignee": {"_null": True}}

    def test_between_pair_passes_through(self):
        assert parse_condition(cond("points", "between", [None, 5])) == {"points": {"_between": [None, 5]}}

    def test_open_between_is_not_serialized(self):
        assert parse_condition(cond("points", "between", [None, None])) == {}
        assert parse_filter_to_backend({"filters": [{"id": "points", "operator": "between", "value": [None, None]}]}) == {}


class TestParseGroup:
    def test_single_rule_is_unwrapped(self):
        group = FilterGroup(id="g", conditions=[cond("title", "contains", "Directus")])
        assert parse_group(group) == {"title": {"_contains": "Directus"}}

    def test_two_rules_are_wrapped(self):
        group = FilterGroup(id="g", conditions=[
            cond("status", "equals", "done"),
            cond("updated_at", "between", [None, "2024-01-01"]),
        ])
        assert parse_group(group) == {
            "_and": [
                {"status": {"_eq": "done"}},
                {"updated_at": {"_between": [None, "2024-01-01"]}},
            ]
        }

    def test_inactive_condition_is_dropped(self):
        group = FilterGroup(id="g", conditions=[
            cond("title", "contains", "Directus"),
            cond("status", "equals", "done", active=False),
        ])
        assert parse_group(group) == {"title": {"_contains": "Directus"}}

    def test_or_and_nesting(self):
        group = FilterGroup(
            id="root",
            logic_operator=LogicOperator.AND,
            conditions=[cond("title", "contains", "login")],
            groups=[
                FilterGroup(id="g1", logic_operator=LogicOperator.OR, conditions=[
                    cond("status", "equals", "open", id="s1"),
                    cond("status", "equals", "review", id="s2"),
                ]),
            ],
        )
        assert parse_group(group) == {
            "_and": [
                {"title": {"_contains": "login"}},
                {"_or": [{"status": {"_eq": "open"}}, {"status": {"_eq": "review"}}]},
            ]
        }

    def test_subgroup_with_single_rule_is_unwrapped(self):
        group = FilterGroup(id="root", conditions=[cond("a", "equals", 1)], groups=[
            FilterGroup(id="g1", logic_operator=LogicOperator.OR, conditions=[cond("b", "equals", 2)]),
        ])
        assert parse_group(group) == {"_and": [{"a": {"_eq": 1}}, {"b": {"_eq": 2}}]}

    def test_empty_and_inactive_groups(self):
        assert parse_group(FilterGroup(id="g")) == {}
        assert parse_group(FilterGroup(id="g", active=False, conditions=[cond("a", "equals", 1)])) == {}
        group = FilterGroup(id="root", groups=[FilterGroup(id="g1"), FilterGroup(id="g2")])
        assert parse_group(group) == {}

    def test_unconstrained_conditions_do_not_count_as_rules(self):
        group = FilterGroup(id="g", conditions=[
            cond("status", "equals", ALL_VALUE),
            cond("title", "contains", "x"),
        ])
        assert parse_group(group) == {"title": {"_contains": "x"}}


class TestParseFilterToBackend:
    BASIC = [
        {"id": "title", "operator": "contains", "value": "Directus"},
        {"id": "status", "operator": "equals", "value": "published"},
    ]

    def test_basic_filters(self):
        assert parse_filter_to_backend({"filters": self.BASIC}) == {
            "_and": [{"title": {"_contains": "Directus"}}, {"status": {"_eq": "published"}}]
        }

    def test_single_basic_filter(self):
        assert parse_filter_to_backend({"filters": self.BASIC[:1]}) == {"title": {"_contains": "Directus"}}

    def test_advanced_filter(self):
        state = {
            "advancedFilter": {
                "logicOperator": "OR",
                "conditions": [
                    {"field": "title", "operator": "contains", "value": "Directus"},
                    {"field": "status", "operator": "in", "value": ["published", "draft"]},
                ],
            }
        }
        assert parse_filter_to_backend(state) == {
            "_or": [{"title": {"_contains": "Directus"}}, {"status": {"_in": ["published", "draft"]}}]
        }

    def test_tree_wins_over_advanced_and_basic(self):
        state = {
            "rootGroup": {"conditions": [{"field": "a", "operator": "equals", "value": 1}]},
            "advancedFilter": {"conditions": [{"field": "b", "operator": "equals", "value": 2}]},
            "filters": [{"id": "c", "operator": "equals", "value": 3}],
        }
        assert parse_filter_to_backend(state) == {"a": {"_eq": 1}}

    def test_advanced_wins_over_basic(self):
        state = {
            "advancedFilter": {"conditions": [{"field": "b", "operator": "equals", "value": 2}]},
            "filters": [{"id": "c", "operator": "equals", "value": 3}],
        }
        assert parse_filter_to_backend(state) == {"b": {"_eq": 2}}

    def test_empty_root_group_falls_through(self):
        state = {"rootGroup": {}, "filters": [{"id": "c", "operator": "equals", "value": 3}]}
        assert parse_filter_to_backend(state) == {"c": {"_eq": 3}}

    def test_absent_input(self):
        assert parse_filter_to_backend({}) == {}
        assert parse_filter_to_backend(None) == {}
        assert parse_filter_to_backend({"filters": []}) == {}

    def test_advanced_condition_without_field_is_skipped(self, caplog):
        state = {
            "advancedFilter": {
                "logicOperator": "AND",
                "conditions": [
                    {"operator": "equals", "value": 1},
                    {"field": "status", "operator": "equals", "value": "done"},
                ],
                "groups": [{"logicOperator": "XOR", "conditions": [{"value": 2}]}],
            }
        }
        with caplog.at_level(logging.WARNING, logger="filters.query"):
            assert parse_filter_to_backend(state) == {"status": {"_eq": "done"}}
        assert "Skipping condition without a field" in caplog.text

    def test_flat_filter_without_id_is_skipped(self, caplog):
        with caplog.at_level(logging.WARNING, logger="filters.query"):
            assert parse_filter_to_backend({"filters": [{"operator": "equals", "value": 3}]}) == {}
            assert parse_filter_to_backend(
                {"filters": [{"operator": "equals", "value": 3}, {"id": "c", "operator": "equals", "value": 3}]}
            ) == {"c": {"_eq": 3}}
        assert "Skipping flat filter without an id" in caplog.text

    def test_group_and_manager_state_inputs(self):
        group = FilterGroup(id="g", conditions=[cond("title", "contains", "x")])
        assert parse_filter_to_backend(group) == {"title": {"_contains": "x"}}
        assert parse_filter_to_backend(FilterManagerState(root_group=group)) == {"title": {"_contains": "x"}}

    def test_options_are_threaded_through(self):
        options = ParseFilterOptions(field_transformer=lambda f: f"t_{f}")
        assert parse_filter_to_backend({"filters": self.BASIC[:1]}, options) == {"t_title": {"_contains": "Directus"}}


def test_parse_filter_state():
    assert parse_filter_state(FilterState("title", "equals", "Directus")) == {"title": {"_eq": "Directus"}}
    assert parse_filter_state({"id": "author.name", "operator": "equals", "value": "Rijk"}) == {
        "author": {"name": {"_eq": "Rijk"}}
    }
