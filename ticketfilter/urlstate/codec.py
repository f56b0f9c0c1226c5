"""
Filter state <-> URL query parameters.

A table's state travels as two parameters: `<table>_mode` ("basic" | "advanced")
and `<table>_filter` (the root group as compact JSON). Older links that carry
`<table>_basic` / `<table>_advanced` are still read.
"""

from __future__ import annotations
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode
import json
import logging

import jsonschema

from ..config import settings
from ..filters import (
    FilterGroup,
    FilterState,
    LogicOperator,
    parse_filter_group_json,
)
from ..manager import FilterManagerState

log = logging.getLogger("filters.urlstate")


def _param_names(table_id: str) -> Dict[str, str]:
    return {
        "mode": f"{table_id}_mode",
        "filter": f"{table_id}_filter",
        "basic": f"{table_id}_basic",
        "advanced": f"{table_id}_advanced",
    }


def encode_filter_state(table_id: str, state: FilterManagerState) -> Dict[str, str]:
    names = _param_names(table_id)
    return {
        names["mode"]: state.mode,
        names["filter"]: json.dumps(state.root_group.to_dict(), separators=(",", ":"), default=str),
    }


def to_query_string(table_id: str, state: FilterManagerState) -> str:
    return urlencode(encode_filter_state(table_id, state))


def _first(params: Mapping[str, Any], key: str) -> Optional[str]:
    # accepts both {k: v} and parse_qs-style {k: [v, ...]}
    raw = params.get(key)
    if isinstance(raw, (list, tuple)):
        raw = raw[0] if raw else None
    return raw if isinstance(raw, str) and raw else None


def _empty_root(default_logic: LogicOperator) -> FilterGroup:
    return FilterGroup(logic_operator=default_logic)


def decode_filter_state(
    table_id: str,
    params: Mapping[str, Any],
    *,
    default_logic: LogicOperator = LogicOperator.AND,
    validate: Optional[bool] = None,
) -> FilterManagerState:
    """
    Rebuild a FilterManagerState from query parameters.
    Malformed or schema-invalid payloads are logged and decode to an empty tree.
    """
    names = _param_names(table_id)
    validate = settings.FILTER_URL_STATE_VALIDATE if validate is None else validate
    mode = "advanced" if _first(params, names["mode"]) == "advanced" else "basic"

    tree = _first(params, names["filter"]) or _first(params, names["advanced"])
    if tree and tree != "null":
        try:
            root = parse_filter_group_json(tree, validate=validate, default_logic=default_logic)
        except (json.JSONDecodeError, jsonschema.ValidationError, KeyError, TypeError, AttributeError, ValueError) as e:
            log.warning("Ignoring malformed %s filter state: %s", table_id, e)
            root = _empty_root(default_logic)
        return FilterManagerState(root_group=root, mode=mode)

    basic = _first(params, names["basic"])
    if basic:
        try:
            items = json.loads(basic)
            conditions = [FilterState.from_dict(f).to_condition() for f in items or []]
        except (json.JSONDecodeError, TypeError, KeyError, AttributeError) as e:
            log.warning("Ignoring malformed %s basic filters: %s", table_id, e)
            conditions = []
        return FilterManagerState(
            root_group=FilterGroup(logic_operator=LogicOperator.AND, conditions=conditions),
            mode=mode,
        )

    return FilterManagerState(root_group=_empty_root(default_logic), mode=mode)


__all__ = [
    "encode_filter_state",
    "decode_filter_state",
    "to_query_string",
]
