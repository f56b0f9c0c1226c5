from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union
import json
import uuid

import jsonschema

# ---------------------------------------------------------------------------
# Sentinels / enums
# ---------------------------------------------------------------------------

ALL_VALUE = "__all__"


class LogicOperator(str, Enum):
    AND = "AND"
    OR = "OR"


def _new_id() -> str:
    return uuid.uuid4().hex


def _coerce_logic(raw: Any, default: LogicOperator = LogicOperator.AND) -> LogicOperator:
    if isinstance(raw, LogicOperator):
        return raw
    if isinstance(raw, str) and raw.strip():
        return LogicOperator(raw.strip().upper())
    return default


def is_empty_value(value: Any) -> bool:
    """
    True for None, blank strings and zero-length lists/tuples.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


# ---------------------------------------------------------------------------
# Core tree models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FilterCondition:
    """
    One leaf rule: a field, an operator, a value and an active flag.
    """
    id: str
    field: str
    operator: str
    value: Any = None
    active: bool = True

    # camelCase JSON helpers
    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "field": self.field,
            "operator": self.operator,
            "value": self.value,
            "active": self.active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterCondition":
        return cls(
            id=str(data.get("id") or data["field"]),
            field=data["field"],
            operator=str(data.get("operator", "equals")),
            value=data.get("value"),
            active=data.get("active") is not False,
        )


@dataclass(frozen=True)
class FilterGroup:
    """
    Boolean AND/OR combination of conditions and nested subgroups.
    Nodes are never mutated in place; edits build new groups along the path to the root.
    """
    id: str = field(default_factory=_new_id)
    logic_operator: LogicOperator = LogicOperator.AND
    conditions: List[FilterCondition] = field(default_factory=list)
    groups: List["FilterGroup"] = field(default_factory=list)
    active: bool = True

    # camelCase JSON helpers
    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "logicOperator": self.logic_operator.value,
            "conditions": [c.to_dict() for c in self.conditions],
            "groups": [g.to_dict() for g in self.groups],
            "active": self.active,
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        *,
        default_logic: LogicOperator = LogicOperator.AND,
    ) -> "FilterGroup":
        return cls(
            id=str(data.get("id") or _new_id()),
            logic_operator=_coerce_logic(data.get("logicOperator"), default_logic),
            conditions=[FilterCondition.from_dict(c) for c in data.get("conditions") or []],
            groups=[
                cls.from_dict(g, default_logic=default_logic)
                for g in data.get("groups") or []
            ],
            active=data.get("active") is not False,
        )

    def iter_conditions(self):
        """Depth-first walk over every condition below this group."""
        for c in self.conditions:
            yield c
        for g in self.groups:
            yield from g.iter_conditions()


@dataclass(frozen=True)
class FilterState:
    """
    One entry of a flat ("basic") filter list. `id` is the field id.
    """
    id: str
    operator: str
    value: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "operator": self.operator, "value": self.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterState":
        return cls(
            id=str(data["id"]),
            operator=str(data.get("operator", "equals")),
            value=data.get("value"),
        )

    def to_condition(self) -> FilterCondition:
        return FilterCondition(id=self.id, field=self.id, operator=self.operator, value=self.value)


# ---------------------------------------------------------------------------
# JSON Schema for persisted/transported trees
# ---------------------------------------------------------------------------

FILTER_GROUP_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": "https://example.com/filter-group.schema.json",
    "title": "Filter Group",
    "$defs": {
        "FilterCondition": {
            "type": "object",
            "properties": {
                "id": {"type": "string"},
                "field": {"type": "string", "minLength": 1},
                # operators are an open set, registered at runtime
                "operator": {"type": "string", "minLength": 1},
                "value": {},
                "active": {"type": "boolean"},
            },
            "required": ["field", "operator"],
        },
        "FilterGroup": {
            "type": "object",
            "properties": {
                "id": {"type": "string"},
                "logicOperator": {"type": "string", "enum": ["AND", "OR", "and", "or"]},
                "conditions": {"type": "array", "items": {"$ref": "#/$defs/FilterCondition"}},
                "groups": {"type": "array", "items": {"$ref": "#/$defs/FilterGroup"}},
                "active": {"type": "boolean"},
            },
        },
    },
    "type": "object",
    "$ref": "#/$defs/FilterGroup",
}


def parse_filter_group_json(
    payload: Union[str, Dict[str, Any]],
    *,
    validate: bool = True,
    default_logic: LogicOperator = LogicOperator.AND,
) -> FilterGroup:
    """
    Accept a JSON string or dict and return a FilterGroup.
    Raises jsonschema.ValidationError when `validate` is set and the payload is malformed.
    """
    data = json.loads(payload) if isinstance(payload, str) else payload
    if validate:
        jsonschema.validate(instance=data, schema=FILTER_GROUP_SCHEMA)
    return FilterGroup.from_dict(data, default_logic=default_logic)


def dump_filter_group_json(group: FilterGroup, *, indent: Optional[int] = None) -> str:
    return json.dumps(group.to_dict(), indent=indent, default=str)


# ---------------------------------------------------------------------------
# Public exports
# ---------------------------------------------------------------------------

__all__ = [
    "ALL_VALUE",
    "LogicOperator",
    "FilterCondition",
    "FilterGroup",
    "FilterState",
    "FILTER_GROUP_SCHEMA",
    "is_empty_value",
    "parse_filter_group_json",
    "dump_filter_group_json",
]
