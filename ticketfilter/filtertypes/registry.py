from __future__ import annotations
from copy import deepcopy
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union
import logging

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..filters import ALL_VALUE
from ..operators import Operator

log = logging.getLogger("filters.types")


class FilterType(str, Enum):
    TEXT = "text"
    SELECT = "select"
    MULTI_SELECT = "multi-select"
    DATE = "date"
    NUMBER = "number"
    BOOLEAN = "boolean"
    CUSTOM = "custom"


def filter_type_id(kind: Union[str, FilterType]) -> str:
    return kind.value if isinstance(kind, Enum) else str(kind)


class FilterTypeDefinition(BaseModel):
    """
    An abstract field kind: which operators apply to it, in display order, and its defaults.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    label: str = ""
    operators: List[str] = Field(default_factory=list)
    default_operator: str = Field(alias="defaultOperator")
    default_value: Any = Field(default=None, alias="defaultValue")

    @model_validator(mode="after")
    def _default_operator_is_listed(self) -> "FilterTypeDefinition":
        if self.default_operator not in self.operators:
            raise ValueError(
                f"Filter type {self.id}: default operator {self.default_operator!r} "
                f"is not one of {self.operators}"
            )
        return self


def _define(kind: FilterType, label: str, ops: List[Operator], default_op: Operator, default_value: Any):
    return FilterTypeDefinition(
        id=kind.value,
        label=label,
        operators=[o.value for o in ops],
        default_operator=default_op.value,
        default_value=default_value,
    )


DEFAULT_FILTER_TYPES: Dict[str, FilterTypeDefinition] = {
    d.id: d
    for d in (
        _define(
            FilterType.TEXT, "Text",
            [Operator.CONTAINS, Operator.EQUALS, Operator.NOT_EQUALS, Operator.STARTS_WITH,
             Operator.ENDS_WITH, Operator.IS_EMPTY, Operator.IS_NOT_EMPTY],
            Operator.CONTAINS, "",
        ),
        _define(
            FilterType.SELECT, "Select",
            [Operator.EQUALS, Operator.NOT_EQUALS, Operator.IS_EMPTY],
            Operator.EQUALS, ALL_VALUE,
        ),
        _define(
            FilterType.MULTI_SELECT, "Multi-select",
            [Operator.IN, Operator.NOT_IN, Operator.IS_EMPTY],
            Operator.IN, [],
        ),
        _define(
            FilterType.DATE, "Date",
            [Operator.EQUALS, Operator.NOT_EQUALS, Operator.GREATER_THAN, Operator.LESS_THAN,
             Operator.BETWEEN, Operator.IS_EMPTY],
            Operator.EQUALS, None,
        ),
        _define(
            FilterType.NUMBER, "Number",
            [Operator.EQUALS, Operator.NOT_EQUALS, Operator.GREATER_THAN, Operator.LESS_THAN,
             Operator.GREATER_OR_EQUAL, Operator.LESS_OR_EQUAL, Operator.BETWEEN, Operator.IS_EMPTY],
            Operator.EQUALS, None,
        ),
        _define(FilterType.BOOLEAN, "Boolean", [Operator.EQUALS], Operator.EQUALS, None),
        _define(FilterType.CUSTOM, "Custom", [Operator.CUSTOM], Operator.CUSTOM, None),
    )
}


class FilterTypeRegistry:
    """
    Filter types keyed by id; custom definitions are merged over the defaults, later ones win.
    """

    def __init__(
        self,
        definitions: Optional[Iterable[Union[FilterTypeDefinition, Dict[str, Any]]]] = None,
        *,
        include_defaults: bool = True,
    ):
        self._types: Dict[str, FilterTypeDefinition] = (
            dict(DEFAULT_FILTER_TYPES) if include_defaults else {}
        )
        for d in definitions or []:
            self.add(d)

    def add(self, definition: Union[FilterTypeDefinition, Dict[str, Any]]) -> FilterTypeDefinition:
        if not isinstance(definition, FilterTypeDefinition):
            definition = FilterTypeDefinition.model_validate(definition)
        if definition.id in self._types:
            log.debug("Overriding filter type %s", definition.id)
        self._types[definition.id] = definition
        return definition

    def get(self, kind: Union[str, FilterType]) -> Optional[FilterTypeDefinition]:
        return self._types.get(filter_type_id(kind))

    def definitions(self) -> Dict[str, FilterTypeDefinition]:
        return dict(self._types)

    def operators_for(self, kind: Union[str, FilterType]) -> List[str]:
        d = self.get(kind)
        return list(d.operators) if d else []

    def default_operator(self, kind: Union[str, FilterType]) -> Optional[str]:
        d = self.get(kind)
        return d.default_operator if d else None

    def default_value(self, kind: Union[str, FilterType]) -> Any:
        # copied so callers can't mutate a shared default list
        d = self.get(kind)
        return deepcopy(d.default_value) if d else None

    def __contains__(self, kind: object) -> bool:
        return isinstance(kind, (str, FilterType)) and filter_type_id(kind) in self._types

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)


__all__ = [
    "FilterType",
    "FilterTypeDefinition",
    "FilterTypeRegistry",
    "DEFAULT_FILTER_TYPES",
    "filter_type_id",
]
