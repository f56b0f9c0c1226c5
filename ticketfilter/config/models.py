from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ..filters import LogicOperator
from ..filtertypes import FilterTypeDefinition
from ..operators import OperatorDefinition


def _enum_value(v: Any) -> Any:
    return v.value if isinstance(v, Enum) else v


def _keyed_entries(v: Any) -> Any:
    """Accept either a list of definitions or a mapping of id -> definition."""
    if isinstance(v, dict):
        out = []
        for key, item in v.items():
            if isinstance(item, dict):
                out.append({"id": key, **item})
            else:
                out.append(item)
        return out
    return v


class FilterOption(BaseModel):
    """Option shown by select-like inputs."""

    model_config = ConfigDict(extra="allow", frozen=True)

    label: str
    value: Any


class FilterFieldConfig(BaseModel):
    """
    One filterable field: its filter type, options and per-field operator/default overrides.
    `available_operators`, when set, fully replaces the filter type's operator list.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="allow")

    id: str
    label: str = ""
    filter_type: str = Field(
        default="text",
        validation_alias=AliasChoices("filter_type", "filterType", "type"),
    )
    placeholder: Optional[str] = None
    options: Optional[List[FilterOption]] = None
    available_operators: Optional[List[str]] = Field(
        default=None,
        validation_alias=AliasChoices("available_operators", "availableOperators", "operators"),
    )
    default_operator: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("default_operator", "defaultOperator"),
    )
    default_value: Any = Field(
        default=None,
        validation_alias=AliasChoices("default_value", "defaultValue"),
    )
    context: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("filter_type", "default_operator", mode="before")
    @classmethod
    def _plain_ids(cls, v: Any) -> Any:
        return _enum_value(v)

    @field_validator("available_operators", mode="before")
    @classmethod
    def _plain_operator_ids(cls, v: Any) -> Any:
        if v is None:
            return v
        return [_enum_value(x) for x in v]

    @property
    def has_default_value(self) -> bool:
        # an explicit `default_value: None` still counts as a field-level default
        return "default_value" in self.model_fields_set


class FilterConfiguration(BaseModel):
    """
    Configuration handed to the engine by the surrounding application.
    `max_conditions` is advisory; the engine reports against it but never enforces it.
    """

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    filters: List[FilterFieldConfig] = Field(default_factory=list)
    default_logic_operator: LogicOperator = Field(
        default=LogicOperator.AND,
        validation_alias=AliasChoices("default_logic_operator", "defaultLogicOperator"),
    )
    max_conditions: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("max_conditions", "maxConditions"),
    )
    enable_advanced_filter: bool = Field(
        default=True,
        validation_alias=AliasChoices("enable_advanced_filter", "enableAdvancedFilter"),
    )
    default_mode: Literal["basic", "advanced"] = Field(
        default="basic",
        validation_alias=AliasChoices("default_mode", "defaultMode"),
    )
    operator_overrides: List[OperatorDefinition] = Field(
        default_factory=list,
        validation_alias=AliasChoices("operator_overrides", "operatorOverrides"),
    )
    filter_type_overrides: List[FilterTypeDefinition] = Field(
        default_factory=list,
        validation_alias=AliasChoices("filter_type_overrides", "filterTypeOverrides"),
    )
    context: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("default_logic_operator", mode="before")
    @classmethod
    def _upper_logic(cls, v: Any) -> Any:
        if isinstance(v, str) and not isinstance(v, LogicOperator):
            return v.strip().upper()
        return v

    @field_validator("operator_overrides", "filter_type_overrides", mode="before")
    @classmethod
    def _mapping_form(cls, v: Any) -> Any:
        return _keyed_entries(v)

    def get_field(self, field_id: str) -> Optional[FilterFieldConfig]:
        for f in self.filters:
            if f.id == field_id:
                return f
        return None

    def resolved_field(self, field_id: str) -> Optional[FilterFieldConfig]:
        """
        Field config whose context is the global context overlaid with the field's own.
        This is the config every evaluator receives.
        """
        f = self.get_field(field_id)
        if f is None:
            return None
        if not self.context:
            return f
        return f.model_copy(update={"context": {**self.context, **f.context}})

    @property
    def field_ids(self) -> List[str]:
        return [f.id for f in self.filters]


__all__ = [
    "FilterOption",
    "FilterFieldConfig",
    "FilterConfiguration",
]
