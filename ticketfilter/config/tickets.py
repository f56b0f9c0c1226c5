"""
Filter configuration for the ticket list screens.

Adds "me"-relative operators that read the current user from the evaluator context,
plus user/watchers/priority filter types, on top of the built-in defaults.
"""

from datetime import datetime, timezone
from typing import Any

from ..filters import ALL_VALUE, LogicOperator
from ..filtertypes import FilterType, FilterTypeDefinition
from ..operators import Operator, OperatorDefinition
from .models import FilterConfiguration, FilterFieldConfig, FilterOption

RECENT_DAYS = 7


def _current_user(config: Any):
    context = getattr(config, "context", None) or {}
    return context.get("currentUserId")


def _is_current_user(target: Any, _value: Any, config: Any = None) -> bool:
    user_id = _current_user(config)
    if not user_id:
        return False
    return target == user_id


def _watched_by_me(target: Any, _value: Any, config: Any = None) -> bool:
    user_id = _current_user(config)
    if not user_id or not isinstance(target, (list, tuple)):
        return False
    return user_id in target


def _updated_recently(target: Any, _value: Any, config: Any = None) -> bool:
    if not target:
        return False
    if isinstance(target, datetime):
        updated = target
    else:
        try:
            updated = datetime.fromisoformat(str(target).replace("Z", "+00:00"))
        except ValueError:
            return False
    if updated.tzinfo is None:
        updated = updated.replace(tzinfo=timezone.utc)

    context = getattr(config, "context", None) or {}
    now = context.get("now") or datetime.now(timezone.utc)
    return (now - updated).total_seconds() / 86400 <= RECENT_DAYS


TICKET_OPERATORS = [
    OperatorDefinition("assignedToMe", "Assigned to me", _is_current_user),
    OperatorDefinition("reportedByMe", "Reported by me", _is_current_user),
    OperatorDefinition("watchedByMe", "Watched by me", _watched_by_me),
    OperatorDefinition("updatedRecently", "Updated recently", _updated_recently),
]

TICKET_FILTER_TYPES = [
    FilterTypeDefinition(
        id="user",
        label="User",
        operators=[Operator.EQUALS.value, Operator.IS_EMPTY.value, "assignedToMe", "reportedByMe"],
        default_operator=Operator.EQUALS.value,
        default_value=ALL_VALUE,
    ),
    FilterTypeDefinition(
        id="watchers",
        label="Watchers",
        operators=["watchedByMe", Operator.IS_EMPTY.value, Operator.IS_NOT_EMPTY.value],
        default_operator="watchedByMe",
        default_value=None,
    ),
    FilterTypeDefinition(
        id="priority",
        label="Priority",
        operators=[Operator.EQUALS.value, Operator.NOT_EQUALS.value, Operator.IS_EMPTY.value],
        default_operator=Operator.EQUALS.value,
        default_value=ALL_VALUE,
    ),
]

STATUS_OPTIONS = [
    FilterOption(value="open", label="Open"),
    FilterOption(value="in_progress", label="In Progress"),
    FilterOption(value="review", label="In Review"),
    FilterOption(value="qa", label="QA Testing"),
    FilterOption(value="done", label="Done"),
    FilterOption(value="closed", label="Closed"),
]

PRIORITY_OPTIONS = [
    FilterOption(value="highest", label="Highest"),
    FilterOption(value="high", label="High"),
    FilterOption(value="medium", label="Medium"),
    FilterOption(value="low", label="Low"),
    FilterOption(value="lowest", label="Lowest"),
]

TYPE_OPTIONS = [
    FilterOption(value="bug", label="Bug"),
    FilterOption(value="feature", label="Feature"),
    FilterOption(value="task", label="Task"),
    FilterOption(value="story", label="Story"),
    FilterOption(value="epic", label="Epic"),
]

TICKETS_FILTER_CONFIG = FilterConfiguration(
    filters=[
        FilterFieldConfig(id="title", label="Title", filter_type=FilterType.TEXT.value,
                          placeholder="Search by title..."),
        FilterFieldConfig(id="status", label="Status", filter_type=FilterType.MULTI_SELECT.value,
                          options=STATUS_OPTIONS),
        FilterFieldConfig(id="priority", label="Priority", filter_type="priority",
                          options=PRIORITY_OPTIONS),
        FilterFieldConfig(id="type", label="Type", filter_type=FilterType.SELECT.value,
                          options=TYPE_OPTIONS),
        FilterFieldConfig(id="assignee", label="Assignee", filter_type="user"),
        FilterFieldConfig(id="reporter", label="Reporter", filter_type="user"),
        FilterFieldConfig(id="watchers", label="Watchers", filter_type="watchers"),
        FilterFieldConfig(id="story_points", label="Story points", filter_type=FilterType.NUMBER.value),
        FilterFieldConfig(id="date_created", label="Created", filter_type=FilterType.DATE.value),
        FilterFieldConfig(
            id="date_updated",
            label="Updated",
            filter_type=FilterType.DATE.value,
            available_operators=[Operator.EQUALS.value, Operator.BETWEEN.value, "updatedRecently"],
        ),
    ],
    default_logic_operator=LogicOperator.AND,
    max_conditions=10,
    enable_advanced_filter=True,
    default_mode="basic",
    operator_overrides=TICKET_OPERATORS,
    filter_type_overrides=TICKET_FILTER_TYPES,
)


def tickets_filter_config(current_user_id: str, **context: Any) -> FilterConfiguration:
    """Ticket configuration bound to the signed-in user."""
    return TICKETS_FILTER_CONFIG.model_copy(
        update={"context": {**TICKETS_FILTER_CONFIG.context, "currentUserId": current_user_id, **context}}
    )
