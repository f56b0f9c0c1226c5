"""
Operator registry for the ticket filter engine.

This module provides the built-in operator evaluators and the registry used to extend or override them.
"""

from .registry import (
    Operator,
    OperatorEvaluator,
    OperatorDefinition,
    OperatorRegistry,
    DEFAULT_OPERATOR_DEFINITIONS,
    EMPTINESS_OPERATORS,
    operator_id,
)

__all__ = [
    "Operator",
    "OperatorEvaluator",
    "OperatorDefinition",
    "OperatorRegistry",
    "DEFAULT_OPERATOR_DEFINITIONS",
    "EMPTINESS_OPERATORS",
    "operator_id",
]
