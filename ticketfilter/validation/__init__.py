"""
Validation module for the ticket filter engine.

This module provides eager checks of filter configurations and filter trees.
"""

from .rules import (
    _assert_configuration_valid,
    _assert_group_allowed,
    _assert_unique_ids,
    _exceeds_max_conditions,
)

__all__ = [
    "_assert_configuration_valid",
    "_assert_group_allowed",
    "_assert_unique_ids",
    "_exceeds_max_conditions",
]
