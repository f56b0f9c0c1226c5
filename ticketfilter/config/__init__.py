"""
Configuration module for the ticket filter engine.

This module provides the configuration models, file loading and the ticket-screen preset.
"""

from .models import (
    FilterOption,
    FilterFieldConfig,
    FilterConfiguration,
)
from .loader import (
    load_filter_configuration,
    parse_filter_configuration,
)
from .tickets import (
    TICKETS_FILTER_CONFIG,
    TICKET_OPERATORS,
    TICKET_FILTER_TYPES,
    tickets_filter_config,
)

__all__ = [
    "FilterOption",
    "FilterFieldConfig",
    "FilterConfiguration",
    "load_filter_configuration",
    "parse_filter_configuration",
    "TICKETS_FILTER_CONFIG",
    "TICKET_OPERATORS",
    "TICKET_FILTER_TYPES",
    "tickets_filter_config",
]
