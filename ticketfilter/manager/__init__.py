"""
Filter manager for the ticket filter engine.

This module owns one filter tree and exposes its structural edits, basic-mode view and row evaluation.
"""

from .filter_manager import (
    FilterManager,
    FilterManagerState,
    MODES,
)

__all__ = [
    "FilterManager",
    "FilterManagerState",
    "MODES",
]
