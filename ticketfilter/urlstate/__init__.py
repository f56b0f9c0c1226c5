"""
URL query-string persistence for filter state.
"""

from .codec import (
    encode_filter_state,
    decode_filter_state,
    to_query_string,
)

__all__ = [
    "encode_filter_state",
    "decode_filter_state",
    "to_query_string",
]
