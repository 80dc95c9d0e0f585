"""Utility modules for kvcache."""

from kvcache.utils.sizing import byte_length, digit_count

__all__ = [
    "byte_length",
    "digit_count",
]
