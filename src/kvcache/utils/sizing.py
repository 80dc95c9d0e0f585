"""Byte sizing helpers.

Sizes are always measured in UTF-8 bytes, which is what a string occupies
once a backend persists it.
"""

from __future__ import annotations


def byte_length(text: str) -> int:
    """Return the number of bytes in the UTF-8 encoding of text.

    Args:
        text: The string to measure.

    Returns:
        Encoded length in bytes.
    """
    return len(text.encode("utf-8"))


def digit_count(value: int) -> int:
    """Number of characters in the decimal rendering of a non-negative int."""
    return len(str(value))
