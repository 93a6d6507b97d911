"""Small helpers for working with sequences of strings."""

from collections.abc import Iterable


def string_contains(array: Iterable[str], needle: str) -> bool:
    """Return True if ``needle`` is one of the items of ``array``."""
    return any(value == needle for value in array)