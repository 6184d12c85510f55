"""
Field comparison between expected and extracted invoice records.
"""

from collections.abc import Mapping
from typing import Any

from .schemas import Difference

_MISSING = object()


def values_match(expected: Any, actual: Any) -> bool:
    """
    Strict, type-sensitive equality for top-level field values.

    Booleans only match booleans, ints and floats compare as JSON numbers,
    other scalars must share a type. Nested dicts and lists are not compared
    structurally: they match only when both sides are the same object.
    """
    if actual is _MISSING:
        return False
    if isinstance(expected, bool) or isinstance(actual, bool):
        return type(expected) is type(actual) and expected == actual
    if isinstance(expected, (int, float)) and isinstance(actual, (int, float)):
        return expected == actual
    if isinstance(expected, (dict, list)) or isinstance(actual, (dict, list)):
        return expected is actual
    return type(expected) is type(actual) and expected == actual


def compare_fields(expected: Mapping, actual: Any) -> list[Difference]:
    """
    Compare an extracted record against the expected one.

    Only keys present in ``expected`` are checked; extra fields returned by
    the API are ignored. Differences follow the key order of ``expected``.

    Args:
        expected: Expected field values for one invoice
        actual: Record returned by the API; anything that is not a mapping
            is treated as having no fields

    Returns:
        List of Difference entries, empty when every expected field matches
    """
    if not isinstance(actual, Mapping):
        actual = {}

    differences: list[Difference] = []
    for field, expected_value in expected.items():
        actual_value = actual.get(field, _MISSING)
        if not values_match(expected_value, actual_value):
            differences.append(
                Difference(
                    field=str(field),
                    expected=expected_value,
                    actual=None if actual_value is _MISSING else actual_value,
                )
            )
    return differences
