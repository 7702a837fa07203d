"""Value coercion and comparison helpers.

``NAN`` is the engine's not-a-number sentinel: numeric coercion produces it
for any input that does not parse as a number, and resolvers are expected to
reject it. Because ``float("nan") != float("nan")``, value comparisons inside
the engine go through :func:`deep_equal`, which treats two NaNs as equal.
"""

import math
import numbers
from decimal import Decimal
from typing import Any, Mapping

NAN = float("nan")


def is_nan(value: Any) -> bool:
    """Return True if value is the not-a-number sentinel (any float NaN)."""
    return isinstance(value, float) and math.isnan(value)


def to_number(raw: Any) -> Any:
    """Coerce raw field input to a number.

    Args:
        raw: Raw input, typically the text of an input widget

    Returns:
        An int, float or Decimal, or ``NAN`` when the input is not numeric

    Examples:
        >>> to_number("30")
        30
        >>> to_number(" 2.5 ")
        2.5
        >>> is_nan(to_number("abc"))
        True
        >>> to_number(True)
        1
    """
    if isinstance(raw, bool):
        return int(raw)
    if isinstance(raw, Decimal):
        return NAN if raw.is_nan() else raw
    if isinstance(raw, numbers.Real):
        return raw
    if not isinstance(raw, str):
        return NAN

    text = raw.strip()
    # int() and float() accept digit separators; form input does not
    if not text or "_" in text:
        return NAN
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return NAN


def deep_equal(left: Any, right: Any) -> bool:
    """Structural equality over nested mappings and sequences.

    Behaves like ``==`` except that NaN compares equal to NaN at any depth
    and a bool never equals a number (``False`` is not ``0``).

    Examples:
        >>> deep_equal({"age": NAN}, {"age": float("nan")})
        True
        >>> deep_equal({"tags": ["a"]}, {"tags": ["b"]})
        False
    """
    if is_nan(left) and is_nan(right):
        return True
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        if set(left.keys()) != set(right.keys()):
            return False
        return all(deep_equal(left[key], right[key]) for key in left)
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        if isinstance(left, list) != isinstance(right, list) or len(left) != len(right):
            return False
        return all(deep_equal(a, b) for a, b in zip(left, right))
    return left == right


__all__ = [
    "NAN",
    "is_nan",
    "to_number",
    "deep_equal",
]
