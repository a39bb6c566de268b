"""Loose value comparison for filtering and sorting.

Table records hold plain JSON values, and WHERE/ORDER BY compare them with
coercing ("loose") semantics rather than Python's strict ones:

    "5" == 5          -> True   (numeric string vs number)
    "10" > "9"        -> True   (two numeric strings compare as numbers)
    "abc" == 0        -> False  (non-numeric string vs number compares text)
    None == ""        -> True   (null vs string: null becomes "")
    None == 0         -> True   (null vs anything else: both become bools)
    [1, 2] > 99       -> True   (an array is greater than any scalar)

All coercion lives in this module so the rules stay in one place.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Any

# Optional surrounding whitespace, sign, digits with optional fraction, exponent.
_NUMERIC_RE = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*$")
_INTEGER_RE = re.compile(r"^\s*[+-]?\d+\s*$")


def is_array(value: Any) -> bool:
    """Return True for JSON arrays and objects (lists and dicts)."""
    return isinstance(value, (list, dict))


def is_number(value: Any) -> bool:
    """Return True for ints and floats, excluding bools."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_numeric(value: Any) -> bool:
    """Return True for numbers and numeric strings such as " 12", "-3.5", "1e3"."""
    if is_number(value):
        return True
    return isinstance(value, str) and _NUMERIC_RE.match(value) is not None


def to_number(value: Any) -> int | float:
    """Convert a number or numeric string to an int or float."""
    if is_number(value):
        return value
    if not isinstance(value, str) or not is_numeric(value):
        raise ValueError(f"Not a numeric value: {value!r}")
    if _INTEGER_RE.match(value):
        return int(value.strip())
    return float(value.strip())


def to_bool(value: Any) -> bool:
    """Truthiness under loose rules: "", "0", 0, 0.0, null and empty arrays are false."""
    if value is None:
        return False
    if isinstance(value, str):
        return value not in ("", "0")
    if is_array(value):
        return len(value) > 0
    return bool(value)


def _float_text(value: float) -> str:
    if math.isnan(value):
        return "NAN"
    if math.isinf(value):
        return "INF" if value > 0 else "-INF"
    if value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    text = repr(value)
    if "e" not in text and 1e-4 <= abs(value) < 1e15:
        return text
    mantissa, _, exponent = format(Decimal(text).normalize(), "E").partition("E")
    if "." not in mantissa:
        mantissa += ".0"
    return f"{mantissa}E{int(exponent):+d}"


def to_text(value: Any) -> str:
    """String form of a value, as used by LIKE and text comparisons.

    null -> "", true -> "1", false -> "", 2.0 -> "2", arrays -> "Array".
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else ""
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _float_text(value)
    if is_array(value):
        return "Array"
    return str(value)


def _sign(delta: Any) -> int:
    return (delta > 0) - (delta < 0)


def _compare_numbers(a: int | float, b: int | float) -> int | None:
    if (isinstance(a, float) and math.isnan(a)) or (isinstance(b, float) and math.isnan(b)):
        return None
    if a == b:
        return 0
    return -1 if a < b else 1


def _compare_strings(a: str, b: str) -> int | None:
    if is_numeric(a) and is_numeric(b):
        return _compare_numbers(to_number(a), to_number(b))
    if a == b:
        return 0
    return -1 if a < b else 1


def _array_items(value: list[Any] | dict[str, Any]) -> dict[Any, Any]:
    if isinstance(value, list):
        return dict(enumerate(value))
    items: dict[Any, Any] = {}
    for key, item in value.items():
        # Decimal-integer object keys address the same slot as list indexes
        if isinstance(key, str) and re.fullmatch(r"-?(?:0|[1-9]\d*)", key):
            items[int(key)] = item
        else:
            items[key] = item
    return items


def _compare_arrays(a: list[Any] | dict[str, Any], b: list[Any] | dict[str, Any]) -> int | None:
    if len(a) != len(b):
        return -1 if len(a) < len(b) else 1
    left = _array_items(a)
    right = _array_items(b)
    for key, item in left.items():
        if key not in right:
            return None
        result = loose_compare(item, right[key])
        if result != 0:
            return result
    return 0


def loose_compare(a: Any, b: Any) -> int | None:
    """Three-way loose comparison.

    Returns -1, 0 or 1, or None when the values cannot be ordered (NaN, or
    arrays whose keys do not line up).
    """
    if a is None and b is None:
        return 0
    if a is None and isinstance(b, str):
        return _compare_strings("", b)
    if b is None and isinstance(a, str):
        return _compare_strings(a, "")
    if a is None or b is None or isinstance(a, bool) or isinstance(b, bool):
        return _sign(int(to_bool(a)) - int(to_bool(b)))

    a_array, b_array = is_array(a), is_array(b)
    if a_array and b_array:
        return _compare_arrays(a, b)
    if a_array:
        return 1
    if b_array:
        return -1

    if is_number(a) and is_number(b):
        return _compare_numbers(a, b)
    if isinstance(a, str) and isinstance(b, str):
        return _compare_strings(a, b)

    # One number, one string
    text, number, flipped = (a, b, False) if isinstance(a, str) else (b, a, True)
    if is_numeric(text):
        result = _compare_numbers(to_number(text), number)
    else:
        result = _compare_strings(text, to_text(number))
    if result is None:
        return None
    return -result if flipped else result


def loose_equals(a: Any, b: Any) -> bool:
    """Loose equality: ``loose_compare(a, b) == 0``."""
    return loose_compare(a, b) == 0


def spaceship(a: Any, b: Any) -> int:
    """Three-way comparison for sorting; unorderable pairs count as greater."""
    result = loose_compare(a, b)
    return 1 if result is None else result
