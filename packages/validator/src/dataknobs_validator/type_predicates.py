"""Runtime type tests used by the predicate surface."""

from __future__ import annotations

import re
from collections.abc import Mapping, Set, Sized
from numbers import Real
from typing import Any

INTEGER_STRING_RE = re.compile(r"-?\d+")
FLOAT_STRING_RE = re.compile(r"-?\d+(?:\.\d+)?")

SCALAR_TYPES = (str, bytes, bool, int, float, complex, type(None))


def is_nil(value: Any) -> bool:
    return value is None


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_boolean(value: Any) -> bool:
    return isinstance(value, bool)


def is_number(value: Any) -> bool:
    """Real numbers, excluding ``bool``."""
    return isinstance(value, Real) and not isinstance(value, bool)


def is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def is_function(value: Any) -> bool:
    return callable(value)


def is_object(value: Any) -> bool:
    """Mappings and plain instances; not scalars, arrays or callables."""
    if isinstance(value, Mapping):
        return True
    if isinstance(value, SCALAR_TYPES) or isinstance(value, Real) or is_array(value):
        return False
    return not callable(value)


def is_integer_string(value: Any) -> bool:
    return isinstance(value, str) and INTEGER_STRING_RE.fullmatch(value) is not None


def is_float_string(value: Any) -> bool:
    return isinstance(value, str) and FLOAT_STRING_RE.fullmatch(value) is not None


def is_empty(value: Any) -> bool:
    """Collections are empty with no elements, plain objects with no attributes.

    None and every other scalar (numbers, booleans) count as empty.
    """
    if value is None:
        return True
    if isinstance(value, Sized):
        return len(value) == 0
    if hasattr(value, "__dict__") and not callable(value):
        return not vars(value)
    return True


def is_identical(value: Any, other: Any) -> bool:
    """Scalars compare by type and value, everything else by identity."""
    if value is other:
        return True
    if isinstance(value, SCALAR_TYPES) and isinstance(other, SCALAR_TYPES):
        return type(value) is type(other) and value == other
    return False


def is_equal(value: Any, other: Any) -> bool:
    """Deep, type-aware equality.

    Mappings, arrays and sets are compared element by element, scalars like
    ``is_identical`` (so ``1`` and ``True`` differ). Other objects use ``==``.
    """
    if value is other:
        return True
    if isinstance(value, SCALAR_TYPES) or isinstance(other, SCALAR_TYPES):
        return is_identical(value, other)
    if isinstance(value, Mapping) and isinstance(other, Mapping):
        if len(value) != len(other):
            return False
        return all(key in other and is_equal(item, other[key]) for key, item in value.items())
    if is_array(value) and is_array(other):
        if len(value) != len(other):
            return False
        return all(is_equal(a, b) for a, b in zip(value, other))
    if isinstance(value, Set) and isinstance(other, Set):
        if len(value) != len(other):
            return False
        return all(any(is_equal(a, b) for b in other) for a in value)
    if isinstance(value, (Mapping, Set)) or is_array(value) or isinstance(other, (Mapping, Set)) or is_array(other):
        return False
    return bool(value == other)
