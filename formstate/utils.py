"""Value helpers shared by the field classes and validators."""

import math
from typing import Any, List, Optional, Sequence, TypeVar, Union

T = TypeVar("T")


def _is_number(x: Any) -> bool:
    return isinstance(x, (int, float)) and not isinstance(x, bool)


def deep_equal(a: Any, b: Any) -> bool:
    """Check if ``a`` and ``b`` are structurally equal.

    Containers are compared recursively and must be of the same type, so
    ``[1]`` and ``(1,)`` differ. Ints and floats compare numerically, but
    booleans never equal numbers. ``NaN`` equals ``NaN``.

    Examples:
        >>> deep_equal({"a": [1, 2]}, {"a": [1, 2]})
        True
        >>> deep_equal(1, True)
        False
        >>> deep_equal(float("nan"), float("nan"))
        True
    """
    if a is b:
        return True

    if _is_number(a) and _is_number(b):
        if isinstance(a, float) and isinstance(b, float) and math.isnan(a) and math.isnan(b):
            return True
        return a == b

    if type(a) is not type(b):
        return False

    if isinstance(a, (list, tuple)):
        if len(a) != len(b):
            return False
        return all(deep_equal(x, y) for x, y in zip(a, b))

    if isinstance(a, dict):
        if len(a) != len(b):
            return False
        for key, value in a.items():
            if key not in b or not deep_equal(value, b[key]):
                return False
        return True

    return bool(a == b)


def is_null_or_empty(x: Any) -> bool:
    """Check if ``x`` is ``None`` or an empty string/collection."""
    if x is None:
        return True
    try:
        return len(x) == 0
    except TypeError:
        return False


def make_list(x: Union[Sequence[T], T, None]) -> List[T]:
    """Normalize a single item, a sequence of items, or ``None`` into a list."""
    if x is None:
        return []
    if isinstance(x, (list, tuple)):
        return list(x)
    return [x]  # type: ignore[list-item]


def debug_name(class_name: str, name: Optional[str]) -> str:
    return f"{class_name}[name={name}]" if name else class_name


__all__ = [
    "deep_equal",
    "is_null_or_empty",
    "make_list",
    "debug_name",
]
