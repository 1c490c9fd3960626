"""Common field validators.

Every factory takes the message to report and returns a validator. Except for
``required``, validators ignore ``None`` and empty values so they can be
combined with ``required`` when a value is mandatory.

Examples:
    >>> from formstate.field import FormField
    >>> age = FormField(-1, validators=[required("Required"), min_value(0, "Too small")])
    >>> age.error
    'Too small'
"""

import re
from datetime import date, datetime
from typing import Any, Pattern, Union

from dateutil.parser import isoparse

from formstate.types import Validator
from formstate.utils import is_null_or_empty

EMAIL_RE = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9-]+(?:\.[a-zA-Z0-9-]+)*$"
)

DateLike = Union[date, datetime, str]


def required(msg: str) -> Validator:
    """Create a `required` validator.

    ``None``, an empty string and an empty collection are errors.
    """
    return lambda field: msg if is_null_or_empty(field.value) else None


def min_value(limit: Any, msg: str) -> Validator:
    """Create a `min` validator.

    A value is considered valid if it's ``None`` or >= ``limit``.
    """
    def validate(field):
        value = field.value
        return None if value is None or value >= limit else msg
    return validate


def max_value(limit: Any, msg: str) -> Validator:
    """Create a `max` validator.

    A value is considered valid if it's ``None`` or <= ``limit``.
    """
    def validate(field):
        value = field.value
        return None if value is None or value <= limit else msg
    return validate


def min_length(length: int, msg: str) -> Validator:
    """Create a `min_length` validator. ``None`` or empty value is ignored."""
    def validate(field):
        value = field.value
        return None if is_null_or_empty(value) or len(value) >= length else msg
    return validate


def max_length(length: int, msg: str) -> Validator:
    """Create a `max_length` validator. ``None`` or empty value is ignored."""
    def validate(field):
        value = field.value
        return None if is_null_or_empty(value) or len(value) <= length else msg
    return validate


def email(msg: str) -> Validator:
    """Create an `email` validator. ``None`` or empty value is ignored."""
    def validate(field):
        value = field.value
        return None if is_null_or_empty(value) or EMAIL_RE.match(value) else msg
    return validate


def pattern(regex: Union[str, Pattern[str]], msg: str) -> Validator:
    """Create a validator requiring the whole value to match ``regex``.

    ``None`` or empty value is ignored.
    """
    compiled = re.compile(regex) if isinstance(regex, str) else regex

    def validate(field):
        value = field.value
        return None if is_null_or_empty(value) or compiled.fullmatch(value) else msg
    return validate


def max_size(size: int, msg: str) -> Validator:
    """Create a `max_size` validator for binary content.

    Only ``bytes``/``bytearray``/``memoryview`` values are checked, anything
    else is ignored.
    """
    def validate(field):
        value = field.value
        if isinstance(value, (bytes, bytearray, memoryview)) and len(value) > size:
            return msg
        return None
    return validate


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, str):
        return isoparse(value)
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def _compare_dates(value: DateLike, limit: DateLike) -> int:
    left, right = _as_datetime(value), _as_datetime(limit)
    # Mixing aware and naive datetimes compares their wall-clock times.
    if (left.tzinfo is None) != (right.tzinfo is None):
        left, right = left.replace(tzinfo=None), right.replace(tzinfo=None)
    return (left > right) - (left < right)


def min_date(limit: DateLike, msg: str) -> Validator:
    """Create a validator requiring a date on or after ``limit``.

    Values and limits may be dates, datetimes or ISO-8601 strings.
    ``None`` or empty value is ignored.
    """
    def validate(field):
        value = field.value
        if is_null_or_empty(value):
            return None
        return msg if _compare_dates(value, limit) < 0 else None
    return validate


def max_date(limit: DateLike, msg: str) -> Validator:
    """Create a validator requiring a date on or before ``limit``.

    Values and limits may be dates, datetimes or ISO-8601 strings.
    ``None`` or empty value is ignored.
    """
    def validate(field):
        value = field.value
        if is_null_or_empty(value):
            return None
        return msg if _compare_dates(value, limit) > 0 else None
    return validate


__all__ = [
    "required",
    "min_value",
    "max_value",
    "min_length",
    "max_length",
    "email",
    "pattern",
    "max_size",
    "min_date",
    "max_date",
]
