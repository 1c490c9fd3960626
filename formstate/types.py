"""Core type definitions for the formstate engine.

This module defines the fundamental types used throughout formstate:
- UNSET: Sentinel standing for "no value has been set yet"
- StatusKind: The status flags that are OR-aggregated up a field tree
- EventType: Notification types raised by fields for the UI binding layer
- ValidationError, Validator, ValueFormatter, ValueParser: Callable contracts

These types form the contract between the UI binding layer and the engine.
"""

from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, Union

from typing_extensions import Final, TypeAlias

if TYPE_CHECKING:
    from formstate.field import FormField


class _Unset:
    """Type of the UNSET sentinel.

    ``None`` is an ordinary field value, so a separate marker is needed for
    "missing" slots and fields that were never given a value.
    """

    _instance: Optional["_Unset"] = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "_Unset":
        return self

    def __deepcopy__(self, memo: Any) -> "_Unset":
        return self

    def __reduce__(self) -> str:
        return "UNSET"


UNSET: Final = _Unset()


class StatusKind(str, Enum):
    """Status flags aggregated from child fields into their group.

    The value of each member is the name of the matching field attribute.
    """
    TOUCHED = "touched"
    INVALID = "invalid"
    VALIDATING = "validating"


class EventType(str, Enum):
    """Notification types raised by a field.

    Events carry no payload beyond their source; listeners read the
    field's current properties.
    """
    VALUE_CHANGED = "value.changed"
    TOUCHED_CHANGED = "touched.changed"
    STATUS_CHANGED = "status.changed"
    SUBMITTING_CHANGED = "submitting.changed"


ValidationError: TypeAlias = Union[str, None, bool]
"""Result of a single validator: a message, or a falsy value for "valid"."""

Validator: TypeAlias = Callable[
    ["FormField"], Union[ValidationError, Awaitable[ValidationError]]
]
"""A validator receives the field and returns an error or an awaitable of one."""

ValueFormatter: TypeAlias = Callable[[Any, "FormField"], str]
ValueParser: TypeAlias = Callable[[str, "FormField"], Any]
Updater: TypeAlias = Callable[[Any], Any]


__all__ = [
    "UNSET",
    "StatusKind",
    "EventType",
    "ValidationError",
    "Validator",
    "ValueFormatter",
    "ValueParser",
    "Updater",
]
