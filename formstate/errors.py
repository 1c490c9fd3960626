"""Error types and structured error records for formstate.

Two disjoint kinds of failure exist in the engine:

- Validation outcomes are data. A field's ``error`` is a message string or
  ``None`` and is never raised. ``FieldError`` packages such a message together
  with the field's full dotted path so a whole tree can be reported at once.
- Contract violations are programmer errors. They derive from
  ``FormStateError`` and are raised synchronously from the offending call.
"""

from dataclasses import dataclass
from typing import Any, Dict


class FormStateError(Exception):
    """Base class for contract violations raised by the engine."""


class UndefinedValueError(FormStateError, ValueError):
    """Raised when a field's value is set to UNSET.

    Attributes:
        field_name: Debug name of the offending field
    """

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(
            f"{field_name}: value cannot be set to UNSET. "
            f"In a form context, you may want to specify a default value "
            f"via the field() binding."
        )


class UninitializedValueError(FormStateError):
    """Raised when reading a field's value before any value was set."""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"{field_name}: value has not been initialized.")


class MissingParserError(FormStateError):
    """Raised when parsing a string value on a field without a value parser."""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"{field_name}: missing value_parser.")


class NoEventLoopError(FormStateError, RuntimeError):
    """Raised when asynchronous validators run outside an asyncio event loop."""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(
            f"{field_name}: asynchronous validators require a running event loop."
        )


@dataclass(frozen=True)
class FieldError:
    """Validation error of a single field in a tree.

    Attributes:
        path: Dot-notation path from the reporting group (e.g. "items.0.qty")
        message: The field's error message

    Examples:
        >>> err = FieldError(path="contact.email", message="Invalid email")
        >>> err.to_dict()
        {'path': 'contact.email', 'message': 'Invalid email'}
    """
    path: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {"path": self.path, "message": self.message}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldError":
        """Create FieldError from dict."""
        return cls(path=data["path"], message=data["message"])


__all__ = [
    "FormStateError",
    "UndefinedValueError",
    "UninitializedValueError",
    "MissingParserError",
    "NoEventLoopError",
    "FieldError",
]
