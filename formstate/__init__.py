"""formstate: field-state and validation engine for forms.

formstate keeps a tree of state nodes that mirrors an application's data
model and provides:
- Per-field value, error, touched, validating and disabled state
- Aggregated touched/invalid/validating status across any depth of groups
- Ordered synchronous and racing asynchronous validators with stale-result
  discarding
- Cross-field validation through declared dependents
- Immutable updates of nested dicts and lists addressed by dotted paths
- A form root with dirty tracking, reset and a guarded submit lifecycle

Rendering is left to a UI binding layer, which attaches fields through
bindings and reacts to their events.

Basic usage:
    >>> from formstate import FormField, FormRoot
    >>> from formstate.validators import required
    >>> form = FormRoot({"name": ""}, on_submit=lambda form, event: None)
    >>> name = form.field("name").apply(FormField(validators=[required("Required")]))
    >>> form.invalid
    True
    >>> name.value = "Ann"
    >>> form.invalid, form.dirty
    (False, True)
"""

__version__ = "0.1.0"

# Version info
VERSION = (0, 1, 0)

# Core exports
from formstate.errors import (
    FieldError,
    FormStateError,
    MissingParserError,
    NoEventLoopError,
    UndefinedValueError,
    UninitializedValueError,
)
from formstate.events import EventEmitter, FieldEvent
from formstate.field import FieldSnapshot, FormField
from formstate.form import FormOptions, FormRoot
from formstate.group import FieldBinding, FieldGroup, FieldOptions, bind
from formstate.paths import get_in, set_in, update_in
from formstate.types import UNSET, EventType, StatusKind

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "UNSET",
    "EventType",
    "StatusKind",
    "FormField",
    "FieldGroup",
    "FormRoot",
    "FormOptions",
    "FieldBinding",
    "FieldOptions",
    "FieldSnapshot",
    "bind",
    "get_in",
    "set_in",
    "update_in",
    "EventEmitter",
    "FieldEvent",
    "FieldError",
    "FormStateError",
    "UndefinedValueError",
    "UninitializedValueError",
    "MissingParserError",
    "NoEventLoopError",
]
