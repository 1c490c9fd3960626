"""The base form field.

``FormField`` is one addressable slice of a form's value: it holds the value,
the latest validation error and the touched/validating/disabled flags, and it
keeps its parent ``FieldGroup`` informed about every change so the group can
fold values into its own value tree and aggregate status.

A field can also be used standalone, without a parent. It must then be given a
value when constructed, since reading an unset value is an error.

Subclasses may override:
- ``sanitize_value`` to normalize candidate values (e.g. NaN -> None)
- ``value_formatter``/``value_parser`` to support textual editing
"""

import dataclasses
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Dict, Iterable, List, Mapping, Optional

from formstate.errors import MissingParserError, UndefinedValueError, UninitializedValueError
from formstate.events import EventEmitter, FieldEvent
from formstate.types import UNSET, EventType, StatusKind, ValidationError, Validator, ValueFormatter, ValueParser
from formstate.utils import debug_name, deep_equal
from formstate.validation import SETTLED, run_validation

if TYPE_CHECKING:
    from formstate.group import FieldGroup


def format_value(value: Any, field: "FormField") -> str:
    """Default value formatter, plain ``str()`` conversion."""
    return str(value)


@dataclass(frozen=True)
class FieldSnapshot:
    """Point-in-time copy of a field's readable state.

    Attributes:
        name: The field's name
        value: The field's value, UNSET if it has none yet
        error: The field's own validation error
        touched: Aggregated touched flag
        invalid: Aggregated invalid flag
        validating: Aggregated validating flag
        disabled: Whether the field is disabled
        fields: Snapshots of the child fields (groups only)
        dirty: Dirty flag (form roots only)
        submitting: Submitting flag (form roots only)
    """
    name: str
    value: Any
    error: Optional[str]
    touched: bool
    invalid: bool
    validating: bool
    disabled: bool
    fields: Mapping[str, "FieldSnapshot"] = dataclasses.field(default_factory=dict)
    dirty: Optional[bool] = None
    submitting: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "name": self.name,
            "error": self.error,
            "touched": self.touched,
            "invalid": self.invalid,
            "validating": self.validating,
            "disabled": self.disabled,
        }
        if self.value is not UNSET:
            result["value"] = self.value
        if self.fields:
            result["fields"] = {name: snap.to_dict() for name, snap in self.fields.items()}
        if self.dirty is not None:
            result["dirty"] = self.dirty
        if self.submitting is not None:
            result["submitting"] = self.submitting
        return result


class FormField:
    """Base class for a form field.

    Validation runs automatically when ``value``, ``disabled`` or
    ``validators`` change, once the field has a value.

    Attributes:
        dependents: Names of sibling fields to re-validate whenever this
            field's value changes
        value_formatter: Formats ``value`` for ``value_as_string``
        value_parser: Parses a string for ``value_as_string``, or None
        events: Emitter for VALUE_CHANGED, TOUCHED_CHANGED and STATUS_CHANGED

    Examples:
        >>> from formstate.validators import required
        >>> name = FormField("", validators=[required("Name is required")])
        >>> name.error
        'Name is required'
        >>> name.value = "Ann"
        >>> name.invalid
        False
    """

    def __init__(
        self,
        value: Any = UNSET,
        *,
        name: str = "",
        validators: Optional[Iterable[Validator]] = None,
        dependents: Optional[Iterable[str]] = None,
        disabled: bool = False,
        value_formatter: Optional[ValueFormatter] = None,
        value_parser: Optional[ValueParser] = None,
    ) -> None:
        self._value: Any = UNSET
        self._error: Optional[str] = None
        self._touched = False
        self._validating = False
        self._disabled = disabled
        self._name = name
        self._parent: Optional["FieldGroup"] = None
        self._validators: List[Validator] = list(validators or [])
        self._notifies_parent = True
        self._validation_counter = 0
        self._last_validation: Awaitable[None] = SETTLED

        self.dependents: List[str] = list(dependents or [])
        self.value_formatter: ValueFormatter = value_formatter or format_value
        self.value_parser: Optional[ValueParser] = value_parser
        self.events = EventEmitter()

        if value is not UNSET:
            self.value = value

    def __repr__(self) -> str:
        return f"<{self.debug_name} value={self._value!r} error={self._error!r}>"

    @property
    def debug_name(self) -> str:
        return debug_name(type(self).__name__, self._name)

    @property
    def name(self) -> str:
        """Deep key of this field inside its parent's value."""
        return self._name

    @name.setter
    def name(self, v: str) -> None:
        if v == self._name:
            return
        parent = self._parent
        if parent is not None:
            parent._unregister_child(self)
        self._name = v
        if parent is not None:
            parent._register_child(self)

    @property
    def parent(self) -> Optional["FieldGroup"]:
        """The owning field group. Application should not set this property."""
        return self._parent

    @property
    def root(self) -> "FormField":
        """The top level ancestor of this field, computed on the fly."""
        node = self
        while node._parent is not None:
            node = node._parent
        return node

    @property
    def value(self) -> Any:
        """The value of the field.

        Raises:
            UninitializedValueError: If no value has been set yet
        """
        if self._value is UNSET:
            raise UninitializedValueError(self.debug_name)
        return self._value

    @value.setter
    def value(self, v: Any) -> None:
        if v is UNSET:
            raise UndefinedValueError(self.debug_name)

        v = self.sanitize_value(v)

        if deep_equal(v, self._value):
            return
        self._value = v
        self._value_changed()

    @property
    def has_value(self) -> bool:
        """Whether a value has been set."""
        return self._value is not UNSET

    @property
    def value_as_string(self) -> str:
        """``value`` formatted by ``value_formatter``.

        Setting this property parses the string with ``value_parser``.
        """
        return self.value_formatter(self.value, self)

    @value_as_string.setter
    def value_as_string(self, v: str) -> None:
        if self.value_parser is None:
            raise MissingParserError(self.debug_name)
        self.value = self.value_parser(v, self)

    @property
    def error(self) -> Optional[str]:
        """The current validation error, a non-empty string or None.

        This reflects the last finished validation. With asynchronous
        validators, check ``validating`` before relying on it.
        """
        return self._error

    @property
    def invalid(self) -> bool:
        return self._error is not None

    @property
    def touched(self) -> bool:
        """Whether the field has been touched by the user."""
        return self._touched

    @touched.setter
    def touched(self, v: bool) -> None:
        self._set_own_touched(bool(v))

    @property
    def validating(self) -> bool:
        """Whether the field is being validated. Set by the validation engine only."""
        return self._validating

    @property
    def disabled(self) -> bool:
        """A disabled field is always valid."""
        return self._disabled

    @disabled.setter
    def disabled(self, v: bool) -> None:
        v = bool(v)
        if v != self._disabled:
            self._disabled = v
            self._auto_validate()

    @property
    def validators(self) -> List[Validator]:
        """The validators, run in order. Assigning a new list re-validates."""
        return self._validators

    @validators.setter
    def validators(self, v: Iterable[Validator]) -> None:
        self._validators = list(v)
        self._auto_validate()

    @property
    def last_validation(self) -> Awaitable[None]:
        """Awaitable of the most recently started validation run."""
        return self._last_validation

    def validate(self) -> Awaitable[None]:
        """Validate the field.

        Synchronous validators are applied before this method returns. The
        returned awaitable completes when asynchronous validators, if any,
        have settled.
        """
        self._last_validation = run_validation(self)
        return self._last_validation

    def snapshot(self) -> FieldSnapshot:
        """Capture the readable state of this field."""
        return FieldSnapshot(
            name=self.name,
            value=self._value,
            error=self.error,
            touched=self.touched,
            invalid=self.invalid,
            validating=self.validating,
            disabled=self.disabled,
        )

    def sanitize_value(self, value: Any) -> Any:
        """Normalize a candidate value before it is accepted. Identity by default."""
        return value

    def handle_blur(self, event: Any = None) -> None:
        """Mark the field as touched, for use as a blur listener."""
        self.touched = True

    def detach(self) -> None:
        """Unregister from the parent group, for when the binding is torn down."""
        self._set_parent(None)

    # Notification hooks. Subclasses overriding them must call super().

    def _value_changed(self) -> None:
        try:
            if self._notifies_parent and self._parent is not None:
                self._parent._on_child_value_changed(self)
            self._auto_validate()
        finally:
            self._emit(EventType.VALUE_CHANGED)

    def _touched_changed(self) -> None:
        if self._parent is not None:
            self._parent._on_child_status_changed(self, StatusKind.TOUCHED)
        self._emit(EventType.TOUCHED_CHANGED)

    def _invalid_changed(self) -> None:
        if self._parent is not None:
            self._parent._on_child_status_changed(self, StatusKind.INVALID)
        self._emit(EventType.STATUS_CHANGED)

    def _validating_changed(self) -> None:
        if self._parent is not None:
            self._parent._on_child_status_changed(self, StatusKind.VALIDATING)
        self._emit(EventType.STATUS_CHANGED)

    # Internal API used by FieldGroup and the validation engine.

    def _set_parent(self, parent: Optional["FieldGroup"]) -> None:
        old = self._parent
        if old is parent:
            return
        if old is not None:
            old._unregister_child(self)
        self._parent = parent
        if parent is not None:
            parent._register_child(self)

    def _set_value_no_notify(self, v: Any) -> None:
        """Set ``value`` without folding it into the parent's value."""
        self._notifies_parent = False
        try:
            self.value = v
        finally:
            self._notifies_parent = True

    def _set_own_touched(self, v: bool) -> None:
        if self._touched != v:
            self._touched = v
            self._touched_changed()

    def _set_error(self, error: ValidationError) -> None:
        if not error:
            error = None
        elif not isinstance(error, str):
            error = str(error)
        if self._error != error:
            self._error = error
            self._invalid_changed()

    def _set_validating(self, v: bool) -> None:
        if self._validating != v:
            self._validating = v
            self._validating_changed()

    def _auto_validate(self) -> None:
        if self._value is not UNSET:
            self.validate()

    def _emit(self, event_type: EventType) -> None:
        self.events.emit(FieldEvent(type=event_type, target=self))


__all__ = [
    "FormField",
    "FieldSnapshot",
    "format_value",
]
