"""FormRoot, the top of a field tree.

The form root is a field group that additionally tracks dirtiness against an
initial value snapshot and governs the submit lifecycle.

Usage:
    >>> submitted = []
    >>> form = FormRoot(
    ...     initial_value={"name": "", "age": None},
    ...     on_submit=lambda form, event: submitted.append(form.value),
    ... )
    >>> name = form.field("name").apply(FormField())
    >>> name.value = "Ann"
    >>> form.dirty
    True
    >>> form.reset()
    >>> form.value
    {'name': '', 'age': None}
"""

import inspect
import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterable, Optional, Union

from formstate.field import FieldSnapshot, FormField
from formstate.group import FieldGroup
from formstate.types import UNSET, EventType, Validator
from formstate.utils import deep_equal, make_list

if TYPE_CHECKING:
    SubmitHandler = Callable[["FormRoot", Any], Optional[Awaitable[None]]]
    InvalidSubmitHandler = Callable[["FormRoot"], None]
    SubmitErrorHandler = Callable[["FormRoot", Exception], None]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormOptions:
    """Callbacks that govern a form's submission.

    Attributes:
        on_submit: Called with the form and the triggering event when the form
            is submitted. May return an awaitable.
        on_submit_invalid: Called with the form when a submit was refused
            because the form is invalid
        on_submit_error: Called with the form and the exception when
            ``on_submit`` failed
    """
    on_submit: "SubmitHandler"
    on_submit_invalid: Optional["InvalidSubmitHandler"] = None
    on_submit_error: Optional["SubmitErrorHandler"] = None


class FormRoot(FieldGroup):
    """The root field group of a form.

    Attributes:
        options: The submit callbacks

    Examples:
        >>> form = FormRoot({"name": ""}, on_submit=lambda form, event: None)
        >>> form.dirty, form.submitting
        (False, False)
    """

    def __init__(
        self,
        initial_value: Any,
        on_submit: "SubmitHandler",
        *,
        on_submit_invalid: Optional["InvalidSubmitHandler"] = None,
        on_submit_error: Optional["SubmitErrorHandler"] = None,
        validators: Union[Validator, Iterable[Validator], None] = None,
    ) -> None:
        self.options = FormOptions(
            on_submit=on_submit,
            on_submit_invalid=on_submit_invalid,
            on_submit_error=on_submit_error,
        )
        self._initial_value = initial_value
        self._dirty = False
        self._submitting = False
        super().__init__(initial_value, validators=make_list(validators))

    @property
    def initial_value(self) -> Any:
        """The snapshot ``value`` is compared with to compute ``dirty``."""
        return self._initial_value

    @property
    def dirty(self) -> bool:
        """Whether ``value`` differs from the initial value."""
        return self._dirty

    @property
    def submitting(self) -> bool:
        """Whether the form is being submitted."""
        return self._submitting

    def reset(self, initial_value: Any = UNSET) -> None:
        """Reset the form.

        Marks all fields as untouched, sets ``value`` back to the initial
        value and re-seeds every bound field from it, making the form clean.

        Args:
            initial_value: Replaces the stored initial value if given
        """
        if initial_value is not UNSET:
            self._initial_value = initial_value

        self.touched = False
        self.value = self._initial_value
        self.refresh_children()
        self._dirty = not deep_equal(self._initial_value, self._value)

    def handle_reset(self, event: Any = None) -> None:
        """Reset listener, see ``reset``."""
        self.reset()

    async def submit(self, event: Any = None) -> None:
        """Submit the form.

        1. If the form is invalid, mark all fields as touched, call
           ``on_submit_invalid`` if provided and return.
        2. If the form is being validated or submitted, return.
        3. Call ``on_submit``. If it fails, call ``on_submit_error`` if
           provided; otherwise the failure is logged. The form is clean after
           a successful submit.
        """
        options = self.options

        if self.invalid:
            self.touched = True
            if options.on_submit_invalid is not None:
                options.on_submit_invalid(self)
            return

        if self.validating or self._submitting:
            logger.debug("%s: submit ignored while busy", self.debug_name)
            return

        self._set_submitting(True)
        try:
            result = options.on_submit(self, event)
            if inspect.isawaitable(result):
                await result
            self._dirty = False
        except Exception as e:
            if options.on_submit_error is not None:
                options.on_submit_error(self, e)
            else:
                logger.exception("%s: submit failed", self.debug_name)
        finally:
            self._set_submitting(False)

    async def handle_submit(self, event: Any = None) -> None:
        """Submit listener, see ``submit``."""
        await self.submit(event)

    def snapshot(self) -> FieldSnapshot:
        """Capture the readable state of the whole form."""
        return replace(super().snapshot(), dirty=self._dirty, submitting=self._submitting)

    def _value_changed(self) -> None:
        self._dirty = not deep_equal(self._initial_value, self._value)
        super()._value_changed()

    def _set_submitting(self, v: bool) -> None:
        if self._submitting != v:
            self._submitting = v
            self._emit(EventType.SUBMITTING_CHANGED)


__all__ = [
    "FormRoot",
    "FormOptions",
]
