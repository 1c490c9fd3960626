"""Field groups: fields that own named child fields.

A ``FieldGroup`` mirrors a container inside the form value (a dict, a list or
the whole form). Each child reads its slice of the group's value through its
deep-path ``name``, and every child value change is folded back into the
group's value with an immutable ``set_in``.

The group's ``touched``, ``invalid`` and ``validating`` flags are the OR of its
own flag and those of its children. The child part is cached and updated
whenever a child reports a status change, so reading a flag never walks the
tree.

Children are attached through bindings:

    >>> group = FieldGroup({"name": "Ann", "tags": []})
    >>> name = group.field("name").apply(FormField())
    >>> name.value = "Bob"
    >>> group.value
    {'name': 'Bob', 'tags': []}
    >>> group.push_item("tags", "new")
    >>> group.value["tags"]
    ['new']
"""

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple
import logging

from formstate.errors import FieldError
from formstate.field import FieldSnapshot, FormField
from formstate.paths import PATH_SEPARATOR, get_in, set_in, update_in
from formstate.types import UNSET, StatusKind

logger = logging.getLogger(__name__)

ListUpdater = Callable[[List[Any]], List[Any]]

_STATUS_HOOKS: Dict[StatusKind, str] = {
    StatusKind.TOUCHED: "_touched_changed",
    StatusKind.INVALID: "_invalid_changed",
    StatusKind.VALIDATING: "_validating_changed",
}


@dataclass(frozen=True)
class FieldOptions:
    """Options for binding a child field to a group.

    Attributes:
        dependents: Names of the sibling fields that depend on this field.
            When None, the field's own ``dependents`` are left untouched.
        default_value: Value to seed the field with when its slice is missing
            from the group's value
    """
    dependents: Optional[Tuple[str, ...]] = None
    default_value: Any = UNSET


class FieldBinding:
    """Descriptor that attaches a field to a group under a deep path.

    The UI binding layer applies it to each concrete field instance, on
    first render and again on every refresh.
    """

    def __init__(self, group: "FieldGroup", path: str, options: Optional[FieldOptions] = None):
        self.group = group
        self.path = path
        self.options = options or FieldOptions()

    def __repr__(self) -> str:
        return f"FieldBinding({self.group.debug_name}, {self.path!r})"

    def apply(self, field: FormField) -> FormField:
        """Bind ``field`` to the group and seed its value.

        The order matters: dependents and name are set before the parent is
        attached, and the value is seeded last, without being reported back
        to the group as an edit.

        Returns:
            The bound field

        Raises:
            UndefinedValueError: If the slice is missing and no default value
                was given
        """
        group = self.group
        options = self.options

        if options.dependents is not None:
            field.dependents = list(options.dependents)
        field.disabled = group.disabled
        field.name = self.path
        field._set_parent(group)
        field._set_value_no_notify(
            get_in(group._value, self.path, options.default_value)
        )
        return field


def bind(group: "FieldGroup", path: str, options: Optional[FieldOptions] = None) -> FieldBinding:
    """Create a binding of ``path`` inside ``group``."""
    return FieldBinding(group, path, options)


def join_path(*parts: str) -> str:
    return PATH_SEPARATOR.join(part for part in parts if part != "")


class FieldGroup(FormField):
    """A form field that manages a group of child fields.

    This class also provides an API for manipulating lists inside the group's
    value. Every list operation produces a new list and assigns the new group
    value once, so change notification and validation happen once per call.
    """

    def __init__(self, value: Any = UNSET, **kwargs: Any) -> None:
        self._children: Dict[str, FormField] = {}
        self._child_flags: Dict[StatusKind, bool] = {kind: False for kind in StatusKind}
        super().__init__(value, **kwargs)

    @property
    def fields(self) -> Mapping[str, FormField]:
        """Read-only view of the child fields, keyed by name."""
        return MappingProxyType(self._children)

    @property
    def touched(self) -> bool:
        """Whether the group itself or any child has been touched.

        Setting this property affects all child fields.
        """
        return self._touched or self._child_flags[StatusKind.TOUCHED]

    @touched.setter
    def touched(self, v: bool) -> None:
        v = bool(v)
        self._set_own_touched(v)
        for child in list(self._children.values()):
            child.touched = v

    @property
    def invalid(self) -> bool:
        """Whether the group itself or any child is invalid."""
        return self._error is not None or self._child_flags[StatusKind.INVALID]

    @property
    def validating(self) -> bool:
        """Whether the group itself or any child is being validated."""
        return self._validating or self._child_flags[StatusKind.VALIDATING]

    def field(
        self,
        path: str,
        dependents: Optional[Iterable[str]] = None,
        default_value: Any = UNSET,
    ) -> FieldBinding:
        """Create a binding that registers a child field with this group.

        Args:
            path: Deep key of the child's slice inside this group's value
            dependents: Names of sibling fields that depend on the child
            default_value: Value to use when the slice is missing
        """
        options = FieldOptions(
            dependents=tuple(dependents) if dependents is not None else None,
            default_value=default_value,
        )
        return bind(self, path, options)

    def handle_blur(self, event: Any = None) -> None:
        """Mark only the group itself as touched.

        Child fields report their own touched state, so this listener is
        meant for other focusable elements inside the group.
        """
        self._set_own_touched(True)

    def refresh_children(self) -> None:
        """Push this group's value down into all descendants.

        Children whose slice is missing keep their current value.
        """
        for child in list(self._children.values()):
            slice_ = get_in(self._value, child.name, UNSET)
            if slice_ is not UNSET:
                child._set_value_no_notify(slice_)
            if isinstance(child, FieldGroup):
                child.refresh_children()

    def errors(self) -> List[FieldError]:
        """Collect the errors of this group and all its descendants.

        Paths are relative to this group; the group's own error has path "".
        """
        result: List[FieldError] = []
        if self._error is not None:
            result.append(FieldError(path="", message=self._error))
        for name, child in self._children.items():
            if isinstance(child, FieldGroup):
                for err in child.errors():
                    result.append(FieldError(path=join_path(name, err.path), message=err.message))
            elif child.error is not None:
                result.append(FieldError(path=name, message=child.error))
        return result

    def snapshot(self) -> FieldSnapshot:
        """Capture the readable state of this group and all its descendants."""
        return replace(
            super().snapshot(),
            fields={name: child.snapshot() for name, child in self._children.items()},
        )

    # List API

    def insert_item(self, path: str, index: int, item: Any) -> None:
        """Insert ``item`` into the list at ``path`` before ``index``."""
        def insert(items: List[Any]) -> List[Any]:
            items.insert(index, item)
            return items
        self._update_list(path, insert)

    def move_item(self, path: str, from_index: int, to_index: int) -> None:
        """Move the item at ``from_index`` of the list at ``path``.

        The item is removed first and then inserted at ``to_index`` of the
        shortened list. An out-of-range ``from_index`` leaves the list as is.
        """
        def move(items: List[Any]) -> List[Any]:
            if -len(items) <= from_index < len(items):
                items.insert(to_index, items.pop(from_index))
            return items
        self._update_list(path, move)

    def push_item(self, path: str, item: Any) -> None:
        """Append ``item`` to the list at ``path``."""
        self._update_list(path, lambda items: items + [item])

    def remove_item(self, path: str, index: int) -> None:
        """Remove the item at ``index`` from the list at ``path``."""
        self._update_list(path, lambda items: [x for i, x in enumerate(items) if i != index])

    def replace_item(self, path: str, index: int, item: Any) -> None:
        """Replace the item at ``index`` of the list at ``path``."""
        self._update_list(
            path, lambda items: [item if i == index else x for i, x in enumerate(items)]
        )

    def _update_list(self, path: str, updater: ListUpdater) -> None:
        def update(current: Any) -> Any:
            if current is None or current is UNSET:
                current = []
            if not isinstance(current, (list, tuple)):
                raise TypeError(
                    f"{self.debug_name}: {path!r} is a {type(current).__name__}, not a list"
                )
            items = updater(list(current))
            return tuple(items) if isinstance(current, tuple) else items

        self.value = update_in(self._value, path, update)

    # Status flags: only report changes of the aggregated value.

    def _set_own_touched(self, v: bool) -> None:
        if self._touched == v:
            return
        old = self.touched
        self._touched = v
        if self.touched != old:
            self._touched_changed()

    def _set_validating(self, v: bool) -> None:
        if self._validating == v:
            return
        old = self.validating
        self._validating = v
        if self.validating != old:
            self._validating_changed()

    # Internal child API

    def _register_child(self, child: FormField) -> None:
        """Called by a child field to register itself with this group."""
        self._children[child.name] = child
        logger.debug("%s: registered child %r", self.debug_name, child.name)

        self._recompute_status()
        self._validate_dependents(child)
        if child.has_value and any(
            child.name in sibling.dependents
            for sibling in self._children.values()
            if sibling is not child
        ):
            child.validate()

    def _unregister_child(self, child: FormField) -> None:
        """Called by a child field to unregister itself from this group."""
        if self._children.get(child.name) is child:
            del self._children[child.name]
            logger.debug("%s: unregistered child %r", self.debug_name, child.name)
            self._recompute_status()

    def _on_child_value_changed(self, child: FormField) -> None:
        """Called by a child field when its value has changed."""
        self.value = set_in(self._value, child.name, child.value)
        self._validate_dependents(child)

    def _on_child_status_changed(self, child: FormField, kind: StatusKind) -> None:
        """Called by a child field when one of its status flags has changed."""
        attr = kind.value
        old = getattr(self, attr)
        self._child_flags[kind] = getattr(child, attr) or self._any_child(attr)
        if getattr(self, attr) != old:
            getattr(self, _STATUS_HOOKS[kind])()

    def _recompute_status(self) -> None:
        for kind in StatusKind:
            attr = kind.value
            old = getattr(self, attr)
            self._child_flags[kind] = self._any_child(attr)
            if getattr(self, attr) != old:
                getattr(self, _STATUS_HOOKS[kind])()

    def _any_child(self, attr: str) -> bool:
        return any(getattr(child, attr) for child in self._children.values())

    def _validate_dependents(self, child: FormField) -> None:
        for name in child.dependents:
            dependent = self._children.get(name)
            if dependent is not None and dependent is not child and dependent.has_value:
                dependent.validate()


__all__ = [
    "FieldGroup",
    "FieldBinding",
    "FieldOptions",
    "bind",
    "join_path",
]
