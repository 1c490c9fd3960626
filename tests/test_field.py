"""Unit tests for the base form field.

Tests cover:
- Value initialization, UNSET handling and change detection
- Value sanitizing, formatting and parsing
- Touched and disabled flags
- Snapshots of the readable state
- Parent links, renaming and detaching
"""

import math

import pytest

from formstate.errors import MissingParserError, UndefinedValueError, UninitializedValueError
from formstate.field import FieldSnapshot, FormField
from formstate.group import FieldGroup
from formstate.types import UNSET


class NumberField(FormField):
    """Field that stores NaN as None."""

    def sanitize_value(self, value):
        if isinstance(value, float) and math.isnan(value):
            return None
        return value


class TestFieldValue:
    """Test reading and writing field values."""

    def test_initial_value(self):
        field = FormField("Ann")
        assert field.value == "Ann"
        assert field.has_value is True

    def test_none_is_a_value(self):
        """Should treat None as an ordinary value."""
        field = FormField(None)
        assert field.has_value is True
        assert field.value is None

    def test_read_unset_value_raises(self):
        """Should refuse to read a value that was never set."""
        field = FormField(name="age")

        assert field.has_value is False
        with pytest.raises(UninitializedValueError) as exc_info:
            field.value

        assert exc_info.value.field_name == "FormField[name=age]"

    def test_set_unset_raises(self):
        """Should refuse to set the value to UNSET."""
        field = FormField("Ann")

        with pytest.raises(UndefinedValueError):
            field.value = UNSET

        assert field.value == "Ann"

    def test_undefined_value_error_is_value_error(self):
        field = FormField(1)
        with pytest.raises(ValueError):
            field.value = UNSET

    def test_equal_value_is_ignored(self):
        """Should keep the original object when a deep-equal value is set."""
        original = {"tags": ["a", "b"]}
        field = FormField(original)

        field.value = {"tags": ["a", "b"]}

        assert field.value is original

    def test_int_and_float_are_equal(self):
        field = FormField(1)
        field.value = 1.0
        assert type(field.value) is int

    def test_bool_is_not_a_number(self):
        field = FormField(1)
        field.value = True
        assert field.value is True


class TestSanitizeValue:
    """Test the sanitize_value hook."""

    def test_nan_is_sanitized(self):
        field = NumberField(float("nan"))
        assert field.value is None

    def test_sanitized_duplicate_is_ignored(self):
        """Should compare the sanitized value with the current one."""
        field = NumberField(None)
        changes = []
        field.events.on_any(changes.append)

        field.value = float("nan")

        assert changes == []


class TestValueAsString:
    """Test value formatting and parsing."""

    def test_default_formatter(self):
        assert FormField(42).value_as_string == "42"

    def test_custom_formatter(self):
        field = FormField(0.5, value_formatter=lambda value, f: f"{value:.0%}")
        assert field.value_as_string == "50%"

    def test_parser(self):
        field = FormField(0, value_parser=lambda text, f: int(text))
        field.value_as_string = "12"
        assert field.value == 12

    def test_missing_parser_raises(self):
        field = FormField("x", name="code")
        with pytest.raises(MissingParserError) as exc_info:
            field.value_as_string = "y"
        assert "code" in str(exc_info.value)

    def test_parser_error_propagates(self):
        """Should leave the value alone when the parser fails."""
        field = FormField(1, value_parser=lambda text, f: int(text))
        with pytest.raises(ValueError):
            field.value_as_string = "abc"
        assert field.value == 1


class TestFieldFlags:
    """Test touched and disabled flags."""

    def test_handle_blur_marks_touched(self):
        field = FormField("")
        field.handle_blur()
        assert field.touched is True

    def test_touched_setter(self):
        field = FormField("")
        field.touched = True
        field.touched = False
        assert field.touched is False

    def test_disabled_field_is_valid(self):
        """Should clear the error while disabled and restore it when enabled."""
        field = FormField("", validators=[lambda f: None if f.value else "Required"])
        assert field.invalid is True

        field.disabled = True
        assert field.error is None
        assert field.invalid is False

        field.disabled = False
        assert field.error == "Required"

    def test_disabled_at_construction(self):
        field = FormField("", disabled=True, validators=[lambda f: "Required"])
        assert field.error is None

    def test_validators_setter_revalidates(self):
        field = FormField("x")
        field.validators = [lambda f: "Nope"]
        assert field.error == "Nope"

    def test_no_validation_without_value(self):
        """Should not run validators before a value is set."""
        calls = []
        field = FormField(validators=[lambda f: calls.append(f) or None])

        field.disabled = True
        field.disabled = False

        assert calls == []


class TestFieldSnapshot:
    """Test snapshots of the readable state."""

    def test_snapshot(self):
        field = FormField("", name="name", validators=[lambda f: None if f.value else "Required"])
        field.handle_blur()

        snap = field.snapshot()

        assert snap == FieldSnapshot(
            name="name",
            value="",
            error="Required",
            touched=True,
            invalid=True,
            validating=False,
            disabled=False,
        )

    def test_to_dict_omits_unset_value(self):
        snap = FormField(name="age").snapshot()
        data = snap.to_dict()

        assert "value" not in data
        assert "fields" not in data
        assert "dirty" not in data
        assert data["name"] == "age"

    def test_to_dict_with_value(self):
        data = FormField(3, name="qty").snapshot().to_dict()
        assert data["value"] == 3


class TestFieldParent:
    """Test parent links."""

    def test_standalone_field_is_its_own_root(self):
        field = FormField(1)
        assert field.parent is None
        assert field.root is field

    def test_root_walks_to_top(self):
        outer = FieldGroup({"inner": {"name": "Ann"}})
        inner = outer.field("inner").apply(FieldGroup())
        name = inner.field("name").apply(FormField())

        assert name.parent is inner
        assert name.root is outer

    def test_rename_rekeys_in_parent(self):
        group = FieldGroup({"a": 1, "b": 2})
        field = group.field("a").apply(FormField())

        field.name = "b"

        assert "a" not in group.fields
        assert group.fields["b"] is field

    def test_detach(self):
        group = FieldGroup({"name": ""})
        field = group.field("name").apply(FormField(validators=[lambda f: "Bad"]))
        assert group.invalid is True

        field.detach()

        assert field.parent is None
        assert "name" not in group.fields
        assert group.invalid is False

    def test_repr(self):
        assert repr(FormField(1, name="qty")) == "<FormField[name=qty] value=1 error=None>"
