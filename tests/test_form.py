"""Unit tests for the form root.

Tests cover:
- Dirty tracking against the initial value
- Reset, with and without a new initial value
- Submit lifecycle (invalid, busy, success and failure paths)
- Snapshots with form-level flags
"""

import asyncio
import logging

import pytest

from formstate.field import FormField
from formstate.form import FormOptions, FormRoot
from formstate.group import FieldGroup
from formstate.types import EventType
from formstate.validators import required


@pytest.fixture
def submitted():
    return []


@pytest.fixture
def form(submitted):
    def on_submit(form, event):
        submitted.append((form.value, event))

    return FormRoot({"name": "Ann", "email": ""}, on_submit=on_submit)


class TestFormConstruction:
    """Test creating a form root."""

    def test_initial_state(self, form):
        assert form.value == {"name": "Ann", "email": ""}
        assert form.initial_value is form.value
        assert form.dirty is False
        assert form.submitting is False
        assert form.parent is None

    def test_options_are_stored(self):
        def on_submit(form, event):
            pass

        def on_invalid(form):
            pass

        form = FormRoot({}, on_submit, on_submit_invalid=on_invalid)

        assert form.options == FormOptions(on_submit=on_submit, on_submit_invalid=on_invalid)

    def test_form_level_validators(self):
        form = FormRoot({"a": 1}, on_submit=lambda f, e: None, validators=lambda f: "Bad form")
        assert form.error == "Bad form"


class TestDirtyTracking:
    """Test dirty tracking."""

    def test_child_change_makes_dirty(self, form):
        name = form.field("name").apply(FormField())
        name.value = "Bob"
        assert form.dirty is True

    def test_changing_back_makes_clean(self, form):
        name = form.field("name").apply(FormField())
        name.value = "Bob"
        name.value = "Ann"
        assert form.dirty is False

    def test_list_operation_makes_dirty(self):
        form = FormRoot({"tags": []}, on_submit=lambda f, e: None)
        form.push_item("tags", "a")
        assert form.dirty is True


class TestReset:
    """Test resetting a form."""

    def test_reset_restores_initial_value(self, form):
        name = form.field("name").apply(FormField())
        name.value = "Bob"

        form.reset()

        assert form.value == {"name": "Ann", "email": ""}
        assert form.dirty is False

    def test_reset_clears_touched_tree_wide(self, form):
        name = form.field("name").apply(FormField())
        email = form.field("email").apply(FormField())
        form.touched = True
        form.handle_blur()

        form.reset()

        assert form.touched is False
        assert name.touched is False
        assert email.touched is False

    def test_reset_with_new_initial_value(self, form):
        name = form.field("name").apply(FormField())
        name.value = "Bob"
        name.touched = True

        form.reset({"name": "Cid", "email": "cid@example.com"})

        assert form.initial_value == {"name": "Cid", "email": "cid@example.com"}
        assert form.value == {"name": "Cid", "email": "cid@example.com"}
        assert form.touched is False
        assert form.dirty is False

    def test_reset_to_current_value_clears_dirty(self, form):
        """Should be clean afterwards even when the value does not change."""
        name = form.field("name").apply(FormField())
        name.value = "Bob"

        form.reset({"name": "Bob", "email": ""})

        assert form.dirty is False

    def test_reset_reseeds_fields(self):
        """Should push the initial value into the fields and re-validate them."""
        form = FormRoot({"name": "", "address": {"city": ""}}, on_submit=lambda f, e: None)
        name = form.field("name").apply(FormField(validators=[required("Required")]))
        address = form.field("address").apply(FieldGroup())
        city = address.field("city").apply(FormField())
        name.value = "Ann"
        city.value = "Oslo"
        assert form.invalid is False

        form.reset()

        assert name.value == ""
        assert city.value == ""
        assert name.error == "Required"
        assert form.invalid is True
        assert form.dirty is False

    def test_handle_reset(self, form):
        name = form.field("name").apply(FormField())
        name.value = "Bob"

        form.handle_reset(object())

        assert form.dirty is False


class TestSubmit:
    """Test the submit lifecycle."""

    @pytest.mark.asyncio
    async def test_submit_valid_form(self, form, submitted):
        name = form.field("name").apply(FormField())
        name.value = "Bob"
        event = object()

        await form.submit(event)

        assert submitted == [({"name": "Bob", "email": ""}, event)]
        assert form.dirty is False
        assert form.submitting is False

    @pytest.mark.asyncio
    async def test_submit_invalid_form(self, submitted):
        invalid_calls = []
        form = FormRoot(
            {"name": ""},
            on_submit=lambda f, e: submitted.append(f.value),
            on_submit_invalid=invalid_calls.append,
        )
        name = form.field("name").apply(FormField(validators=[required("Required")]))

        await form.submit()

        assert submitted == []
        assert invalid_calls == [form]
        assert name.touched is True
        assert form.touched is True

    @pytest.mark.asyncio
    async def test_submit_invalid_without_callback(self, submitted):
        form = FormRoot({"name": ""}, on_submit=lambda f, e: submitted.append(f.value))
        form.field("name").apply(FormField(validators=[required("Required")]))

        await form.submit()

        assert submitted == []

    @pytest.mark.asyncio
    async def test_async_submit_handler(self):
        states = []

        async def on_submit(form, event):
            states.append(form.submitting)
            await asyncio.sleep(0)

        form = FormRoot({"a": 1}, on_submit=on_submit)
        await form.submit()

        assert states == [True]
        assert form.submitting is False

    @pytest.mark.asyncio
    async def test_submitting_events(self):
        async def on_submit(form, event):
            await asyncio.sleep(0)

        form = FormRoot({"a": 1}, on_submit=on_submit)
        flags = []
        form.events.on(EventType.SUBMITTING_CHANGED, lambda e: flags.append(e.target.submitting))

        await form.submit()

        assert flags == [True, False]

    @pytest.mark.asyncio
    async def test_submit_ignored_while_submitting(self):
        release = asyncio.Event()
        calls = []

        async def on_submit(form, event):
            calls.append(event)
            await release.wait()

        form = FormRoot({"a": 1}, on_submit=on_submit)
        first = asyncio.ensure_future(form.submit("first"))
        await asyncio.sleep(0)
        assert form.submitting is True

        await form.submit("second")
        release.set()
        await first

        assert calls == ["first"]

    @pytest.mark.asyncio
    async def test_submit_ignored_while_validating(self):
        release = asyncio.Event()
        calls = []

        async def slow(field):
            await release.wait()
            return None

        form = FormRoot({"name": "Ann"}, on_submit=lambda f, e: calls.append(e))
        name = form.field("name").apply(FormField(validators=[slow]))
        assert form.validating is True

        await form.submit("early")
        release.set()
        await name.last_validation
        await form.submit("late")

        assert calls == ["late"]

    @pytest.mark.asyncio
    async def test_submit_error_callback(self):
        errors = []

        def on_submit(form, event):
            raise ValueError("server said no")

        form = FormRoot(
            {"a": 1},
            on_submit=on_submit,
            on_submit_error=lambda f, e: errors.append(e),
        )
        form.push_item("list", 1)

        await form.submit()

        assert len(errors) == 1
        assert isinstance(errors[0], ValueError)
        assert form.submitting is False
        assert form.dirty is True

    @pytest.mark.asyncio
    async def test_submit_error_logged_without_callback(self, caplog):
        async def on_submit(form, event):
            raise ConnectionError("offline")

        form = FormRoot({"a": 1}, on_submit=on_submit)

        with caplog.at_level(logging.ERROR, logger="formstate.form"):
            await form.submit()

        assert form.submitting is False
        assert "submit failed" in caplog.text

    @pytest.mark.asyncio
    async def test_handle_submit(self, form, submitted):
        await form.handle_submit("click")
        assert submitted == [({"name": "Ann", "email": ""}, "click")]


class TestFormSnapshot:
    """Test form snapshots."""

    def test_snapshot_includes_form_flags(self, form):
        name = form.field("name").apply(FormField())
        name.value = "Bob"

        snap = form.snapshot()

        assert snap.dirty is True
        assert snap.submitting is False
        assert snap.fields["name"].value == "Bob"
        assert snap.to_dict()["dirty"] is True
