"""Tests for the scribe registry."""
from dataclasses import dataclass

import pytest

from py_vcard import RegistrationError, ScribeIndex
from py_vcard.internal.internal import Value
from py_vcard.properties import FormattedName, Note, RawProperty
from py_vcard.registry import BUILTIN_SCRIBES
from py_vcard.scribe import TextPropertyScribe, VCardPropertyScribe
from py_vcard.vcard import VCardProperty


@dataclass
class NeedsArgs(VCardProperty):
    name = "X-NEEDS-ARGS"

    def __init__(self, required):
        super().__init__()
        self.required = required


class NeedsArgsScribe(VCardPropertyScribe):
    property_class = NeedsArgs


class ShoutingNoteScribe(TextPropertyScribe):
    def __init__(self):
        super().__init__(Note)

    def parse_text(self, value, data_type, parameters, context):
        prop = self.new_property(parameters)
        prop.value = value.upper()
        return Value(prop)


def test_lookup():
    """Test looking up built-in scribes by name, qualified name and class."""
    index = ScribeIndex()

    fn = index.get_property_scribe("fn")
    assert fn.property_class is FormattedName
    assert index.get_property_scribe_by_qname("{urn:ietf:params:xml:ns:vcard-4.0}fn") is fn
    assert index.get_scribe_for(FormattedName("John")) is fn
    assert "FN" in index
    assert index.get_property_scribe("X-UNKNOWN") is None


def test_every_builtin_is_indexed():
    """Test that every built-in scribe can be found by its name."""
    index = ScribeIndex()

    assert {s.property_name for s in index.scribes()} == set(BUILTIN_SCRIBES)


def test_raw_property_scribe():
    """Test that raw properties get a scribe bound to their own name."""
    scribe = ScribeIndex().get_scribe_for(RawProperty("X-FOO", "bar"))

    assert scribe.property_name == "X-FOO"


def test_register_and_unregister():
    """Test that an extension overrides the built-in scribe until it is removed."""
    index = ScribeIndex()
    builtin = index.get_property_scribe("NOTE")
    extension = ShoutingNoteScribe()

    index.register(extension)
    assert index.get_property_scribe("NOTE") is extension
    assert index.get_scribe_for(Note("x")) is extension

    index.unregister(extension)
    assert index.get_property_scribe("NOTE") is builtin
    assert index.get_scribe_for(Note("x")) is builtin


def test_register_is_per_index():
    """Test that indexes do not share registrations."""
    first = ScribeIndex()
    second = ScribeIndex()

    first.register(ShoutingNoteScribe())

    assert isinstance(first.get_property_scribe("NOTE"), ShoutingNoteScribe)
    assert not isinstance(second.get_property_scribe("NOTE"), ShoutingNoteScribe)


def test_unregister_by_name():
    """Test removing an extension by property name."""
    index = ScribeIndex()
    index.register(ShoutingNoteScribe())

    index.unregister("note")

    assert not isinstance(index.get_property_scribe("NOTE"), ShoutingNoteScribe)


def test_register_requires_no_arg_constructor():
    """Test that a property class needing arguments is rejected."""
    index = ScribeIndex()

    with pytest.raises(RegistrationError):
        index.register(NeedsArgsScribe())

    assert index.get_property_scribe("X-NEEDS-ARGS") is None
