"""Tests for reading and writing jCard."""
import datetime
import json

import pytest

from py_vcard import JCardReader, JCardWriter, VCard, VCardParseError, VCardVersion
from py_vcard.io.jcard import write_string
from py_vcard.properties import (
    Address,
    Agent,
    Birthday,
    Categories,
    FormattedName,
    Geo,
    RawProperty,
    StructuredName,
    Telephone,
)

JCARD = """
["vcard",
  [
    ["version", {}, "text", "4.0"],
    ["fn", {}, "text", "John Doe"],
    ["n", {}, "text", ["Doe", "John", "", ["Mr.", "Dr."], ""]],
    ["adr", {"type": "work", "label": "1 Main St\\nSpringfield"}, "text",
      ["", "", "1 Main St", "Springfield", "", "", "USA"]],
    ["tel", {"type": ["work", "voice"], "pref": 1, "group": "item1"}, "uri", "tel:+1-555-555-5555"],
    ["categories", {}, "text", "a", "b,c"],
    ["geo", {}, "uri", "geo:1.5,2.5"],
    ["bday", {}, "date-and-or-time", "1980-03-05"],
    ["x-foo", {}, "unknown", "bar"],
    ["gender", {}, "text", "M"]
  ]
]
"""


def test_read():
    """Test reading a jCard."""
    reader = JCardReader(JCARD)
    vcard = reader.read_next()

    assert vcard.version is VCardVersion.V4_0
    assert vcard.formatted_name.value == "John Doe"

    n = vcard.get_property(StructuredName)
    assert (n.family, n.given) == ("Doe", "John")
    assert n.additional == []
    assert n.prefixes == ["Mr.", "Dr."]

    adr = vcard.get_property(Address)
    assert adr.street_address == "1 Main St"
    assert adr.po_box is None
    assert adr.label == "1 Main St\nSpringfield"
    assert adr.types == ["work"]

    tel = vcard.get_property(Telephone)
    assert tel.value == "tel:+1-555-555-5555"
    assert tel.group == "item1"
    assert tel.types == ["work", "voice"]
    assert tel.parameters.pref == 1

    assert vcard.get_property(Categories).values == ["a", "b,c"]
    geo = vcard.get_property(Geo)
    assert (geo.latitude, geo.longitude) == (1.5, 2.5)
    assert vcard.get_property(Birthday).date == datetime.date(1980, 3, 5)

    raw = {p.name: p for p in vcard.get_properties(RawProperty)}
    assert raw["X-FOO"].value == "bar"
    assert raw["X-FOO"].data_type is None
    assert raw["GENDER"].value == "M"

    # Only the non-standard GENDER is reported
    assert len(reader.warnings) == 1
    assert reader.warnings[0].property_name == "GENDER"
    assert reader.read_next() is None


def test_read_array_of_jcards():
    """Test reading several jCards from one JSON array."""
    data = json.dumps([
        ["vcard", [["version", {}, "text", "4.0"], ["fn", {}, "text", "One"]]],
        ["vcard", [["version", {}, "text", "4.0"], ["fn", {}, "text", "Two"]]],
    ])

    vcards = JCardReader(data).read_all()

    assert [v.formatted_name.value for v in vcards] == ["One", "Two"]


@pytest.mark.parametrize("data", ["not json", "{\"vcard\": []}", "[\"vcard\"]"])
def test_read_invalid(data):
    """Test that input that is not a jCard raises a parse error."""
    with pytest.raises(VCardParseError):
        JCardReader(data)


def test_read_problems_are_warnings():
    """Test malformed property arrays and a wrong version."""
    data = json.dumps(["vcard", [
        ["version", {}, "text", "3.0"],
        ["fn", "no parameters", "text", "x"],
        ["fn"],
        ["fn", {}, "text", "John Doe"],
    ]])
    reader = JCardReader(data)

    vcard = reader.read_next()

    assert [p.value for p in vcard.get_properties(FormattedName)] == ["John Doe"]
    assert len(reader.warnings) == 3


def test_read_missing_version():
    """Test that a jCard without a version property is reported."""
    reader = JCardReader(json.dumps(["vcard", [["fn", {}, "text", "John Doe"]]]))

    vcard = reader.read_next()

    assert vcard.formatted_name.value == "John Doe"
    assert len(reader.warnings) == 1


def _vcard():
    vcard = VCard(VCardVersion.V4_0)
    vcard.add(FormattedName("John Doe"))
    vcard.add(StructuredName(family="Doe", given="John"))
    tel = Telephone("555-1234", group="item1")
    tel.add_type("work")
    vcard.add(tel)
    vcard.add(Categories(["a", "b"]))
    vcard.add(RawProperty("X-FOO", "bar"))
    return vcard


def test_write():
    """Test the exact jCard written for a vCard."""
    data = json.loads(write_string(_vcard(), add_prodid=False))

    assert data == [
        "vcard",
        [
            ["version", {}, "text", "4.0"],
            ["fn", {}, "text", "John Doe"],
            ["n", {}, "text", ["Doe", "John", "", "", ""]],
            ["tel", {"group": "item1", "type": "work"}, "text", "555-1234"],
            ["categories", {}, "text", "a", "b"],
            ["x-foo", {}, "unknown", "bar"],
        ],
    ]


def test_write_multiple():
    """Test that several vCards are written as an array."""
    data = json.loads(write_string([_vcard(), _vcard()], add_prodid=False))

    assert len(data) == 2
    assert all(d[0] == "vcard" for d in data)


def test_write_unsupported():
    """Test that AGENT cannot be written as jCard."""
    vcard = _vcard()
    vcard.add(Agent(url="http://example.com"))
    writer = JCardWriter(add_prodid=False)

    writer.write(vcard)

    assert "agent" not in writer.to_string()
    assert [w.property_name for w in writer.warnings] == ["AGENT"]


def test_write_then_read(tmp_path):
    """Test writing to a file and reading it back."""
    path = tmp_path / "contacts.json"

    with JCardWriter(path) as writer:
        writer.write(_vcard())

    vcard = JCardReader(path).read_next()
    assert vcard.formatted_name.value == "John Doe"
    assert vcard.get_property(Telephone).group == "item1"
    assert vcard.get_property(Categories).values == ["a", "b"]
    assert vcard.get_property(RawProperty).value == "bar"
    assert vcard.get_properties_by_name("PRODID")
