"""Tests for vCards nested in AGENT properties across formats."""
import io

import pytest

from py_vcard import HCardReader, HCardWriter, VCard, VCardReader, VCardVersion, VCardWriter
from py_vcard.io.text_writer import write_string
from py_vcard.properties import Agent, FormattedName, StructuredName


def _card(name, agent=None):
    vcard = VCard(VCardVersion.V3_0)
    vcard.add(FormattedName(name))
    vcard.add(StructuredName(family=name))
    if agent is not None:
        vcard.add(Agent(vcard=agent))
    return vcard


def _chain(depth):
    """A vCard with ``depth`` levels of nested agents."""
    vcard = _card(f"Agent {depth}")
    for level in range(depth - 1, -1, -1):
        vcard = _card(f"Agent {level}", vcard)
    return vcard


@pytest.mark.parametrize("version", [VCardVersion.V2_1, VCardVersion.V3_0])
def test_text_round_trip(version):
    """Test that deeply nested agents survive writing and reading."""
    text = write_string(_chain(5), version, add_prodid=False)

    vcard = VCardReader(text).read_next()
    for level in range(6):
        assert vcard.formatted_name.value == f"Agent {level}"
        vcard = vcard.agent.vcard if level < 5 else None


@pytest.mark.parametrize("version", [VCardVersion.V2_1, VCardVersion.V3_0])
def test_text_parse_then_write_is_identical(version):
    """Test that re-writing a parsed three level vCard gives back the same text."""
    text = write_string(_chain(2), version, add_prodid=False)

    reader = VCardReader(text)
    vcard = reader.read_next()
    rewritten = write_string(vcard, version, add_prodid=False)

    assert reader.warnings == []
    assert rewritten == text
    if version is VCardVersion.V2_1:
        lines = rewritten.split("\r\n")
        assert lines.count("BEGIN:VCARD") == 3
        assert lines.count("END:VCARD") == 3


@pytest.mark.parametrize("version", [VCardVersion.V2_1, VCardVersion.V3_0])
def test_text_writer_depth_limit(version):
    """Test that agents nested deeper than the limit are left out."""
    out = io.StringIO()
    writer = VCardWriter(out, version, add_prodid=False)
    writer.max_depth = 1

    writer.write(_chain(2))
    text = out.getvalue()

    assert "Agent 1" in text
    assert "Agent 2" not in text
    assert len(writer.warnings) == 1


def test_html_writer_depth_limit():
    """Test the depth limit of the hCard writer."""
    writer = HCardWriter()
    writer.max_depth = 1

    writer.write(_chain(2))

    vcard = HCardReader(writer.to_string()).read_next()
    assert vcard.agent.vcard.formatted_name.value == "Agent 1"
    assert vcard.agent.vcard.agent is None
    assert len(writer.warnings) == 1


def test_html_round_trip():
    """Test nested hCards survive writing and reading."""
    writer = HCardWriter()
    writer.write(_chain(3))

    vcard = HCardReader(writer.to_string()).read_next()
    for level in range(4):
        assert vcard.formatted_name.value == f"Agent {level}"
        vcard = vcard.agent.vcard if level < 3 else None
