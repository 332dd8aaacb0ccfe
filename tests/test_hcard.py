"""Tests for reading and writing hCard."""
import datetime
from dataclasses import dataclass

from lxml import html

from py_vcard import HCardReader, HCardWriter, VCard, VCardParameters, VCardVersion
from py_vcard.internal.internal import Embedded
from py_vcard.io.hcard import write_string
from py_vcard.properties import (
    Address,
    Agent,
    Birthday,
    Categories,
    Email,
    FormattedName,
    Geo,
    Note,
    Photo,
    RawProperty,
    StructuredName,
    Telephone,
    Url,
)
from py_vcard.scribe import VCardPropertyScribe
from py_vcard.vcard import VCardProperty

PAGE = """<!DOCTYPE html>
<html>
<head><title>People</title></head>
<body>
<div class="vcard">
  <a class="url fn" href="/about">John Doe</a>
  <div class="n"><span class="given-name">John</span> <span class="family-name">Doe</span></div>
  <a class="email" href="mailto:john@example.com">Email me</a>
  <div class="tel"><span class="type">Work</span>: <span class="value">+1-555-555-5555</span></div>
  <div class="adr">
    <span class="type">home</span>
    <div class="street-address">1 Main St</div>
    <span class="locality">Springfield</span>
  </div>
  <abbr class="bday" title="1980-03-05">March 5th</abbr>
  <div class="geo"><abbr class="latitude" title="37.386">N 37</abbr> <abbr class="longitude" title="-122.08">W 122</abbr></div>
  <img class="photo" src="me.png" alt="">
  <span class="category">friends</span>
  <div class="agent vcard"><span class="fn">Jane Agent</span></div>
  <div class="note">line one<br>line two</div>
</div>
<div class="vcard"><span class="fn">Second</span></div>
</body>
</html>
"""


def test_read():
    """Test reading the hCards of a page."""
    reader = HCardReader(PAGE, page_url="http://example.com/people/")
    vcard = reader.read_next()

    assert reader.warnings == []
    assert vcard.version is VCardVersion.V3_0
    assert vcard.formatted_name.value == "John Doe"
    assert vcard.get_property(Url).value == "http://example.com/about"

    n = vcard.get_property(StructuredName)
    assert (n.given, n.family) == ("John", "Doe")

    assert vcard.get_property(Email).value == "john@example.com"

    tel = vcard.get_property(Telephone)
    assert tel.value == "+1-555-555-5555"
    assert tel.types == ["work"]

    adr = vcard.get_property(Address)
    assert adr.types == ["home"]
    assert adr.street_address == "1 Main St"
    assert adr.locality == "Springfield"

    assert vcard.get_property(Birthday).date == datetime.date(1980, 3, 5)
    geo = vcard.get_property(Geo)
    assert (geo.latitude, geo.longitude) == (37.386, -122.08)
    assert vcard.get_property(Photo).url == "http://example.com/people/me.png"
    assert vcard.get_property(Categories).values == ["friends"]
    assert vcard.get_property(Note).value == "line one\nline two"

    agent = vcard.get_property(Agent)
    assert agent.vcard.formatted_name.value == "Jane Agent"
    # The agent's FN belongs to the agent only
    assert len(vcard.get_properties(FormattedName)) == 1

    assert reader.read_next().formatted_name.value == "Second"
    assert reader.read_next() is None


def test_read_without_page_url():
    """Test that links are kept as written without a page URL."""
    vcard = HCardReader(PAGE).read_next()

    assert vcard.get_property(Url).value == "/about"
    assert vcard.get_property(Photo).url == "me.png"


def test_nesting_depth_limit():
    """Test that a nested hCard beyond the depth limit is kept as raw HTML."""
    reader = HCardReader(PAGE, max_depth=0)

    vcard = reader.read_next()

    assert vcard.get_property(Agent) is None
    raw = vcard.get_property(RawProperty)
    assert raw.name == "AGENT"
    assert "Jane Agent" in raw.value
    assert len(reader.warnings) == 1


def _vcard():
    vcard = VCard(VCardVersion.V3_0)
    vcard.add(FormattedName("John Doe"))
    vcard.add(StructuredName(family="Doe", given="John"))
    vcard.add(Email("john@example.com"))
    tel = Telephone("555-1234")
    tel.add_type("work")
    vcard.add(tel)
    vcard.add(Note("line one\nline two"))
    vcard.add(Photo(url="http://example.com/me.png"))

    agent = VCard(VCardVersion.V3_0)
    agent.add(FormattedName("Agent 007"))
    agent.add(StructuredName(family="Bond", given="James"))
    vcard.add(Agent(vcard=agent))
    return vcard


def test_write():
    """Test the HTML written for a vCard."""
    writer = HCardWriter()
    writer.write(_vcard())
    page = writer.to_string()

    assert writer.warnings == []
    assert page.startswith("<!DOCTYPE html>")

    root = html.fromstring(page)
    card = root.find_class("vcard")[0]
    assert card.find_class("fn")[0].text_content() == "John Doe"
    assert card.find_class("given-name")[0].text_content() == "John"

    email = card.find_class("email")[0]
    assert email.tag == "a"
    assert email.get("href") == "mailto:john@example.com"

    tel = card.find_class("tel")[0]
    assert tel.find_class("type")[0].text_content() == "work"
    assert tel.find_class("value")[0].get("href") == "tel:555-1234"

    note = card.find_class("note")[0]
    assert note.tag == "div"
    assert len(note.findall("br")) == 1

    photo = card.find_class("photo")[0]
    assert (photo.tag, photo.get("src")) == ("img", "http://example.com/me.png")

    agent = card.find_class("agent")[0]
    assert agent.get("class") == "agent vcard"
    assert agent.find_class("fn")[0].text_content() == "Agent 007"


def test_write_then_read():
    """Test reading back a written page."""
    vcard = HCardReader(write_string(_vcard())).read_next()

    assert vcard.formatted_name.value == "John Doe"
    assert vcard.get_property(Email).value == "john@example.com"
    tel = vcard.get_property(Telephone)
    assert (tel.value, tel.types) == ("555-1234", ["work"])
    assert vcard.get_property(Note).value == "line one\nline two"
    assert vcard.get_property(Photo).url == "http://example.com/me.png"
    assert vcard.agent.vcard.formatted_name.value == "Agent 007"


def test_write_to_path(tmp_path):
    """Test that the page is written when the writer is closed."""
    path = tmp_path / "contacts.html"

    with HCardWriter(path, title="Contacts") as writer:
        writer.write(_vcard())

    page = path.read_text(encoding="utf-8")
    assert "<title>Contacts</title>" in page
    assert [v.formatted_name.value for v in HCardReader(path).read_all()] == ["John Doe"]


@dataclass
class Assistant(VCardProperty):
    name = "X-ASSISTANT"

    vcard: VCard | None = None


class AssistantScribe(VCardPropertyScribe):
    """Claims a nested vCard but never points at one."""

    property_class = Assistant

    def parse_html(self, element, context):
        prop = self.new_property(VCardParameters())
        return Embedded(prop, lambda vcard: setattr(prop, "vcard", vcard))


def test_embedded_without_subtree():
    """Test that a nested vCard with no element to read is skipped with a warning."""
    page = '<div class="vcard"><span class="fn">John Doe</span> <span class="x-assistant">Jane</span></div>'
    reader = HCardReader(page)
    reader.register_scribe(AssistantScribe())

    vcard = reader.read_next()

    assert vcard.formatted_name.value == "John Doe"
    assert vcard.get_property(Assistant) is None
    assert len(reader.warnings) == 1
    assert reader.warnings[0].property_name == "X-ASSISTANT"


def test_geo_not_finite():
    """Test that NaN and infinite coordinates are dropped with one warning."""
    page = (
        '<div class="vcard"><span class="fn">John Doe</span>'
        '<div class="geo"><abbr class="latitude" title="nan">?</abbr>'
        '<abbr class="longitude" title="inf">?</abbr></div></div>'
    )
    reader = HCardReader(page)

    vcard = reader.read_next()

    geo = vcard.get_property(Geo)
    assert (geo.latitude, geo.longitude) == (None, None)
    assert [w.property_name for w in reader.warnings] == ["GEO"]
    assert "latitude" not in write_string(vcard)
