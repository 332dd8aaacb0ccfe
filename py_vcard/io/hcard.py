"""hCard: vCards embedded in HTML with microformat class names."""

from __future__ import annotations

import io
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import IO, Any

from lxml import etree, html

from ..config import MAX_DEPTH, CompatibilityMode, LabelPolicy
from ..internal.html_utils import HCardElement, class_names, has_class
from ..internal.internal import Embedded, EmbeddedDocument, ParseContext, Skip, Value, WriteContext
from ..properties import RawProperty
from ..scribe.base import DataFormat, VCardPropertyScribe
from ..vcard import VCard, VCardProperty, VCardVersion
from .base import VCardStreamReader, VCardStreamWriter

logger = logging.getLogger("py_vcard.io.hcard")

# hCard is based on vCard 3.0
HCARD_VERSION = VCardVersion.V3_0

# Properties written as block elements
_BLOCK_PROPERTIES = {"ADR", "AGENT", "LABEL", "NOTE"}


def _parse_html(source: Any) -> etree._Element:
    if isinstance(source, Path):
        return html.parse(str(source)).getroot()
    if isinstance(source, (str, bytes)):
        return html.fromstring(source)
    return html.parse(source).getroot()


class HCardReader(VCardStreamReader):
    """Reads the hCards of an HTML page.

    Every outermost element with the ``vcard`` class is one document. Nested
    ``vcard`` elements are only read as the value of a property such as
    AGENT.

    Args:
        source: HTML text, a stream, or a path
        page_url: URL of the page, used to resolve relative links
        compatibility_mode: Producer whose quirks should be tolerated
        label_policy: Whether LABEL properties are merged into addresses
        max_depth: Maximum nesting of embedded vCards
    """

    def __init__(
        self,
        source: str | bytes | IO[Any] | Path,
        page_url: str | None = None,
        compatibility_mode: CompatibilityMode = CompatibilityMode.RFC,
        label_policy: LabelPolicy = LabelPolicy.AUTO,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        super().__init__(compatibility_mode, label_policy, max_depth)
        self._stream = None
        self.root = _parse_html(source)
        if page_url:
            self.root.make_links_absolute(page_url)
        self._vcards = self._outermost_vcards()

    def _outermost_vcards(self) -> Iterator[etree._Element]:
        for element in self.root.iter():
            if not isinstance(element.tag, str) or not has_class(element, "vcard"):
                continue
            if not any(has_class(ancestor, "vcard") for ancestor in element.iterancestors()):
                yield element

    def _html_scribes(self) -> dict[str, VCardPropertyScribe]:
        scribes = {}
        for scribe in self.index.scribes():
            if scribe.supports(DataFormat.HTML) and scribe.supports_version(HCARD_VERSION) and scribe.html_class:
                scribes[scribe.html_class] = scribe
        return scribes

    def _read_next(self) -> VCard | None:
        element = next(self._vcards, None)
        if element is None:
            return None
        return self._parse_vcard(element, 0)

    def _parse_vcard(self, element: etree._Element, depth: int) -> VCard:
        vcard = VCard(HCARD_VERSION)
        self._parse_children(vcard, element, self._html_scribes(), depth)
        self._apply_label_policy(vcard)
        return vcard

    def _parse_children(
        self,
        vcard: VCard,
        element: etree._Element,
        scribes: dict[str, VCardPropertyScribe],
        depth: int,
    ) -> None:
        for child in element:
            if not isinstance(child.tag, str):
                continue
            classes = class_names(child)
            for class_name in classes:
                scribe = scribes.get(class_name.lower())
                if scribe is not None:
                    self._parse_property(vcard, child, scribe, depth)
            if "vcard" in classes:
                continue
            self._parse_children(vcard, child, scribes, depth)

    def _parse_property(self, vcard: VCard, element: etree._Element, scribe: VCardPropertyScribe, depth: int) -> None:
        name = scribe.property_name
        context = ParseContext(HCARD_VERSION, self.compatibility_mode, name, element.sourceline)
        outcome = scribe.parse_html(HCardElement(element), context)
        for message in context.warnings:
            self._warn(message, name, element.sourceline)

        if isinstance(outcome, Skip):
            self._warn(f"Property skipped: {outcome.reason}", name, element.sourceline)
            return
        if isinstance(outcome, Value):
            vcard.add(outcome.property)
            return
        self._read_embedded(vcard, name, outcome, depth, element.sourceline)

    def _read_embedded(self, vcard: VCard, name: str, outcome: Embedded, depth: int, line: int | None) -> None:
        if outcome.subtree is None:
            self._warn("Property has no nested vCard.", name, line)
            return
        if depth + 1 > self.max_depth:
            self._warn(f"vCards nested deeper than {self.max_depth} levels are not parsed.", name, line)
            text = etree.tostring(outcome.subtree, encoding="unicode", with_tail=False)
            vcard.add(RawProperty(name, text))
            return
        logger.debug(f"Reading nested hCard of {name} at depth {depth + 1}")
        outcome.inject(self._parse_vcard(outcome.subtree, depth + 1))
        vcard.add(outcome.property)


class HCardWriter(VCardStreamWriter):
    """Writes vCards as hCards in a minimal HTML page; the page is written by :meth:`close`.

    Args:
        out: Text stream or path to write to; None to only build the
            page (see :meth:`to_string`)
        compatibility_mode: Consumer whose quirks should be accommodated
        add_prodid: Add a PRODID property
        indent: Pretty-print the HTML
        title: Title of the page
    """

    max_depth = MAX_DEPTH

    def __init__(
        self,
        out: IO[str] | Path | None = None,
        compatibility_mode: CompatibilityMode = CompatibilityMode.RFC,
        add_prodid: bool = False,
        indent: bool = True,
        title: str = "vCard",
    ) -> None:
        super().__init__(HCARD_VERSION, compatibility_mode, LabelPolicy.PROPERTY, add_prodid, False)
        self._open(out, "w")
        self.indent = indent
        self.root = etree.Element("html")
        head = etree.SubElement(self.root, "head")
        etree.SubElement(head, "meta", charset="utf-8")
        etree.SubElement(head, "title").text = title
        self.body = etree.SubElement(self.root, "body")

    def _write(self, vcard: VCard) -> None:
        element = etree.SubElement(self.body, "div")
        element.set("class", "vcard")
        self._write_vcard(element, vcard, 0)
        logger.debug(f"HCardWriter: wrote hCard with {len(vcard)} properties")

    def _write_vcard(self, element: etree._Element, vcard: VCard, depth: int) -> None:
        self._check_required(vcard, HCARD_VERSION)
        for prop in self._properties_to_write(vcard, HCARD_VERSION, nested=depth > 0):
            self._write_property(element, vcard, prop, depth)

    def _write_property(self, parent: etree._Element, vcard: VCard, prop: VCardProperty, depth: int) -> None:
        scribe = self.index.get_scribe_for(prop)
        if scribe is None:
            self._warn(f"No scribe is registered for {type(prop).__name__}; skipping it.")
            return

        name = prop.name if isinstance(prop, RawProperty) else scribe.property_name
        if not scribe.supports(DataFormat.HTML):
            self._warn("Property cannot be written as hCard; skipping it.", name)
            return

        tag = "div" if name in _BLOCK_PROPERTIES else "span"
        element = etree.SubElement(parent, tag)
        element.set("class", scribe.html_class or name.lower())

        context = WriteContext(HCARD_VERSION, self.compatibility_mode, vcard)
        result = scribe.write_html(prop, HCardElement(element), context)
        for message in context.warnings:
            self._warn(message, name)

        if isinstance(result, Skip):
            parent.remove(element)
            self._warn(f"Property skipped: {result.reason}", name)
            return

        if isinstance(result, EmbeddedDocument):
            if depth + 1 > self.max_depth:
                parent.remove(element)
                self._warn(f"vCards nested deeper than {self.max_depth} levels are not written.", name)
                return
            element.tag = "div"
            element.set("class", f"{scribe.html_class} vcard")
            self._write_vcard(element, result.vcard, depth + 1)

    def to_string(self) -> str:
        return html.tostring(
            self.root,
            doctype="<!DOCTYPE html>",
            encoding="unicode",
            pretty_print=self.indent,
        )

    def close(self) -> None:
        """Write the page to the output and close it if it was opened from a path."""
        if self._stream is not None:
            self._stream.write(self.to_string())
        super().close()


def write_string(vcards: VCard | list[VCard], **kwargs: Any) -> str:
    """Write one or more vCards as an HTML page."""
    if isinstance(vcards, VCard):
        vcards = [vcards]
    writer = HCardWriter(io.StringIO(), **kwargs)
    for vcard in vcards:
        writer.write(vcard)
    return writer.to_string()
