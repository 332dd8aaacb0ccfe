"""xCard: the XML representation of vCard 4.0 (RFC 6351)."""

from __future__ import annotations

import copy
import io
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import IO, Any

from lxml import etree

from ..config import MAX_DEPTH, CompatibilityMode, LabelPolicy
from ..debug import format_xml
from ..internal.internal import Embedded, ParseContext, Skip, Value, VCardParseError, WriteContext
from ..internal.text import unescape
from ..internal.xml_utils import XCardElement, child_elements, local_name, namespace_of, qname
from ..parameters import VCardParameters
from ..properties import RawProperty, XmlProperty
from ..scribe.base import DataFormat
from ..scribe.raw import RawPropertyScribe
from ..vcard import XCARD_NAMESPACE, VCard, VCardProperty, VCardVersion
from .base import VCardStreamReader, VCardStreamWriter

logger = logging.getLogger("py_vcard.io.xcard")

VCARDS = qname("vcards")
VCARD = qname("vcard")
GROUP = qname("group")
PARAMETERS = qname("parameters")

# Data type of each parameter's value element
PARAMETER_DATA_TYPES = {
    "LANGUAGE": "language-tag",
    "PREF": "integer",
    "PID": "text",
    "TYPE": "text",
    "LABEL": "text",
    "MEDIATYPE": "text",
    "ALTID": "text",
    "SORT-AS": "text",
    "CALSCALE": "text",
    "GEO": "uri",
    "TZ": "text",
}


def _parse_xml(source: Any) -> etree._Element:
    try:
        if isinstance(source, etree._Element):
            return source
        if isinstance(source, Path):
            return etree.parse(str(source)).getroot()
        if isinstance(source, str):
            return etree.fromstring(source.encode("utf-8"))
        if isinstance(source, bytes):
            return etree.fromstring(source)
        return etree.parse(source).getroot()
    except etree.XMLSyntaxError as e:
        raise VCardParseError(f"Invalid xCard XML: {e.msg}", line=e.lineno) from e


class XCardReader(VCardStreamReader):
    """Reads the ``<vcard>`` elements of an xCard document.

    Args:
        source: XML text or bytes, a file object, a path, or a parsed
            element
        compatibility_mode: Producer whose quirks should be tolerated
        label_policy: Whether LABEL properties are merged into addresses
        max_depth: Maximum nesting of embedded vCards

    Raises:
        VCardParseError: If the XML is not well-formed
    """

    def __init__(
        self,
        source: str | bytes | IO[Any] | Path | etree._Element,
        compatibility_mode: CompatibilityMode = CompatibilityMode.RFC,
        label_policy: LabelPolicy = LabelPolicy.AUTO,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        super().__init__(compatibility_mode, label_policy, max_depth)
        self._stream = None
        self.root = _parse_xml(source)
        self._vcards = self._outermost_vcards()

    def _outermost_vcards(self) -> Iterator[etree._Element]:
        for element in self.root.iter(VCARD):
            if not any(ancestor.tag == VCARD for ancestor in element.iterancestors()):
                yield element

    def _read_next(self) -> VCard | None:
        element = next(self._vcards, None)
        if element is None:
            return None
        return self._parse_vcard(element, 0)

    def _parse_vcard(self, element: etree._Element, depth: int) -> VCard:
        vcard = VCard(VCardVersion.V4_0)

        for child in child_elements(element):
            if child.tag == GROUP:
                group = child.get("name")
                for prop_element in child_elements(child):
                    self._parse_property(vcard, prop_element, group, depth)
            else:
                self._parse_property(vcard, child, None, depth)

        self._apply_label_policy(vcard)
        return vcard

    def _parse_property(self, vcard: VCard, element: etree._Element, group: str | None, depth: int) -> None:
        name = local_name(element).upper()
        parameters = self._parse_parameters(element)

        scribe = self.index.get_property_scribe_by_qname(element.tag)
        if scribe is None:
            if namespace_of(element) == XCARD_NAMESPACE and name.startswith("X-"):
                scribe = RawPropertyScribe(name)
            else:
                vcard.add(XmlProperty(element=copy.deepcopy(element), group=group))
                return
        elif not scribe.supports(DataFormat.XML):
            self._warn("Property cannot be read from xCard; keeping it as XML.", name)
            vcard.add(XmlProperty(element=copy.deepcopy(element), group=group))
            return

        context = ParseContext(VCardVersion.V4_0, self.compatibility_mode, name)
        outcome = scribe.parse_xml(XCardElement(element), parameters, context)
        for message in context.warnings:
            self._warn(message, name)

        if isinstance(outcome, Skip):
            self._warn(f"Property skipped: {outcome.reason}", name)
            return

        prop = outcome.property
        prop.group = group
        if isinstance(outcome, Value):
            vcard.add(prop)
            return

        self._read_embedded(vcard, element, outcome, depth)

    def _read_embedded(self, vcard: VCard, element: etree._Element, outcome: Embedded, depth: int) -> None:
        subtree = outcome.subtree
        if subtree is None:
            subtree = next((e for e in element.iter(VCARD) if e is not element), None)
        if subtree is None:
            self._warn("Property has no nested vCard.", local_name(element).upper())
            return
        if depth + 1 > self.max_depth:
            self._warn(f"vCards nested deeper than {self.max_depth} levels are not parsed.", local_name(element).upper())
            vcard.add(XmlProperty(element=copy.deepcopy(element), group=outcome.property.group))
            return
        outcome.inject(self._parse_vcard(subtree, depth + 1))
        vcard.add(outcome.property)

    def _parse_parameters(self, element: etree._Element) -> VCardParameters:
        parameters = VCardParameters()
        for child in child_elements(element):
            if child.tag != PARAMETERS:
                continue
            for param in child_elements(child):
                param_name = local_name(param)
                for value in child_elements(param):
                    parameters.put(param_name, value.text or "")
        return parameters


class XCardWriter(VCardStreamWriter):
    """Builds an xCard document; it is written out by :meth:`close`.

    Args:
        out: Text stream or path to write to; None to only build the
            document (see :meth:`to_string`)
        compatibility_mode: Consumer whose quirks should be accommodated
        label_policy: Whether address labels are written as ADR parameters or
            as LABEL properties
        add_prodid: Add a PRODID property
        add_generator: Add an X-GENERATOR property
        indent: Pretty-print the XML
    """

    def __init__(
        self,
        out: IO[str] | Path | None = None,
        compatibility_mode: CompatibilityMode = CompatibilityMode.RFC,
        label_policy: LabelPolicy = LabelPolicy.AUTO,
        add_prodid: bool = True,
        add_generator: bool = False,
        indent: bool = False,
    ) -> None:
        super().__init__(VCardVersion.V4_0, compatibility_mode, label_policy, add_prodid, add_generator)
        self._open(out, "w")
        self.indent = indent
        self.root = etree.Element(VCARDS, nsmap={None: XCARD_NAMESPACE})

    def _write(self, vcard: VCard) -> None:
        self._check_required(vcard, VCardVersion.V4_0)
        vcard_element = etree.SubElement(self.root, VCARD)
        groups: dict[str, etree._Element] = {}

        for prop in self._properties_to_write(vcard, VCardVersion.V4_0, nested=False):
            parent = vcard_element
            if prop.group:
                parent = groups.get(prop.group)
                if parent is None:
                    parent = etree.SubElement(vcard_element, GROUP, name=prop.group)
                    groups[prop.group] = parent
            self._write_property(parent, vcard, prop)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"XCardWriter: wrote vCard\n{format_xml(etree.tostring(vcard_element))}")

    def _write_property(self, parent: etree._Element, vcard: VCard, prop: VCardProperty) -> None:
        scribe = self.index.get_scribe_for(prop)
        if scribe is None:
            self._warn(f"No scribe is registered for {type(prop).__name__}; skipping it.")
            return

        name = prop.name if isinstance(prop, RawProperty) else scribe.property_name
        if not scribe.supports_version(VCardVersion.V4_0):
            self._warn("Property is not supported by vCard 4.0; skipping it.", name)
            return

        context = WriteContext(VCardVersion.V4_0, self.compatibility_mode, vcard)
        parameters = scribe.prepare_parameters(prop, context)
        parameters.value_type = None

        element = etree.SubElement(parent, qname(name.lower()))
        if scribe.supports(DataFormat.XML):
            result = scribe.write_xml(prop, XCardElement(element), context)
        else:
            text = scribe.write_text(prop, context)
            if isinstance(text, str):
                self._warn("Property cannot be written as xCard; writing its text value.", name)
                XCardElement(element).append("unknown", unescape(text))
                result = None
            elif isinstance(text, Skip):
                result = text
            else:
                result = Skip("embedded vCards cannot be written as xCard")

        for message in context.warnings:
            self._warn(message, name)

        if isinstance(result, Skip):
            parent.remove(element)
            self._warn(f"Property skipped: {result.reason}", name)
            return

        if element.getparent() is None:
            # The scribe replaced the element with a preserved one
            return
        if len(parameters):
            element.insert(0, self._parameters_element(parameters))

    def _parameters_element(self, parameters: VCardParameters) -> etree._Element:
        element = etree.Element(PARAMETERS)
        for name, values in parameters.items():
            param = etree.SubElement(element, qname(name.lower()))
            data_type = PARAMETER_DATA_TYPES.get(name, "unknown")
            for value in values:
                etree.SubElement(param, qname(data_type)).text = value
        return element

    def to_string(self) -> str:
        return etree.tostring(self.root, encoding="unicode", pretty_print=self.indent)

    def close(self) -> None:
        """Write the document to the output and close it if it was opened from a path."""
        if self._stream is not None:
            data = etree.tostring(self.root, xml_declaration=True, encoding="UTF-8", pretty_print=self.indent)
            self._stream.write(data.decode("utf-8"))
        super().close()


def write_string(vcards: VCard | list[VCard], **kwargs: Any) -> str:
    """Write one or more vCards as an xCard document string."""
    if isinstance(vcards, VCard):
        vcards = [vcards]
    writer = XCardWriter(io.StringIO(), **kwargs)
    for vcard in vcards:
        writer.write(vcard)
    return writer.to_string()
