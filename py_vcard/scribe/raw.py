"""Scribes for properties without a dedicated class."""

from __future__ import annotations

import copy
from typing import Any

from lxml import etree

from ..internal.internal import ParseContext, ParseOutcome, Skip, Value, WriteContext
from ..internal.text import escape, unescape
from ..internal.xml_utils import XCardElement, local_name
from ..parameters import VCardParameters
from ..properties import RawProperty, XmlProperty
from ..vcard import VCardVersion
from .base import DataFormat, JCardValue, VCardPropertyScribe


class RawPropertyScribe(VCardPropertyScribe):
    """Keeps the value exactly as it was read; nothing is unescaped."""

    property_class = RawProperty
    formats = frozenset({DataFormat.TEXT, DataFormat.XML, DataFormat.JSON})
    escapes = False

    def __init__(self, property_name: str) -> None:
        super().__init__(RawProperty, property_name)

    def new_property(self, parameters: VCardParameters | None = None) -> Any:
        prop = RawProperty(self.property_name)
        if parameters is not None:
            prop.parameters = parameters
        return prop

    def default_data_type(self, version: VCardVersion) -> str | None:
        return None

    def data_type(self, prop: Any, version: VCardVersion) -> str | None:
        return prop.data_type

    def prepare_parameters(self, prop: Any, context: WriteContext) -> VCardParameters:
        return prop.parameters.copy()

    def write_text(self, prop: Any, context: WriteContext) -> str:
        return prop.value

    def parse_text(
        self,
        value: str,
        data_type: str | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        prop = self.new_property(parameters)
        prop.value = value
        prop.data_type = data_type
        return Value(prop)

    def parse_xml(self, element: XCardElement, parameters: VCardParameters, context: ParseContext) -> ParseOutcome:
        child = element.first_child()
        prop = self.new_property(parameters)
        if child is not None:
            prop.value = escape(child.text or "")
            data_type = local_name(child)
            prop.data_type = None if data_type == "unknown" else data_type
        return Value(prop)

    def write_xml(self, prop: Any, element: XCardElement, context: WriteContext) -> None:
        element.append(prop.data_type or "unknown", unescape(prop.value))

    def write_json(self, prop: Any, context: WriteContext) -> JCardValue:
        return JCardValue.single(unescape(prop.value))

    def parse_json(
        self,
        value: JCardValue,
        data_type: str | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        prop = self.new_property(parameters)
        prop.value = ",".join(escape(v) for v in value.as_multi())
        prop.data_type = None if data_type == "unknown" else data_type
        return Value(prop)


class XmlPropertyScribe(VCardPropertyScribe):
    """An xCard element kept as-is.

    In the text syntax (4.0 only) the element is serialized into the value of
    an ``XML`` property.
    """

    property_class = XmlProperty
    formats = frozenset({DataFormat.TEXT, DataFormat.XML})
    supported_versions = frozenset({VCardVersion.V4_0})

    def write_text(self, prop: Any, context: WriteContext) -> str | Skip:
        if prop.element is None:
            return Skip("XML property has no element")
        return escape(etree.tostring(prop.element, encoding="unicode", with_tail=False))

    def parse_text(
        self,
        value: str,
        data_type: str | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        prop = self.new_property(parameters)
        try:
            prop.element = etree.fromstring(unescape(value))
        except etree.XMLSyntaxError as e:
            context.add_warning(f"Value is not well-formed XML: {e}")
        return Value(prop)

    def write_xml(self, prop: Any, element: XCardElement, context: WriteContext) -> Skip | None:
        if prop.element is None:
            return Skip("XML property has no element")
        # The preserved element takes the place of the property element
        element.element.getparent().replace(element.element, copy.deepcopy(prop.element))
        return None

    def parse_xml(self, element: XCardElement, parameters: VCardParameters, context: ParseContext) -> ParseOutcome:
        prop = self.new_property(parameters)
        prop.element = copy.deepcopy(element.element)
        return Value(prop)
