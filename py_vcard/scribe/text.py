"""Scribes for properties whose value is one piece of text."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ..internal.html_utils import HCardElement
from ..internal.internal import ParseContext, ParseOutcome, Skip, Value, WriteContext
from ..parameters import VCardParameters
from ..properties import TextProperty
from ..vcard import ALL_VERSIONS, VCardVersion
from .base import VCardPropertyScribe


class TextPropertyScribe(VCardPropertyScribe):
    """Scribe for a :class:`TextProperty` subclass.

    Args:
        property_class: The property class
        versions: Versions the property exists in (all by default)
        value_type: "text", or "uri" for properties such as URL whose value
            is not escaped
        link_scheme: For hCard, the value is written as an ``<a href>`` with
            this prefix ("mailto:" for EMAIL); None writes plain text
    """

    def __init__(
        self,
        property_class: type[TextProperty],
        versions: Iterable[VCardVersion] | None = None,
        value_type: str = "text",
        link_scheme: str | None = None,
    ) -> None:
        super().__init__(property_class)
        self.supported_versions = frozenset(versions) if versions is not None else ALL_VERSIONS
        self.value_type = value_type
        self.escapes = value_type == "text"
        self.link_scheme = link_scheme

    def default_data_type(self, version: VCardVersion) -> str | None:
        return self.value_type

    def write_text(self, prop: Any, context: WriteContext) -> str | Skip:
        if prop.value is None:
            return ""
        return self._escape(prop.value)

    def parse_text(
        self,
        value: str,
        data_type: str | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        prop = self.new_property(parameters)
        prop.value = self._unescape(value)
        return Value(prop)

    def write_html(self, prop: Any, element: HCardElement, context: WriteContext) -> Skip | None:
        for t in prop.parameters.types:
            element.append("span", "type", t)
        value = prop.value or ""

        if self.link_scheme is None:
            if prop.parameters.types:
                element.append("span", "value", value)
            else:
                element.set_text(value)
            return None

        if prop.parameters.types:
            link = element.append("a", "value", value)
        else:
            element.element.tag = "a"
            element.set_text(value)
            link = element.element
        link.set("href", self.link_scheme + value)
        return None

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        parameters = VCardParameters()
        for t in element.types():
            parameters.add_type(t)

        value = None
        if self.link_scheme is not None:
            links = [element] if element.tag_name == "a" else element.find_all("value")
            for link in links:
                href = link.attr("href")
                if href and href.lower().startswith(self.link_scheme):
                    value = href[len(self.link_scheme) :]
                    break
        if value is None:
            value = element.value()

        prop = self.new_property(parameters)
        prop.value = value
        return Value(prop)
