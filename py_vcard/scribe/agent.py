"""Scribe for the AGENT property (2.1 and 3.0).

An agent is either a URL or a complete vCard. Nested vCards are handed to
the reader or writer as :class:`Embedded` / :class:`EmbeddedDocument`
outcomes; the scribe never parses or writes the nested document itself.
"""

from __future__ import annotations

from typing import Any

from ..internal.html_utils import HCardElement
from ..internal.internal import (
    Embedded,
    EmbeddedDocument,
    ParseContext,
    ParseOutcome,
    Skip,
    Value,
    WriteContext,
)
from ..internal.text import escape, unescape
from ..parameters import VCardParameters
from ..properties import Agent
from ..vcard import VCard, VCardVersion
from .base import DataFormat, VCardPropertyScribe


def _injector(prop: Agent):
    def inject(vcard: VCard) -> None:
        prop.vcard = vcard

    return inject


class AgentScribe(VCardPropertyScribe):
    property_class = Agent
    formats = frozenset({DataFormat.TEXT, DataFormat.HTML})
    supported_versions = frozenset({VCardVersion.V2_1, VCardVersion.V3_0})

    def default_data_type(self, version: VCardVersion) -> str | None:
        return None

    def data_type(self, prop: Any, version: VCardVersion) -> str | None:
        if prop.url is None:
            return None
        return "url" if version is VCardVersion.V2_1 else "uri"

    def write_text(self, prop: Any, context: WriteContext) -> str | Skip | EmbeddedDocument:
        if prop.url is not None:
            return escape(prop.url)
        if prop.vcard is not None:
            return EmbeddedDocument(prop.vcard)
        return Skip("AGENT has neither a URL nor a vCard")

    def parse_text(
        self,
        value: str,
        data_type: str | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        prop = self.new_property(parameters)
        if data_type is not None:
            parameters.value_type = None
            prop.url = unescape(value)
            return Value(prop)
        return Embedded(prop, _injector(prop))

    def write_html(self, prop: Any, element: HCardElement, context: WriteContext) -> Skip | EmbeddedDocument | None:
        if prop.url is not None:
            element.element.tag = "a"
            element.element.set("href", prop.url)
            element.set_text(prop.url)
            return None
        if prop.vcard is not None:
            return EmbeddedDocument(prop.vcard)
        return Skip("AGENT has neither a URL nor a vCard")

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        prop = self.new_property(VCardParameters())
        if element.has_class("vcard"):
            return Embedded(prop, _injector(prop), subtree=element.element)

        prop.url = element.attr("href") or element.value()
        return Value(prop)
