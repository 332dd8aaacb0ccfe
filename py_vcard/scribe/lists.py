"""Scribes for comma separated list values (NICKNAME, CATEGORIES)."""

from __future__ import annotations

from typing import Any

from ..internal.html_utils import HCardElement
from ..internal.internal import ParseContext, ParseOutcome, Skip, Value, WriteContext
from ..internal.text import escape, split_structured
from ..internal.xml_utils import XCardElement
from ..parameters import VCardParameters
from ..properties import Categories, ListProperty, Nickname
from ..vcard import VCardVersion
from .base import JCardValue, VCardPropertyScribe


class ListPropertyScribe(VCardPropertyScribe):
    property_class = ListProperty

    def write_text(self, prop: Any, context: WriteContext) -> str:
        return ",".join(escape(v) for v in prop.values)

    def parse_text(
        self,
        value: str,
        data_type: str | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        prop = self.new_property(parameters)
        if value:
            prop.values = [v.strip() for v in split_structured(value, ",")]
        return Value(prop)

    def write_xml(self, prop: Any, element: XCardElement, context: WriteContext) -> None:
        element.append_all("text", prop.values)

    def parse_xml(self, element: XCardElement, parameters: VCardParameters, context: ParseContext) -> ParseOutcome:
        prop = self.new_property(parameters)
        prop.values = element.all("text")
        return Value(prop)

    def write_json(self, prop: Any, context: WriteContext) -> JCardValue:
        return JCardValue.multi(prop.values)

    def parse_json(
        self,
        value: JCardValue,
        data_type: str | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        prop = self.new_property(parameters)
        prop.values = value.as_multi()
        return Value(prop)

    def write_html(self, prop: Any, element: HCardElement, context: WriteContext) -> Skip | None:
        element.set_text(", ".join(prop.values))
        return None


class NicknameScribe(ListPropertyScribe):
    property_class = Nickname
    supported_versions = frozenset({VCardVersion.V3_0, VCardVersion.V4_0})


class CategoriesScribe(ListPropertyScribe):
    property_class = Categories
    html_class = "category"
    supported_versions = frozenset({VCardVersion.V3_0, VCardVersion.V4_0})
