"""Scribes for structured values: N, ORG and ADR.

Components are ``;`` separated. A component may itself be a ``,``
separated list (the N name parts other than family and given name).
"""

from __future__ import annotations

from typing import Any

from ..internal.html_utils import HCardElement
from ..internal.internal import ParseContext, ParseOutcome, Skip, Value, WriteContext
from ..internal.text import join_structured, split_structured, unescape
from ..internal.xml_utils import XCardElement
from ..parameters import VCardParameters
from ..properties import Address, Organization, StructuredName
from .base import JCardValue, VCardPropertyScribe


def _components(value: str) -> list[str]:
    return split_structured(value, ";", unescape_parts=False)


def _single(component: str) -> str | None:
    component = unescape(component)
    return component or None


def _multi(component: str) -> list[str]:
    if not component:
        return []
    return [v for v in split_structured(component, ",") if v]


def _get(components: list[Any], index: int, default: Any = "") -> Any:
    return components[index] if index < len(components) else default


def _first(values: list[str]) -> str | None:
    return values[0] if values and values[0] else None


class StructuredNameScribe(VCardPropertyScribe):
    property_class = StructuredName
    html_class = "n"

    # (attribute, xCard element, hCard class, is a list)
    FIELDS = (
        ("family", "surname", "family-name", False),
        ("given", "given", "given-name", False),
        ("additional", "additional", "additional-name", True),
        ("prefixes", "prefix", "honorific-prefix", True),
        ("suffixes", "suffix", "honorific-suffix", True),
    )

    def _values(self, prop: Any) -> list[str | list[str] | None]:
        return [getattr(prop, attr) for attr, _, _, _ in self.FIELDS]

    def write_text(self, prop: Any, context: WriteContext) -> str:
        return join_structured(self._values(prop))

    def parse_text(
        self,
        value: str,
        data_type: str | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        prop = self.new_property(parameters)
        components = _components(value)
        for index, (attr, _, _, is_list) in enumerate(self.FIELDS):
            component = _get(components, index)
            setattr(prop, attr, _multi(component) if is_list else _single(component))
        return Value(prop)

    def write_xml(self, prop: Any, element: XCardElement, context: WriteContext) -> None:
        for attr, tag, _, is_list in self.FIELDS:
            value = getattr(prop, attr)
            if is_list:
                element.append_all(tag, value)
            else:
                element.append(tag, value)

    def parse_xml(self, element: XCardElement, parameters: VCardParameters, context: ParseContext) -> ParseOutcome:
        prop = self.new_property(parameters)
        for attr, tag, _, is_list in self.FIELDS:
            values = [v for v in element.all(tag) if v]
            setattr(prop, attr, values if is_list else _first(values))
        return Value(prop)

    def write_json(self, prop: Any, context: WriteContext) -> JCardValue:
        return JCardValue.structured(self._values(prop))

    def parse_json(
        self,
        value: JCardValue,
        data_type: str | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        prop = self.new_property(parameters)
        components = value.as_structured()
        for index, (attr, _, _, is_list) in enumerate(self.FIELDS):
            values = [v for v in _get(components, index, []) if v]
            setattr(prop, attr, values if is_list else _first(values))
        return Value(prop)

    def write_html(self, prop: Any, element: HCardElement, context: WriteContext) -> None:
        for attr, _, css_class, is_list in self.FIELDS:
            value = getattr(prop, attr)
            for v in value if is_list else [value]:
                if v:
                    element.append("span", css_class, v)
                    element.element[-1].tail = " "

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        prop = self.new_property(VCardParameters())
        for attr, _, css_class, is_list in self.FIELDS:
            values = element.all_values(css_class)
            setattr(prop, attr, values if is_list else _first(values))
        return Value(prop)


class OrganizationScribe(VCardPropertyScribe):
    property_class = Organization

    def write_text(self, prop: Any, context: WriteContext) -> str:
        return join_structured(prop.values)

    def parse_text(
        self,
        value: str,
        data_type: str | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        prop = self.new_property(parameters)
        prop.values = split_structured(value, ";") if value else []
        return Value(prop)

    def write_xml(self, prop: Any, element: XCardElement, context: WriteContext) -> None:
        element.append_all("text", prop.values)

    def parse_xml(self, element: XCardElement, parameters: VCardParameters, context: ParseContext) -> ParseOutcome:
        prop = self.new_property(parameters)
        prop.values = element.all("text")
        return Value(prop)

    def write_json(self, prop: Any, context: WriteContext) -> JCardValue:
        if len(prop.values) == 1:
            return JCardValue.single(prop.values[0])
        return JCardValue([list(prop.values)])

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

    def write_html(self, prop: Any, element: HCardElement, context: WriteContext) -> None:
        if not prop.values:
            return
        element.append("span", "organization-name", prop.values[0])
        for unit in prop.values[1:]:
            element.element[-1].tail = ", "
            element.append("span", "organization-unit", unit)

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        prop = self.new_property(VCardParameters())
        name = element.first_value("organization-name")
        units = element.all_values("organization-unit")
        if name is None and not units:
            value = element.value()
            prop.values = [value] if value else []
        else:
            prop.values = ([name] if name is not None else []) + units
        return Value(prop)


class AddressScribe(VCardPropertyScribe):
    property_class = Address

    # (attribute, xCard element, hCard class)
    FIELDS = (
        ("po_box", "pobox", "post-office-box"),
        ("extended_address", "ext", "extended-address"),
        ("street_address", "street", "street-address"),
        ("locality", "locality", "locality"),
        ("region", "region", "region"),
        ("postal_code", "code", "postal-code"),
        ("country", "country", "country-name"),
    )

    def write_text(self, prop: Any, context: WriteContext) -> str:
        return join_structured(getattr(prop, attr) for attr, _, _ in self.FIELDS)

    def parse_text(
        self,
        value: str,
        data_type: str | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        prop = self.new_property(parameters)
        components = _components(value)
        for index, (attr, _, _) in enumerate(self.FIELDS):
            setattr(prop, attr, _single(_get(components, index)))
        return Value(prop)

    def write_xml(self, prop: Any, element: XCardElement, context: WriteContext) -> None:
        for attr, tag, _ in self.FIELDS:
            element.append(tag, getattr(prop, attr))

    def parse_xml(self, element: XCardElement, parameters: VCardParameters, context: ParseContext) -> ParseOutcome:
        prop = self.new_property(parameters)
        for attr, tag, _ in self.FIELDS:
            setattr(prop, attr, _first(element.all(tag)))
        return Value(prop)

    def write_json(self, prop: Any, context: WriteContext) -> JCardValue:
        return JCardValue.structured([getattr(prop, attr) for attr, _, _ in self.FIELDS])

    def parse_json(
        self,
        value: JCardValue,
        data_type: str | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        prop = self.new_property(parameters)
        components = value.as_structured()
        for index, (attr, _, _) in enumerate(self.FIELDS):
            setattr(prop, attr, _first(_get(components, index, [])))
        return Value(prop)

    def write_html(self, prop: Any, element: HCardElement, context: WriteContext) -> Skip | None:
        for t in prop.parameters.types:
            element.append("span", "type", t)
        for attr, _, css_class in self.FIELDS:
            value = getattr(prop, attr)
            if value:
                element.append("div", css_class, value)
        return None

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        parameters = VCardParameters()
        for t in element.types():
            parameters.add_type(t)
        prop = self.new_property(parameters)
        for attr, _, css_class in self.FIELDS:
            setattr(prop, attr, element.first_value(css_class))
        return Value(prop)
