"""XML utilities for xCard."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from lxml import etree

from ..vcard import XCARD_NAMESPACE


def qname(local: str, namespace: str = XCARD_NAMESPACE) -> str:
    """Clark notation name, e.g. ``{urn:...:vcard-4.0}fn``."""
    return f"{{{namespace}}}{local}"


def local_name(element: etree._Element) -> str:
    return etree.QName(element).localname


def namespace_of(element: etree._Element) -> str | None:
    return etree.QName(element).namespace


def child_elements(element: etree._Element) -> Iterator[etree._Element]:
    """Child elements, skipping comments and processing instructions."""
    for child in element:
        if isinstance(child.tag, str):
            yield child


class XCardElement:
    """A property element of an xCard document.

    Property values are child elements whose tag names the data type, e.g.
    ``<fn><text>John Doe</text></fn>``.
    """

    def __init__(self, element: etree._Element) -> None:
        self.element = element
        self.namespace = namespace_of(element) or XCARD_NAMESPACE

    @property
    def name(self) -> str:
        return local_name(self.element)

    def first(self, *data_types: str) -> str | None:
        """Text of the first child whose tag is one of ``data_types``."""
        for child in child_elements(self.element):
            if local_name(child) in data_types and namespace_of(child) == self.namespace:
                return child.text or ""
        return None

    def all(self, data_type: str) -> list[str]:
        return [
            child.text or ""
            for child in child_elements(self.element)
            if local_name(child) == data_type and namespace_of(child) == self.namespace
        ]

    def first_child(self) -> etree._Element | None:
        for child in child_elements(self.element):
            if local_name(child) != "parameters":
                return child
        return None

    def append(self, data_type: str, value: str | None) -> etree._Element:
        child = etree.SubElement(self.element, qname(data_type, self.namespace))
        child.text = value or ""
        return child

    def append_all(self, data_type: str, values: Iterable[str]) -> None:
        for value in values:
            self.append(data_type, value)
