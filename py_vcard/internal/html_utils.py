"""HTML utilities for hCard."""

from __future__ import annotations

import re

from lxml import etree

_WHITESPACE = re.compile(r"[ \t\r\n\f]+")


def class_names(element: etree._Element) -> list[str]:
    return (element.get("class") or "").split()


def has_class(element: etree._Element, name: str) -> bool:
    return name in class_names(element)


def _iter_with_class(element: etree._Element, name: str, stop_at_vcard: bool = True):
    """Descendants with a class, not descending into nested vCards."""
    for child in element:
        if not isinstance(child.tag, str):
            continue
        if has_class(child, name):
            yield child
        if stop_at_vcard and has_class(child, "vcard"):
            continue
        yield from _iter_with_class(child, name, stop_at_vcard)


class HCardElement:
    """An HTML element carrying an hCard property."""

    def __init__(self, element: etree._Element) -> None:
        self.element = element

    @property
    def tag_name(self) -> str:
        return str(self.element.tag).lower()

    @property
    def class_names(self) -> list[str]:
        return class_names(self.element)

    def has_class(self, name: str) -> bool:
        return has_class(self.element, name)

    def attr(self, name: str) -> str:
        return self.element.get(name) or ""

    def find_all(self, class_name: str) -> list[HCardElement]:
        return [HCardElement(e) for e in _iter_with_class(self.element, class_name)]

    def first_value(self, class_name: str) -> str | None:
        for e in _iter_with_class(self.element, class_name):
            return HCardElement(e).value()
        return None

    def all_values(self, class_name: str) -> list[str]:
        return [HCardElement(e).value() for e in _iter_with_class(self.element, class_name)]

    def types(self) -> list[str]:
        """Values of the ``type`` sub-elements, lower-cased."""
        return [v.lower() for v in self.all_values("type") if v]

    def value(self) -> str:
        """The element's value, following the microformats value rules.

        ``abbr`` uses its title, ``time`` its datetime and ``data`` its value
        attribute. Otherwise, if there are ``value`` sub-elements their values
        are joined, else the visible text is used with ``type`` sub-elements
        left out.
        """
        tag = self.tag_name
        if tag in ("abbr", "acronym") and self.element.get("title") is not None:
            return self.attr("title")
        if tag == "time" and self.element.get("datetime") is not None:
            return self.attr("datetime")
        if tag in ("data", "input") and self.element.get("value") is not None:
            return self.attr("value")

        value_elements = list(_iter_with_class(self.element, "value"))
        if value_elements:
            return "".join(HCardElement(e).value() for e in value_elements)

        return _clean(_visible_text(self.element))

    def set_text(self, text: str) -> None:
        _set_text_with_breaks(self.element, text)

    def append(self, tag: str, class_name: str | None = None, text: str | None = None) -> etree._Element:
        """Add a child element (used when writing hCards)."""
        child = etree.SubElement(self.element, tag)
        if class_name:
            child.set("class", class_name)
        if text is not None:
            _set_text_with_breaks(child, text)
        return child


def _visible_text(element: etree._Element) -> str:
    parts = [element.text or ""]
    for child in element:
        if isinstance(child.tag, str):
            if str(child.tag).lower() == "br":
                parts.append("\n")
            elif not has_class(child, "type"):
                parts.append(_visible_text(child))
        parts.append(child.tail or "")
    return "".join(parts)


def _clean(text: str) -> str:
    lines = [_WHITESPACE.sub(" ", line).strip() for line in text.split("\n")]
    return "\n".join(line for line in lines if line)


def _set_text_with_breaks(element: etree._Element, text: str) -> None:
    """Set element text, turning line breaks into ``<br>`` elements."""
    lines = re.split(r"\r\n|\r|\n", text)
    element.text = lines[0]
    for line in lines[1:]:
        br = etree.SubElement(element, "br")
        br.tail = line
