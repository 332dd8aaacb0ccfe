"""Scribe base class.

A scribe knows how to turn one kind of property into each wire format and
back. Scribes never raise for bad data: problems are recorded as warnings
in the context and a best-effort property is returned.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..internal.html_utils import HCardElement
from ..internal.internal import (
    EmbeddedDocument,
    ParseContext,
    ParseOutcome,
    Skip,
    WriteContext,
)
from ..internal.text import escape, unescape
from ..internal.xml_utils import XCardElement, local_name, qname
from ..parameters import VCardParameters
from ..vcard import ALL_VERSIONS, VCardProperty, VCardVersion


class DataFormat(Enum):
    """Wire formats a scribe can handle."""

    TEXT = "text"
    XML = "xml"
    JSON = "json"
    HTML = "html"


ALL_FORMATS = frozenset(DataFormat)


@dataclass
class JCardValue:
    """The value part of a jCard property array.

    ``values`` holds everything after the data type: one item for a single
    value, several for a multi-valued property, or one list for a structured
    value.
    """

    values: list[Any] = field(default_factory=list)

    @classmethod
    def single(cls, value: Any) -> JCardValue:
        return cls([value])

    @classmethod
    def multi(cls, values: Sequence[Any]) -> JCardValue:
        return cls(list(values))

    @classmethod
    def structured(cls, components: Sequence[str | list[str] | None]) -> JCardValue:
        """A structured value; list components with one item are flattened."""
        out: list[Any] = []
        for component in components:
            if component is None:
                out.append("")
            elif isinstance(component, list):
                if len(component) == 1:
                    out.append(component[0])
                elif not component:
                    out.append("")
                else:
                    out.append(list(component))
            else:
                out.append(component)
        return cls([out])

    def as_single(self) -> str:
        if not self.values:
            return ""
        value = self.values[0]
        if isinstance(value, list):
            return _to_str(value[0]) if value else ""
        return _to_str(value)

    def as_multi(self) -> list[str]:
        out = []
        for value in self.values:
            if isinstance(value, list):
                out.extend(_to_str(v) for v in value)
            else:
                out.append(_to_str(value))
        return out

    def as_structured(self) -> list[list[str]]:
        """Components of a structured value, each a (possibly empty) list."""
        if len(self.values) == 1 and isinstance(self.values[0], list):
            components = self.values[0]
        else:
            components = self.values

        out = []
        for component in components:
            if isinstance(component, list):
                out.append([_to_str(v) for v in component])
            elif component is None or component == "":
                out.append([])
            else:
                out.append([_to_str(component)])
        return out


def _to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class VCardPropertyScribe:
    """Marshals and unmarshals one property class.

    The default XML, JSON and HTML implementations go through the text
    methods: the value is unescaped when written and escaped again before
    it is parsed. Scribes override them when the format has richer
    structure.
    """

    property_class: type[VCardProperty] = VCardProperty
    property_name: str = ""
    formats: frozenset[DataFormat] = frozenset({DataFormat.TEXT, DataFormat.XML, DataFormat.JSON, DataFormat.HTML})
    supported_versions: frozenset[VCardVersion] = ALL_VERSIONS
    html_class: str | None = None
    # Whether values are backslash escaped in the text syntax
    escapes: bool = True

    def __init__(self, property_class: type[VCardProperty] | None = None, property_name: str | None = None) -> None:
        if property_class is not None:
            self.property_class = property_class
        if property_name is not None:
            self.property_name = property_name
        elif not self.property_name:
            self.property_name = self.property_class.name
        self.property_name = self.property_name.upper()
        if self.html_class is None:
            self.html_class = self.property_name.lower()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.property_name})"

    @property
    def qname(self) -> str:
        """Qualified xCard element name of the property."""
        return qname(self.property_name.lower())

    def supports(self, fmt: DataFormat) -> bool:
        return fmt in self.formats

    def supports_version(self, version: VCardVersion) -> bool:
        return version in self.supported_versions

    def new_property(self, parameters: VCardParameters | None = None) -> Any:
        prop = self.property_class()
        if parameters is not None:
            prop.parameters = parameters
        return prop

    def _escape(self, value: str) -> str:
        return escape(value) if self.escapes else value

    def _unescape(self, value: str) -> str:
        return unescape(value) if self.escapes else value

    # Data types

    def default_data_type(self, version: VCardVersion) -> str | None:
        """Data type assumed when a property has no VALUE parameter."""
        return "text"

    def data_type(self, prop: VCardProperty, version: VCardVersion) -> str | None:
        """Data type of a particular property value."""
        return self.default_data_type(version)

    def prepare_parameters(self, prop: VCardProperty, context: WriteContext) -> VCardParameters:
        """Parameters to write for a property.

        Returns a copy; the property itself is not modified. A VALUE
        parameter is added when the value's data type is not the default.
        """
        parameters = prop.parameters.copy()
        data_type = self.data_type(prop, context.version)
        if data_type is not None and data_type != self.default_data_type(context.version):
            parameters.value_type = data_type
        self._prepare_parameters(prop, parameters, context)
        return parameters

    def _prepare_parameters(self, prop: Any, parameters: VCardParameters, context: WriteContext) -> None:
        """Hook for subclasses to adjust the parameters being written."""

    # Line-oriented text

    def write_text(self, prop: Any, context: WriteContext) -> str | Skip | EmbeddedDocument:
        """Marshal the property value, escaped for the text syntax."""
        raise NotImplementedError

    def parse_text(
        self,
        value: str,
        data_type: str | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        """Unmarshal a raw (still escaped) text value."""
        raise NotImplementedError

    # xCard

    def write_xml(self, prop: Any, element: XCardElement, context: WriteContext) -> Skip | None:
        result = self.write_text(prop, context)
        if isinstance(result, Skip):
            return result
        if isinstance(result, EmbeddedDocument):
            return Skip("embedded vCards are not supported in xCard")
        element.append(self.data_type(prop, context.version) or "unknown", self._unescape(result))
        return None

    def parse_xml(self, element: XCardElement, parameters: VCardParameters, context: ParseContext) -> ParseOutcome:
        child = element.first_child()
        if child is None:
            return self.parse_text("", None, parameters, context)
        return self.parse_text(self._escape(child.text or ""), local_name(child), parameters, context)

    # jCard

    def write_json(self, prop: Any, context: WriteContext) -> JCardValue | Skip:
        result = self.write_text(prop, context)
        if isinstance(result, Skip):
            return result
        if isinstance(result, EmbeddedDocument):
            return Skip("embedded vCards are not supported in jCard")
        return JCardValue.single(self._unescape(result))

    def parse_json(
        self,
        value: JCardValue,
        data_type: str | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        return self.parse_text(self._escape(value.as_single()), data_type, parameters, context)

    # hCard

    def write_html(self, prop: Any, element: HCardElement, context: WriteContext) -> Skip | EmbeddedDocument | None:
        result = self.write_text(prop, context)
        if isinstance(result, (Skip, EmbeddedDocument)):
            return result
        element.set_text(self._unescape(result))
        return None

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        parameters = VCardParameters()
        for t in element.types():
            parameters.add_type(t)
        return self.parse_text(self._escape(element.value()), None, parameters, context)

