"""The in-memory vCard document model."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, TypeVar

from .parameters import VCardParameters

XCARD_NAMESPACE = "urn:ietf:params:xml:ns:vcard-4.0"


class VCardVersion(Enum):
    """vCard format versions."""

    V2_1 = "2.1"
    V3_0 = "3.0"
    V4_0 = "4.0"

    @property
    def version(self) -> str:
        return self.value

    @property
    def xml_namespace(self) -> str | None:
        """XML namespace of the version; only 4.0 has an XML encoding."""
        return XCARD_NAMESPACE if self is VCardVersion.V4_0 else None

    @staticmethod
    def from_string(s: str) -> VCardVersion | None:
        """Look up a version by its string form (e.g. ``"3.0"``)."""
        s = s.strip()
        for v in VCardVersion:
            if v.value == s:
                return v
        return None

    def __str__(self) -> str:
        return self.value


ALL_VERSIONS = frozenset(VCardVersion)


@dataclass(kw_only=True)
class VCardProperty:
    """Base class of every vCard property.

    Subclasses must be constructible without arguments.
    """

    name: ClassVar[str] = ""

    group: str | None = None
    parameters: VCardParameters = field(default_factory=VCardParameters)


P = TypeVar("P", bound=VCardProperty)


@dataclass
class VCard:
    """A single contact: a version and an ordered list of properties.

    Properties are not unique by kind, a card may carry several TEL
    properties for example.
    """

    version: VCardVersion | None = None
    properties: list[VCardProperty] = field(default_factory=list)

    def add(self, prop: VCardProperty) -> None:
        self.properties.append(prop)

    def remove(self, prop: VCardProperty) -> None:
        self.properties.remove(prop)

    def get_properties(self, cls: type[P]) -> list[P]:
        """Get all properties that are instances of ``cls``."""
        return [p for p in self.properties if isinstance(p, cls)]

    def get_property(self, cls: type[P]) -> P | None:
        """Get the first property that is an instance of ``cls``."""
        for p in self.properties:
            if isinstance(p, cls):
                return p
        return None

    def get_properties_by_name(self, name: str) -> list[VCardProperty]:
        name = name.upper()
        return [p for p in self.properties if p.name.upper() == name]

    def _first_by_name(self, name: str) -> Any:
        found = self.get_properties_by_name(name)
        return found[0] if found else None

    @property
    def formatted_name(self) -> Any:
        """The first FN property, or None."""
        return self._first_by_name("FN")

    @property
    def structured_name(self) -> Any:
        """The first N property, or None."""
        return self._first_by_name("N")

    @property
    def agent(self) -> Any:
        """The first AGENT property, or None."""
        return self._first_by_name("AGENT")

    def add_extended(self, name: str, value: str) -> VCardProperty:
        """Add a property that has no dedicated class (e.g. ``X-MS-OL-DESIGN``)."""
        from .properties import RawProperty

        prop = RawProperty(name, value)
        self.add(prop)
        return prop

    def __iter__(self) -> Iterator[VCardProperty]:
        return iter(self.properties)

    def __len__(self) -> int:
        return len(self.properties)
