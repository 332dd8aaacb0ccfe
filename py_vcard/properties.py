"""vCard property classes.

Only a representative set of properties has a dedicated class. Anything else
is read into a :class:`RawProperty` (or an :class:`XmlProperty` for xCard).
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Any

from .vcard import VCard, VCardProperty


class TypedMixin:
    """Access to the TYPE parameter."""

    parameters: Any

    @property
    def types(self) -> list[str]:
        return self.parameters.types

    def add_type(self, value: str) -> None:
        self.parameters.add_type(value)


@dataclass
class TextProperty(VCardProperty):
    """A property whose value is a single piece of text."""

    value: str | None = None


class FormattedName(TextProperty):
    name = "FN"


class Note(TextProperty):
    name = "NOTE"


class Title(TextProperty):
    name = "TITLE"


class Role(TextProperty):
    name = "ROLE"


class Email(TypedMixin, TextProperty):
    name = "EMAIL"


class Telephone(TypedMixin, TextProperty):
    name = "TEL"


class Uid(TextProperty):
    name = "UID"


class Url(TypedMixin, TextProperty):
    name = "URL"


class Source(TextProperty):
    name = "SOURCE"


class Label(TypedMixin, TextProperty):
    """Delivery label of an address (2.1 and 3.0 only)."""

    name = "LABEL"


class Mailer(TextProperty):
    name = "MAILER"


class ProdId(TextProperty):
    name = "PRODID"


class SortString(TextProperty):
    name = "SORT-STRING"


class Classification(TextProperty):
    name = "CLASS"


class SourceDisplayText(TextProperty):
    name = "NAME"


class Profile(TextProperty):
    """Always "VCARD" (3.0 only)."""

    name = "PROFILE"

    def __init__(self, value: str | None = "VCARD", **kwargs: Any) -> None:
        super().__init__(value, **kwargs)


class Kind(TextProperty):
    name = "KIND"


@dataclass
class ListProperty(VCardProperty):
    """A property whose value is a comma separated list."""

    values: list[str] = field(default_factory=list)


class Nickname(ListProperty):
    name = "NICKNAME"


class Categories(ListProperty):
    name = "CATEGORIES"


@dataclass
class StructuredName(VCardProperty):
    name = "N"

    family: str | None = None
    given: str | None = None
    additional: list[str] = field(default_factory=list)
    prefixes: list[str] = field(default_factory=list)
    suffixes: list[str] = field(default_factory=list)


@dataclass
class Organization(VCardProperty):
    """Organization name followed by its units."""

    name = "ORG"

    values: list[str] = field(default_factory=list)


@dataclass
class Address(TypedMixin, VCardProperty):
    name = "ADR"

    po_box: str | None = None
    extended_address: str | None = None
    street_address: str | None = None
    locality: str | None = None
    region: str | None = None
    postal_code: str | None = None
    country: str | None = None

    @property
    def label(self) -> str | None:
        return self.parameters.label

    @label.setter
    def label(self, value: str | None) -> None:
        self.parameters.label = value


@dataclass
class Geo(VCardProperty):
    name = "GEO"

    latitude: float | None = None
    longitude: float | None = None


@dataclass
class DateOrTimeProperty(VCardProperty):
    """A date, a date-time, or (4.0 only) free text such as "circa 1800"."""

    date: datetime.date | datetime.datetime | None = None
    text: str | None = None


class Birthday(DateOrTimeProperty):
    name = "BDAY"


class Anniversary(DateOrTimeProperty):
    name = "ANNIVERSARY"


class Revision(DateOrTimeProperty):
    name = "REV"


@dataclass
class BinaryProperty(VCardProperty):
    """Inline binary data or a URL pointing to it."""

    data: bytes | None = None
    url: str | None = None
    content_type: str | None = None


class Photo(BinaryProperty):
    name = "PHOTO"


class Logo(BinaryProperty):
    name = "LOGO"


class Sound(BinaryProperty):
    name = "SOUND"


class Key(BinaryProperty):
    name = "KEY"


@dataclass
class Agent(VCardProperty):
    """Someone acting on behalf of the contact: a URL or an embedded vCard."""

    name = "AGENT"

    url: str | None = None
    vcard: VCard | None = None


@dataclass
class RawProperty(VCardProperty):
    """A property without a dedicated class. The value is kept verbatim."""

    name: str = ""
    value: str = ""
    data_type: str | None = None


@dataclass
class XmlProperty(VCardProperty):
    """An xCard element that could not be mapped to a property."""

    name = "XML"

    element: Any = None
