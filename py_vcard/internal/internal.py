"""Low-level types shared by the vCard readers, writers and scribes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from ..config import CompatibilityMode
    from ..vcard import VCard, VCardProperty, VCardVersion


class VCardError(Exception):
    """Base class for all errors raised by py_vcard."""


class VCardParseError(VCardError):
    """Structural error in a vCard data stream.

    Raised for problems that make the current document unreadable, such as
    an XML syntax error or a JSON document that is not a jCard.
    """

    def __init__(self, message: str, line: int | None = None):
        self.message = message
        self.line = line
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.line is not None:
            return f"line {self.line}: {self.message}"
        return self.message


class RegistrationError(VCardError, TypeError):
    """A scribe could not be registered."""


@dataclass
class ParseWarning:
    """A non-fatal problem found while reading or writing a vCard."""

    message: str
    property_name: str | None = None
    line: int | None = None

    def __str__(self) -> str:
        parts = []
        if self.line is not None:
            parts.append(f"Line {self.line}")
        if self.property_name:
            parts.append(f"({self.property_name} property)")
        if not parts:
            return self.message
        return f"{' '.join(parts)}: {self.message}"


# Tagged outcomes returned by scribes. Skipping a property or handing over an
# embedded document is ordinary control flow, not an exception.


@dataclass
class Value:
    """The property was parsed successfully."""

    property: VCardProperty


@dataclass
class Skip:
    """The property asked not to be read or written."""

    reason: str


@dataclass
class Embedded:
    """The property value is itself a vCard.

    ``inject`` is called with the nested document once the reader has parsed
    it. Tree formats set ``subtree`` to the element holding the nested card so
    the reader does not have to re-tokenize anything.
    """

    property: VCardProperty
    inject: Callable[[VCard], None]
    subtree: Any = None


@dataclass
class EmbeddedDocument:
    """Returned by a scribe when the value to write is a nested vCard."""

    vcard: VCard


ParseOutcome = Value | Skip | Embedded


@dataclass
class ParseContext:
    """State handed to a scribe while it parses one property."""

    version: VCardVersion
    compatibility_mode: CompatibilityMode
    property_name: str | None = None
    line: int | None = None
    warnings: list[str] = field(default_factory=list)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)


@dataclass
class WriteContext:
    """State handed to a scribe while it writes one property."""

    version: VCardVersion
    compatibility_mode: CompatibilityMode
    vcard: VCard | None = None
    warnings: list[str] = field(default_factory=list)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)
