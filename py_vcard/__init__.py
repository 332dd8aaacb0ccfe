"""A Python library for reading and writing vCards.

Supports the line-oriented syntax (2.1, 3.0 and 4.0), xCard, jCard and hCard.
"""

from .config import (
    MIME_DIR_FOLDING,
    MS_OUTLOOK_FOLDING,
    CompatibilityMode,
    FoldingScheme,
    LabelPolicy,
    ParameterStyle,
)
from .internal.internal import ParseWarning, RegistrationError, VCardError, VCardParseError
from .io import (
    HCardReader,
    HCardWriter,
    JCardReader,
    JCardWriter,
    VCardReader,
    VCardWriter,
    XCardReader,
    XCardWriter,
)
from .io.text_writer import write_string
from .parameters import VCardParameters
from .registry import ScribeIndex
from .vcard import VCard, VCardProperty, VCardVersion

__version__ = "0.1.0"


def parse(text: str, **kwargs) -> VCard | None:
    """Read the first vCard of a string in the line-oriented syntax."""
    with VCardReader(text, **kwargs) as reader:
        return reader.read_next()


def parse_all(text: str, **kwargs) -> list[VCard]:
    """Read every vCard of a string in the line-oriented syntax."""
    with VCardReader(text, **kwargs) as reader:
        return reader.read_all()


__all__ = [
    "VCard",
    "VCardProperty",
    "VCardVersion",
    "VCardParameters",
    "ScribeIndex",
    "VCardReader",
    "VCardWriter",
    "XCardReader",
    "XCardWriter",
    "JCardReader",
    "JCardWriter",
    "HCardReader",
    "HCardWriter",
    "CompatibilityMode",
    "FoldingScheme",
    "LabelPolicy",
    "ParameterStyle",
    "MIME_DIR_FOLDING",
    "MS_OUTLOOK_FOLDING",
    "ParseWarning",
    "VCardError",
    "VCardParseError",
    "RegistrationError",
    "parse",
    "parse_all",
    "write_string",
]
