"""Reader and writer configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum

MAX_DEPTH = int(os.getenv("PY_VCARD_MAX_DEPTH", "30"))
PRODID = os.getenv("PY_VCARD_PRODID", "-//py-vcard//py-vcard//EN")
GENERATOR = os.getenv("PY_VCARD_GENERATOR", "py-vcard")


class CompatibilityMode(Enum):
    """Known producers whose vCards deviate from the standards."""

    RFC = "rfc"
    MS_OUTLOOK = "ms-outlook"
    MAC_ADDRESS_BOOK = "mac-address-book"
    I_PHONE = "iphone"
    GMAIL = "gmail"
    EVOLUTION = "evolution"

    @property
    def is_apple(self) -> bool:
        return self in (CompatibilityMode.MAC_ADDRESS_BOOK, CompatibilityMode.I_PHONE)


@dataclass(frozen=True)
class FoldingScheme:
    """How long lines are wrapped."""

    max_chars: int
    indent: str = " "


MIME_DIR_FOLDING = FoldingScheme(75, " ")
MS_OUTLOOK_FOLDING = FoldingScheme(74, " ")


class ParameterStyle(Enum):
    """How a parameter with several values is written."""

    VALUE_LIST = "value-list"  # TYPE=home,work
    REPEATED = "repeated"  # TYPE=home;TYPE=work


class LabelPolicy(Enum):
    """Where a delivery label lives: ADR;LABEL= parameter or LABEL property.

    AUTO uses the parameter for 4.0 and the separate property for 2.1/3.0.
    """

    AUTO = "auto"
    PARAMETER = "parameter"
    PROPERTY = "property"
