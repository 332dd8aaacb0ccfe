"""Property scribes: one per property class, marshalling it to and from every wire format."""

from .agent import AgentScribe
from .base import ALL_FORMATS, DataFormat, JCardValue, VCardPropertyScribe
from .binary import BinaryPropertyScribe, KeyScribe, LogoScribe, PhotoScribe, SoundScribe
from .dates import AnniversaryScribe, BirthdayScribe, DateOrTimeScribe, RevisionScribe
from .geo import GeoScribe
from .lists import CategoriesScribe, ListPropertyScribe, NicknameScribe
from .raw import RawPropertyScribe, XmlPropertyScribe
from .structured import AddressScribe, OrganizationScribe, StructuredNameScribe
from .text import TextPropertyScribe

__all__ = [
    "ALL_FORMATS",
    "AddressScribe",
    "AgentScribe",
    "AnniversaryScribe",
    "BinaryPropertyScribe",
    "BirthdayScribe",
    "CategoriesScribe",
    "DataFormat",
    "DateOrTimeScribe",
    "GeoScribe",
    "JCardValue",
    "KeyScribe",
    "ListPropertyScribe",
    "LogoScribe",
    "NicknameScribe",
    "OrganizationScribe",
    "PhotoScribe",
    "RawPropertyScribe",
    "RevisionScribe",
    "SoundScribe",
    "StructuredNameScribe",
    "TextPropertyScribe",
    "VCardPropertyScribe",
    "XmlPropertyScribe",
]
