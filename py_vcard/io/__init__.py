"""Readers and writers for the vCard wire formats."""

from .base import VCardStreamReader, VCardStreamWriter
from .hcard import HCardReader, HCardWriter
from .jcard import JCardReader, JCardWriter
from .text_reader import VCardReader
from .text_writer import VCardWriter
from .xcard import XCardReader, XCardWriter

__all__ = [
    "VCardStreamReader",
    "VCardStreamWriter",
    "VCardReader",
    "VCardWriter",
    "XCardReader",
    "XCardWriter",
    "JCardReader",
    "JCardWriter",
    "HCardReader",
    "HCardWriter",
]
