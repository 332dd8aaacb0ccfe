"""Debug logging utilities for the vCard readers and writers."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

from lxml import etree

logger = logging.getLogger("py_vcard")


def format_xml(xml_bytes: bytes | str) -> str:
    """Format XML with proper indentation.

    Args:
        xml_bytes: XML content as bytes or string

    Returns:
        Pretty-formatted XML string
    """
    try:
        if isinstance(xml_bytes, str):
            xml_bytes = xml_bytes.encode("utf-8")

        parser = etree.XMLParser(remove_blank_text=True)
        root = etree.fromstring(xml_bytes, parser)
        return etree.tostring(root, pretty_print=True, encoding="unicode")
    except etree.XMLSyntaxError:
        # Not well-formed, return as-is
        if isinstance(xml_bytes, bytes):
            return xml_bytes.decode("utf-8", errors="replace")
        return str(xml_bytes)


def format_json(value: Any) -> str:
    """Format a jCard value as indented JSON."""
    return json.dumps(value, indent=2, ensure_ascii=False)


def log_warnings(source: str, warnings: Iterable[Any]) -> None:
    """Log the warnings collected by a reader or writer.

    Args:
        source: What produced the warnings, e.g. ``"VCardReader"``
        warnings: Warning records
    """
    warnings = list(warnings)
    if not warnings:
        return

    logger.debug(f"{source}: {len(warnings)} warning(s)")
    for warning in warnings:
        logger.debug(f"  {warning}")


def setup_debug_logging() -> None:
    """Configure debug logging for py_vcard."""
    logger.setLevel(logging.DEBUG)

    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG)

    # Just the message, the readers and writers format their own lines
    formatter = logging.Formatter("%(message)s")
    handler.setFormatter(formatter)

    logger.addHandler(handler)

    # Prevent propagation to avoid duplicate logs
    logger.propagate = False
