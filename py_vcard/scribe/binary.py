"""Scribes for binary properties (PHOTO, LOGO, SOUND, KEY)."""

from __future__ import annotations

import base64
import binascii
import re
from typing import Any

from ..internal.html_utils import HCardElement
from ..internal.internal import ParseContext, ParseOutcome, Value, WriteContext
from ..parameters import VCardParameters
from ..properties import BinaryProperty, Key, Logo, Photo, Sound
from ..vcard import VCardVersion
from .base import VCardPropertyScribe

_DATA_URI = re.compile(r"^data:(?P<type>[^;,]*)(?P<params>(;[^;,]*)*?)(?P<base64>;base64)?,(?P<data>.*)$", re.DOTALL | re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def build_data_uri(content_type: str | None, data: bytes) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type or 'application/octet-stream'};base64,{encoded}"


def parse_data_uri(uri: str) -> tuple[str | None, bytes] | None:
    """Split a ``data:`` URI into its content type and decoded bytes.

    Returns None if ``uri`` is not a base64 data URI.
    """
    match = _DATA_URI.match(uri.strip())
    if match is None or match.group("base64") is None:
        return None
    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except binascii.Error:
        return None
    return match.group("type") or None, data


class BinaryPropertyScribe(VCardPropertyScribe):
    """Binary data is inline base64 or a URL.

    2.1 marks inline data with ``ENCODING=BASE64``, 3.0 with ``ENCODING=b``
    and 4.0 uses a ``data:`` URI. The TYPE parameter carries the short media
    type in 2.1 and 3.0 (``TYPE=jpeg``).
    """

    property_class = BinaryProperty
    escapes = False

    # Top-level media type used to expand short TYPE values
    media_type = "application"

    def default_data_type(self, version: VCardVersion) -> str | None:
        return "uri" if version is VCardVersion.V4_0 else None

    def data_type(self, prop: Any, version: VCardVersion) -> str | None:
        if version is VCardVersion.V4_0:
            return "uri"
        if prop.url is not None and prop.data is None:
            return "url" if version is VCardVersion.V2_1 else "uri"
        return None

    def _full_content_type(self, value: str | None) -> str | None:
        if not value:
            return None
        if "/" in value:
            return value
        return f"{self.media_type}/{value}"

    def _short_content_type(self, value: str | None) -> str | None:
        if not value:
            return None
        return value.split("/")[-1]

    def _prepare_parameters(self, prop: Any, parameters: VCardParameters, context: WriteContext) -> None:
        version = context.version
        parameters.encoding = None

        if version is VCardVersion.V4_0:
            if prop.data is None and prop.content_type:
                parameters.media_type = self._full_content_type(prop.content_type)
            return

        short = self._short_content_type(prop.content_type)
        if short and short not in parameters.types:
            parameters.add_type(short)
        if prop.data is not None:
            parameters.encoding = "base64" if version is VCardVersion.V2_1 else "b"

    def write_text(self, prop: Any, context: WriteContext) -> str:
        if prop.data is not None:
            if context.version is VCardVersion.V4_0:
                return build_data_uri(self._full_content_type(prop.content_type), prop.data)
            return base64.b64encode(prop.data).decode("ascii")
        if prop.url is not None:
            return prop.url
        context.add_warning("Property has neither data nor a URL.")
        return ""

    def _decode(self, value: str, context: ParseContext) -> bytes | None:
        if context.compatibility_mode.is_apple:
            # Apple folds base64 with extra indentation
            value = _WHITESPACE.sub("", value)
        try:
            return base64.b64decode(value, validate=True)
        except binascii.Error as e:
            context.add_warning(f"Could not decode base64 data: {e}")
            return None

    def parse_text(
        self,
        value: str,
        data_type: str | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        prop = self.new_property(parameters)
        encoding = parameters.encoding
        parameters.encoding = None
        parameters.value_type = None

        if encoding in ("b", "base64"):
            prop.data = self._decode(value, context)
            types = parameters.types
            if types:
                prop.content_type = self._full_content_type(types[0])
                parameters.remove("TYPE", types[0])
            return Value(prop)

        data_uri = parse_data_uri(value) if value.lower().startswith("data:") else None
        if data_uri is not None:
            prop.content_type, prop.data = data_uri
            return Value(prop)

        prop.url = value
        media_type = parameters.media_type
        if media_type:
            prop.content_type = media_type
            parameters.media_type = None
        elif parameters.types and context.version is not VCardVersion.V4_0:
            prop.content_type = self._full_content_type(parameters.types[0])
            parameters.remove("TYPE", parameters.types[0])
        return Value(prop)

    def write_html(self, prop: Any, element: HCardElement, context: WriteContext) -> None:
        if prop.data is not None:
            src = build_data_uri(self._full_content_type(prop.content_type), prop.data)
        else:
            src = prop.url or ""

        if self.media_type == "image":
            element.element.tag = "img"
            element.element.set("src", src)
        else:
            element.element.tag = "a"
            element.element.set("href", src)
            element.set_text(src)

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        src = element.attr("src") or element.attr("href") or element.attr("data") or element.value()
        return self.parse_text(src, None, VCardParameters(), context)


class PhotoScribe(BinaryPropertyScribe):
    property_class = Photo
    media_type = "image"


class LogoScribe(BinaryPropertyScribe):
    property_class = Logo
    media_type = "image"


class SoundScribe(BinaryPropertyScribe):
    property_class = Sound
    media_type = "audio"


class KeyScribe(BinaryPropertyScribe):
    property_class = Key
    media_type = "application"
