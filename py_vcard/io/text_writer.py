"""Writer for the line-oriented vCard syntax (2.1, 3.0 and 4.0)."""

from __future__ import annotations

import io
import logging
import re
from pathlib import Path
from typing import TextIO

from ..config import (
    MAX_DEPTH,
    MIME_DIR_FOLDING,
    CompatibilityMode,
    FoldingScheme,
    LabelPolicy,
    ParameterStyle,
)
from ..internal.internal import EmbeddedDocument, Skip, WriteContext
from ..internal.text import (
    encode_caret,
    encode_quoted_printable,
    escape,
    fold,
    fold_quoted_printable,
    quote_parameter_value,
    unescape,
    unescape_newlines,
)
from ..parameters import VCardParameters
from ..properties import Address, ProdId, RawProperty
from ..scribe.base import DataFormat
from ..vcard import VCard, VCardProperty, VCardVersion
from .base import VCardStreamWriter

logger = logging.getLogger("py_vcard.io.text")

# Control characters are not allowed in parameter values
_INVALID_PARAMETER_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")

# Parameters whose values are written upper-case in 2.1
_UPPER_CASE_21 = {"TYPE", "ENCODING", "VALUE", "CHARSET"}

# A logical line and whether it may be folded
Line = tuple[str, bool]


class VCardWriter(VCardStreamWriter):
    """Writes vCards in the line-oriented syntax.

    Args:
        out: Text stream or path of the file to write
        version: Version to write
        folding: How long lines are folded; None disables folding
        newline: Line terminator
        compatibility_mode: Consumer whose quirks should be accommodated
        parameter_style: How multi-valued parameters are written
        label_policy: Whether address labels are written as ADR parameters or
            as LABEL properties
        add_prodid: Add a PRODID property (X-PRODID in 2.1)
        add_generator: Add an X-GENERATOR property

    Example:
        >>> out = io.StringIO()
        >>> VCardWriter(out, VCardVersion.V3_0, add_prodid=False).write(vcard)
    """

    max_depth = MAX_DEPTH

    def __init__(
        self,
        out: TextIO | Path,
        version: VCardVersion = VCardVersion.V3_0,
        folding: FoldingScheme | None = MIME_DIR_FOLDING,
        newline: str = "\r\n",
        compatibility_mode: CompatibilityMode = CompatibilityMode.RFC,
        parameter_style: ParameterStyle = ParameterStyle.VALUE_LIST,
        label_policy: LabelPolicy = LabelPolicy.AUTO,
        add_prodid: bool = True,
        add_generator: bool = False,
    ) -> None:
        super().__init__(version, compatibility_mode, label_policy, add_prodid, add_generator)
        self._open(out, "w")
        self.folding = folding
        self.newline = newline
        self.parameter_style = parameter_style

    def _write(self, vcard: VCard) -> None:
        assert self._stream is not None
        for line, foldable in self._document_lines(vcard, 0):
            if foldable and self.folding is not None and line:
                physical = fold(line, self.folding.max_chars, self.folding.indent)
            else:
                physical = [line]
            for p in physical:
                self._stream.write(p)
                self._stream.write(self.newline)
        logger.debug(f"VCardWriter: wrote vCard {self.version} with {len(vcard)} properties")

    def _document_lines(self, vcard: VCard, depth: int) -> list[Line]:
        version = self.version
        self._check_required(vcard, version)

        lines: list[Line] = [("BEGIN:VCARD", True), (f"VERSION:{version}", True)]
        for prop in self._properties_to_write(vcard, version, nested=depth > 0):
            lines.extend(self._property_lines(vcard, prop, depth))
        lines.append(("END:VCARD", True))
        return lines

    def _property_lines(self, vcard: VCard, prop: VCardProperty, depth: int) -> list[Line]:
        version = self.version

        if isinstance(prop, ProdId) and version is VCardVersion.V2_1:
            prop = RawProperty("X-PRODID", escape(prop.value or ""), group=prop.group, parameters=prop.parameters)

        scribe = self.index.get_scribe_for(prop)
        if scribe is None:
            self._warn(f"No scribe is registered for {type(prop).__name__}; skipping it.")
            return []

        name = prop.name if isinstance(prop, RawProperty) else scribe.property_name
        if not scribe.supports(DataFormat.TEXT):
            self._warn("Property cannot be written in the text format; skipping it.", name)
            return []
        if not scribe.supports_version(version):
            self._warn(f"Property is not supported by vCard {version}; skipping it.", name)
            return []

        context = WriteContext(version, self.compatibility_mode, vcard)
        parameters = scribe.prepare_parameters(prop, context)
        if isinstance(prop, Address) and not self._labels_as_parameters(version):
            parameters.label = None
        result = scribe.write_text(prop, context)
        for message in context.warnings:
            self._warn(message, name)

        if isinstance(result, Skip):
            self._warn(f"Property skipped: {result.reason}", name)
            return []

        if isinstance(result, EmbeddedDocument):
            return self._embedded_lines(prop, name, parameters, result.vcard, depth)

        value = result
        quoted_printable = version is VCardVersion.V2_1 and "\n" in unescape(value)
        if quoted_printable:
            # 2.1 has no \n escape; line breaks are quoted-printable encoded
            value = unescape_newlines(value)
            parameters.encoding = "quoted-printable"
            if not value.isascii():
                parameters.replace("CHARSET", "UTF-8")
            value = encode_quoted_printable(value)

        head = self._content_line(prop.group, name, parameters, "")
        lines: list[Line]
        if quoted_printable and self.folding is not None:
            # Quoted-printable is decoded per physical line, so use soft line breaks
            lines = [(line, False) for line in fold_quoted_printable(head, value, self.folding.max_chars)]
        else:
            lines = [(head + value, not quoted_printable)]

        if (
            self.compatibility_mode is CompatibilityMode.MS_OUTLOOK
            and version is VCardVersion.V2_1
            and parameters.encoding in ("base64", "b")
        ):
            # Outlook expects an empty line after base64 data
            lines.append(("", False))

        return lines

    def _embedded_lines(
        self,
        prop: VCardProperty,
        name: str,
        parameters: VCardParameters,
        vcard: VCard,
        depth: int,
    ) -> list[Line]:
        """Lines of a property whose value is a vCard.

        2.1 writes the nested vCard on the lines following the property; 3.0
        writes it, escaped and unfolded, as the property value.
        """
        if depth + 1 > self.max_depth:
            self._warn(f"vCards nested deeper than {self.max_depth} levels are not written.", name)
            return []

        nested = self._document_lines(vcard, depth + 1)
        if self.version is VCardVersion.V2_1:
            return [(self._content_line(prop.group, name, parameters, ""), True), *nested]

        text = "".join(line + "\n" for line, _ in nested)
        return [(self._content_line(prop.group, name, parameters, escape(text)), False)]

    def _content_line(self, group: str | None, name: str, parameters: VCardParameters, value: str) -> str:
        parts = [f"{group}.{name}" if group else name]

        for param_name, values in parameters.items():
            values = [self._parameter_value(name, param_name, v) for v in values]
            if not values:
                continue

            if self.version is VCardVersion.V2_1:
                if param_name in _UPPER_CASE_21:
                    values = [v.upper() for v in values]
                if param_name == "TYPE":
                    # ADR;HOME;WORK
                    parts.extend(values)
                    continue

            if self.parameter_style is ParameterStyle.VALUE_LIST:
                parts.append(f"{param_name}={','.join(values)}")
            else:
                parts.extend(f"{param_name}={v}" for v in values)

        return ";".join(parts) + ":" + value

    def _parameter_value(self, property_name: str, param_name: str, value: str) -> str:
        if self.version is VCardVersion.V4_0:
            value = encode_caret(value)
        else:
            # No way to encode these before 4.0
            value = value.replace("\r\n", " ").replace("\n", " ").replace("\r", " ").replace('"', "'")

        cleaned = _INVALID_PARAMETER_CHARS.sub("", value)
        if cleaned != value:
            self._warn(f"Invalid characters were removed from the {param_name} parameter.", property_name)

        if self.version is VCardVersion.V2_1:
            return cleaned
        return quote_parameter_value(cleaned)


def write_string(
    vcards: VCard | list[VCard],
    version: VCardVersion = VCardVersion.V3_0,
    **kwargs,
) -> str:
    """Write one or more vCards to a string."""
    if isinstance(vcards, VCard):
        vcards = [vcards]
    out = io.StringIO()
    writer = VCardWriter(out, version, **kwargs)
    for vcard in vcards:
        writer.write(vcard)
    return out.getvalue()
