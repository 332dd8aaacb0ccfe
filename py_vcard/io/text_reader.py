"""Reader for the line-oriented vCard syntax (2.1, 3.0 and 4.0)."""

from __future__ import annotations

import io
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from ..config import MAX_DEPTH, CompatibilityMode, LabelPolicy
from ..internal.internal import Embedded, ParseContext, Skip, Value
from ..internal.text import decode_caret, decode_quoted_printable, unescape, unfold_numbered
from ..parameters import VCardParameters
from ..properties import RawProperty
from ..scribe.raw import RawPropertyScribe
from ..vcard import VCard, VCardVersion
from .base import VCardStreamReader

logger = logging.getLogger("py_vcard.io.text")

# 2.1 allows parameter values without a name, e.g. "ADR;HOME;QUOTED-PRINTABLE"
_NAMELESS_ENCODINGS = {"QUOTED-PRINTABLE", "BASE64", "B", "7BIT", "8BIT"}
_NAMELESS_VALUES = {"INLINE", "URL", "CONTENT-ID", "CID"}


@dataclass
class ContentLine:
    """One unfolded line: ``group.NAME;PARAM=value:value``."""

    group: str | None
    name: str
    parameters: VCardParameters
    value: str
    line: int


def _split_outside_quotes(s: str, separator: str) -> list[str]:
    parts = []
    current = []
    in_quotes = False
    for char in s:
        if char == '"':
            in_quotes = not in_quotes
            current.append(char)
        elif char == separator and not in_quotes:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    return parts


def _find_value_separator(line: str) -> int:
    """Index of the colon that ends the name and parameters, or -1."""
    in_quotes = False
    for index, char in enumerate(line):
        if char == '"':
            in_quotes = not in_quotes
        elif char == ":" and not in_quotes:
            return index
    return -1


def parse_parameters(tokens: list[str], version: VCardVersion) -> VCardParameters:
    """Parse the ``;`` separated parameter tokens of a content line."""
    parameters = VCardParameters()

    for token in tokens:
        token = token.strip()
        if not token:
            continue

        name, sep, raw_value = token.partition("=")
        if not sep:
            # Nameless parameter
            upper = token.upper()
            if upper in _NAMELESS_ENCODINGS:
                parameters.put("ENCODING", token)
            elif upper in _NAMELESS_VALUES:
                parameters.put("VALUE", token)
            else:
                parameters.put("TYPE", token)
            continue

        for value in _split_outside_quotes(raw_value, ","):
            value = value.strip()
            if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
                value = value[1:-1]
            if version is VCardVersion.V4_0:
                value = decode_caret(value)
            parameters.put(name, value)

    return parameters


def parse_line(line: str, version: VCardVersion, line_number: int = 0) -> ContentLine | None:
    """Split an unfolded line into group, name, parameters and value.

    Whitespace around the name and before the value is ignored. Returns None
    if the line has no colon.
    """
    index = _find_value_separator(line)
    if index < 0:
        return None

    head = _split_outside_quotes(line[:index], ";")
    group, _, name = head[0].strip().rpartition(".")
    parameters = parse_parameters(head[1:], version)
    return ContentLine(group or None, name.strip(), parameters, line[index + 1 :].lstrip(), line_number)


class VCardReader(VCardStreamReader):
    """Reads vCards from a stream of text.

    Args:
        source: The vCard text, a text stream, or a path to a file
        compatibility_mode: Producer whose quirks should be tolerated
        label_policy: Whether LABEL properties are merged into addresses
        max_depth: Maximum nesting of AGENT vCards; deeper documents are
            kept as raw properties

    Example:
        >>> with VCardReader(Path("contacts.vcf")) as reader:
        ...     for vcard in reader:
        ...         print(vcard.formatted_name.value)
    """

    def __init__(
        self,
        source: str | TextIO | Path,
        compatibility_mode: CompatibilityMode = CompatibilityMode.RFC,
        label_policy: LabelPolicy = LabelPolicy.AUTO,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        super().__init__(compatibility_mode, label_policy, max_depth)
        if isinstance(source, str):
            source = io.StringIO(source)
        self._open(source, "r")
        self._lines = self._logical_lines()
        self._pushback: tuple[int, str] | None = None
        self._depth = 0

    # Line handling

    def _physical_lines(self) -> Iterator[str]:
        assert self._stream is not None
        for raw in self._stream:
            # StringIO splits on \n only; old Mac files use bare \r
            raw = raw.replace("\r\n", "\n").replace("\r", "\n")
            if raw.endswith("\n"):
                raw = raw[:-1]
            yield from raw.split("\n")

    def _logical_lines(self) -> Iterator[tuple[int, str]]:
        """Unfolded lines with their (1-based, physical) line number.

        Quoted-printable values ending in ``=`` continue on the next line.
        """
        numbered = unfold_numbered(self._physical_lines())
        for number, line in numbered:
            while line.endswith("=") and _is_quoted_printable(line):
                following = next(numbered, None)
                if following is None:
                    break
                line = line[:-1] + following[1]
            yield number, line

    def _next_line(self) -> tuple[int, str] | None:
        if self._pushback is not None:
            line, self._pushback = self._pushback, None
            return line
        return next(self._lines, None)

    # Documents

    def _read_next(self) -> VCard | None:
        while True:
            item = self._next_line()
            if item is None:
                return None
            number, line = item
            parsed = parse_line(line, VCardVersion.V2_1, number)
            if parsed is not None and _is_begin(parsed):
                return self._read_body(self._depth)

    def _read_body(self, depth: int) -> VCard | None:
        """Read properties up to the END line of the current document.

        Returns None if the input ends before any property was read.
        """
        vcard = VCard()
        version: VCardVersion | None = None

        while True:
            item = self._next_line()
            if item is None:
                self._warn("Input ended before END:VCARD; the vCard may be incomplete.")
                if len(vcard) == 0:
                    return None
                break

            number, line = item
            if not line.strip():
                continue

            parsed = parse_line(line, version or VCardVersion.V2_1, number)
            if parsed is None:
                self._warn(f'Skipping malformed line "{line}": no colon found.', line=number)
                continue

            if _is_end(parsed):
                break

            if parsed.name.upper() == "VERSION":
                if version is None:
                    version = VCardVersion.from_string(parsed.value)
                    if version is None:
                        self._warn(f'Unknown version "{parsed.value}", assuming 2.1.', "VERSION", number)
                        version = VCardVersion.V2_1
                continue

            if _is_begin(parsed):
                self._warn("Nested vCard without an AGENT property; ignoring it.", line=number)
                self._read_body(depth + 1)
                continue

            self._read_property(vcard, parsed, version or VCardVersion.V2_1, depth)

        if version is None:
            self._warn("vCard has no VERSION property, assuming 2.1.")
            version = VCardVersion.V2_1
        vcard.version = version
        self._apply_label_policy(vcard)
        return vcard

    def _read_property(self, vcard: VCard, line: ContentLine, version: VCardVersion, depth: int) -> None:
        name = line.name
        parameters = line.parameters
        value = line.value

        scribe = self.index.get_property_scribe(name)
        if scribe is None:
            if not name.upper().startswith("X-"):
                self._warn("Non-standard property; reading it as a raw property.", name, line.line)
            scribe = RawPropertyScribe(name)

        if parameters.encoding == "quoted-printable":
            charset = parameters.charset or "utf-8"
            try:
                value = decode_quoted_printable(value, charset)
            except LookupError:
                self._warn(f'Unknown charset "{charset}"; decoding as UTF-8.', name, line.line)
                value = decode_quoted_printable(value)
            parameters.encoding = None

        context = ParseContext(version, self.compatibility_mode, name, line.line)
        outcome = scribe.parse_text(value, parameters.value_type, parameters, context)
        for message in context.warnings:
            self._warn(message, name, line.line)

        if isinstance(outcome, Skip):
            self._warn(f"Property skipped: {outcome.reason}", name, line.line)
            return

        if isinstance(outcome, Value):
            outcome.property.group = line.group
            vcard.add(outcome.property)
            return

        self._read_embedded(vcard, line, outcome, value, depth)

    def _read_embedded(self, vcard: VCard, line: ContentLine, outcome: Embedded, value: str, depth: int) -> None:
        """Parse the vCard held by a property.

        2.1 puts the nested vCard on the lines after an empty value; 3.0
        escapes the whole vCard into the value.
        """
        prop = outcome.property
        prop.group = line.group
        logger.debug(f"Reading nested vCard of {line.name} (line {line.line}) at depth {depth + 1}")

        if not value.strip():
            item = self._next_line()
            if item is None:
                self._warn("Input ended before the nested vCard.", line.name, line.line)
                return
            begin = parse_line(item[1], VCardVersion.V2_1, item[0])
            if begin is None or not _is_begin(begin):
                self._pushback = item
                self._warn("Property value is empty and no nested vCard follows it.", line.name, line.line)
                return

            if depth + 1 > self.max_depth:
                raw = self._skip_body()
                self._warn(f"vCards nested deeper than {self.max_depth} levels are not parsed.", line.name, line.line)
                vcard.add(RawProperty(line.name, raw, group=line.group, parameters=line.parameters))
                return

            embedded = self._read_body(depth + 1)
            if embedded is None:
                self._warn("Nested vCard is empty.", line.name, line.line)
                return
            outcome.inject(embedded)
            vcard.add(prop)
            return

        if depth + 1 > self.max_depth:
            self._warn(f"vCards nested deeper than {self.max_depth} levels are not parsed.", line.name, line.line)
            vcard.add(RawProperty(line.name, value, group=line.group, parameters=line.parameters))
            return

        nested = VCardReader(unescape(value), self.compatibility_mode, self.label_policy, self.max_depth)
        nested.index = self.index
        nested._depth = depth + 1
        embedded = nested.read_next()
        for warning in nested.warnings:
            self._warn(f"Nested vCard: {warning.message}", warning.property_name or line.name, line.line)
        nested.close()

        if embedded is None:
            self._warn("Property value does not contain a vCard.", line.name, line.line)
            return

        outcome.inject(embedded)
        vcard.add(prop)

    def _skip_body(self) -> str:
        """Consume a nested document without parsing it; returns its lines."""
        lines = ["BEGIN:VCARD"]
        level = 1
        while level:
            item = self._next_line()
            if item is None:
                break
            lines.append(item[1])
            parsed = parse_line(item[1], VCardVersion.V2_1, item[0])
            if parsed is None:
                continue
            if _is_begin(parsed):
                level += 1
            elif _is_end(parsed):
                level -= 1
        return "\n".join(lines)


def _is_quoted_printable(line: str) -> bool:
    index = _find_value_separator(line)
    return index >= 0 and "QUOTED-PRINTABLE" in line[:index].upper()


def _is_begin(line: ContentLine) -> bool:
    return line.name.upper() == "BEGIN" and line.value.strip().upper() == "VCARD"


def _is_end(line: ContentLine) -> bool:
    return line.name.upper() == "END" and line.value.strip().upper() == "VCARD"
