"""Text helpers for the line-oriented vCard syntax."""

from __future__ import annotations

import binascii
import quopri
import re
from collections.abc import Iterable, Iterator


def escape(string: str) -> str:
    """Escape a text value.

    Backslashes, commas and semicolons get a leading backslash and line
    breaks become ``\\n``. ``\\r\\n`` and ``\\r`` are normalized to ``\\n``
    first, so :func:`unescape` gives back ``\\n`` for every kind of line
    break.
    """
    string = re.sub(r"(\r\n|\r)", "\n", string)
    chars = []

    for char in string:
        if char == "\n":
            chars.append("\\n")
        elif char == "\\":
            chars.append("\\\\")
        elif char == ",":
            chars.append("\\,")
        elif char == ";":
            chars.append("\\;")
        else:
            chars.append(char)

    return "".join(chars)


def unescape(string: str) -> str:
    """Reverse :func:`escape`.

    Unknown escape sequences are kept as they are.
    """
    chars = []
    index = 0
    end = len(string)

    while index < end:
        char = string[index]
        index += 1

        if char == "\\" and index < end:
            next_char = string[index]
            index += 1

            if next_char in "\\,;":
                chars.append(next_char)
            elif next_char in "nN":
                chars.append("\n")
            else:
                chars.append(char)
                chars.append(next_char)
        else:
            chars.append(char)

    return "".join(chars)


def unescape_newlines(string: str) -> str:
    """Turn ``\\n`` escapes back into line breaks, keeping every other escape."""
    chars = []
    index = 0
    end = len(string)

    while index < end:
        char = string[index]
        index += 1

        if char == "\\" and index < end:
            next_char = string[index]
            index += 1
            if next_char in "nN":
                chars.append("\r\n")
            else:
                chars.append(char)
                chars.append(next_char)
        else:
            chars.append(char)

    return "".join(chars)


def split_structured(string: str, separator: str, unescape_parts: bool = True) -> list[str]:
    """Split a value on every separator that is not escaped.

    Args:
        string: Raw property value
        separator: Single separator character (``;`` or ``,``)
        unescape_parts: Whether each part is unescaped

    Returns:
        The parts, in order. An empty string yields ``[""]``.
    """
    parts = []
    current: list[str] = []
    escaped = False

    for char in string:
        if escaped:
            current.append(char)
            escaped = False
        elif char == "\\":
            current.append(char)
            escaped = True
        elif char == separator:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)

    parts.append("".join(current))

    if unescape_parts:
        return [unescape(part) for part in parts]
    return parts


def join_structured(parts: Iterable[str | list[str] | None]) -> str:
    """Build a ``;`` separated value; list components are ``,`` separated."""
    out = []
    for part in parts:
        if part is None:
            out.append("")
        elif isinstance(part, list):
            out.append(",".join(escape(p) for p in part))
        else:
            out.append(escape(part))
    return ";".join(out)


def fold(line: str, max_chars: int, indent: str = " ") -> list[str]:
    """Split a logical line into physical lines of ``max_chars`` characters.

    Continuation lines start with ``indent``, which counts towards the width.
    A space or tab at the fold point starts the continuation piece, after the
    indent, so that unfolding restores it.
    """
    if max_chars <= len(indent):
        raise ValueError(f"fold width {max_chars} is too small")

    if len(line) <= max_chars:
        return [line]

    pieces = []
    start = 0
    width = max_chars

    while len(line) - start > width:
        end = start + width
        pieces.append(line[start:end])
        start = end
        width = max_chars - len(indent)

    if start < len(line):
        pieces.append(line[start:])

    return [pieces[0]] + [indent + piece for piece in pieces[1:]]


def fold_quoted_printable(head: str, value: str, max_chars: int) -> list[str]:
    """Wrap a quoted-printable value with ``=`` soft line breaks.

    ``head`` is the name and parameters up to the colon and always stays on
    the first line. A line is never broken inside an ``=XX`` escape, and a
    space or tab that would start a continuation line is written as ``=20``
    or ``=09`` so the line is not mistaken for a folded one.
    """
    if max_chars < 5:
        raise ValueError(f"fold width {max_chars} is too small")

    lines = []
    current = head
    i = 0
    while len(current) + len(value) - i > max_chars:
        token = value[i : i + 3] if value[i] == "=" else value[i]
        i += len(token)
        if current and len(current) + len(token) + 1 > max_chars:
            lines.append(current + "=")
            current = ""
            if token in (" ", "\t"):
                token = f"={ord(token):02X}"
        current += token

    lines.append(current + value[i:])
    return lines


def unfold(lines: Iterable[str]) -> Iterator[str]:
    """Join continuation lines onto the line before them.

    A physical line beginning with a space or tab continues the previous
    logical line; exactly one leading whitespace character is removed.
    """
    for _, line in unfold_numbered(lines):
        yield line


def unfold_numbered(lines: Iterable[str]) -> Iterator[tuple[int, str]]:
    """Like :func:`unfold`, also yielding the 1-based number of the first
    physical line of each logical line."""
    buffer: str | None = None
    start = 0

    for number, line in enumerate(lines, start=1):
        line = line.rstrip("\r\n")
        if buffer is not None and line[:1] in (" ", "\t"):
            buffer += line[1:]
            continue

        if buffer is not None:
            yield start, buffer
        buffer = line
        start = number

    if buffer is not None:
        yield start, buffer


def decode_quoted_printable(value: str, charset: str = "utf-8") -> str:
    """Decode a quoted-printable value into text.

    Raises:
        LookupError: If ``charset`` is unknown
    """
    data = quopri.decodestring(value.encode(charset, errors="replace"))
    return data.decode(charset, errors="replace")


def encode_quoted_printable(value: str, charset: str = "utf-8") -> str:
    """Encode a value as quoted-printable without soft line breaks.

    Line breaks are encoded too (``=0D=0A``) so the value stays on one
    logical line; see :func:`fold_quoted_printable` for wrapping it.
    """
    value = re.sub(r"(\r\n|\r|\n)", "\r\n", value)
    data = binascii.b2a_qp(value.encode(charset), quotetabs=False, istext=False)
    return data.decode("ascii").replace("=\r\n", "").replace("=\n", "")


_CARET_DECODE = {"^": "^", "n": "\n", "N": "\n", "'": '"'}


def decode_caret(value: str) -> str:
    """Decode RFC 6868 parameter value escapes (``^n``, ``^^``, ``^'``)."""
    if "^" not in value:
        return value

    chars = []
    index = 0
    while index < len(value):
        char = value[index]
        if char == "^" and index + 1 < len(value) and value[index + 1] in _CARET_DECODE:
            chars.append(_CARET_DECODE[value[index + 1]])
            index += 2
            continue
        chars.append(char)
        index += 1
    return "".join(chars)


def encode_caret(value: str) -> str:
    """Encode a parameter value per RFC 6868."""
    value = value.replace("^", "^^")
    value = re.sub(r"(\r\n|\r|\n)", "^n", value)
    return value.replace('"', "^'")


_NEEDS_QUOTES = re.compile(r"[,;:]")


def quote_parameter_value(value: str) -> str:
    """Surround a parameter value with double quotes when it needs them."""
    if _NEEDS_QUOTES.search(value):
        return f'"{value}"'
    return value
