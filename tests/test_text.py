"""Tests for the text syntax helpers."""
import re

import pytest

from py_vcard.internal.text import (
    decode_caret,
    decode_quoted_printable,
    encode_caret,
    encode_quoted_printable,
    escape,
    fold,
    fold_quoted_printable,
    join_structured,
    quote_parameter_value,
    split_structured,
    unescape,
    unescape_newlines,
    unfold,
    unfold_numbered,
)


def test_escape():
    """Test escaping special characters in a text value."""
    assert escape("a,b;c\\d\ne") == "a\\,b\\;c\\\\d\\ne"
    assert escape("one\r\ntwo\rthree") == "one\\ntwo\\nthree"


def test_escape_normalizes_line_breaks():
    """Test that every kind of line break comes back from unescape as \\n."""
    assert unescape(escape("a\r\nb")) == "a\nb"
    assert unescape(escape("a\rb\nc")) == "a\nb\nc"


def test_unescape():
    """Test unescaping, including unknown escape sequences."""
    assert unescape("a\\,b\\;c\\\\d\\ne\\Nf") == "a,b;c\\d\ne\nf"
    assert unescape("keep \\t as is") == "keep \\t as is"
    assert unescape("trailing\\") == "trailing\\"


def test_unescape_newlines_keeps_other_escapes():
    """Test that only line break escapes are decoded."""
    assert unescape_newlines("a\\nb\\,c") == "a\r\nb\\,c"


def test_split_structured():
    """Test splitting on unescaped separators only."""
    assert split_structured("a\\;b;c;", ";") == ["a;b", "c", ""]
    assert split_structured("a\\,b,c", ",", unescape_parts=False) == ["a\\,b", "c"]
    assert split_structured("", ";") == [""]


def test_join_structured():
    """Test building a structured value with list components."""
    assert join_structured(["Doe", "John", ["A", "B"], [], None]) == "Doe;John;A,B;;"
    assert join_structured(["a;b"]) == "a\\;b"


def test_fold_short_line():
    """Test that lines within the limit are not folded."""
    assert fold("FN:John Doe", 75) == ["FN:John Doe"]


def test_fold_long_line():
    """Test folding a line without whitespace."""
    lines = fold("a" * 100, 75)

    assert lines == ["a" * 75, " " + "a" * 25]
    assert all(len(line) <= 75 for line in lines)


def test_fold_moves_space_to_continuation_line():
    """Test that a space at the fold point starts the next line after the indent."""
    lines = fold("a" * 75 + " " + "b" * 10, 75)

    assert lines == ["a" * 75, "  " + "b" * 10]
    assert list(unfold(lines)) == ["a" * 75 + " " + "b" * 10]


def test_fold_never_exceeds_width_at_whitespace():
    """Test that lines stay within the width when the cut lands on whitespace."""
    line = "N" * 75 + " " + "x" * 20
    lines = fold(line, 75)

    assert [len(p) for p in lines] == [75, 22]
    assert list(unfold(lines)) == [line]

    line = "N" * 75 + "\t" + "x" * 20
    assert all(len(p) <= 75 for p in fold(line, 75))
    assert list(unfold(fold(line, 75))) == [line]


def test_fold_many_lines():
    """Test that continuation lines count the indent towards the width."""
    lines = fold("x" * 200, 75)

    assert lines[0] == "x" * 75
    assert lines[1] == " " + "x" * 74
    assert lines[2] == " " + "x" * 51
    assert "".join(line[1:] if i else line for i, line in enumerate(lines)) == "x" * 200


def test_fold_width_too_small():
    """Test that a width not larger than the indent is rejected."""
    with pytest.raises(ValueError):
        fold("abc", 1, " ")


def test_unfold():
    """Test joining continuation lines."""
    lines = ["NOTE:ab", " cd", "\tef", "FN:x"]

    assert list(unfold(lines)) == ["NOTE:abcdef", "FN:x"]


def test_unfold_numbered():
    """Test that unfolded lines carry the number of their first line."""
    lines = ["BEGIN:VCARD", "NOTE:a", " b", " c", "END:VCARD"]

    assert list(unfold_numbered(lines)) == [(1, "BEGIN:VCARD"), (2, "NOTE:abc"), (5, "END:VCARD")]


def test_fold_then_unfold():
    """Test that unfolding reverses folding."""
    line = "NOTE:" + "The quick brown fox jumps over the lazy dog. " * 5

    assert list(unfold(fold(line, 75))) == [line]


def test_quoted_printable():
    """Test decoding and encoding quoted-printable values."""
    assert decode_quoted_printable("caf=C3=A9") == "café"
    assert decode_quoted_printable("caf=E9", "iso-8859-1") == "café"
    assert encode_quoted_printable("line one\nline two") == "line one=0D=0Aline two"


def test_fold_quoted_printable_short_value():
    """Test that a value within the width is left on one line."""
    head = "NOTE;ENCODING=QUOTED-PRINTABLE:"

    assert fold_quoted_printable(head, "caf=C3=A9", 75) == [head + "caf=C3=A9"]


def test_fold_quoted_printable_keeps_escapes_whole():
    """Test that soft line breaks never split an =XX escape."""
    head = "NOTE;ENCODING=QUOTED-PRINTABLE;CHARSET=UTF-8:"
    text = "L'été est chaud à Montréal. " * 6
    value = encode_quoted_printable(text)

    lines = fold_quoted_printable(head, value, 75)

    assert len(lines) > 1
    assert lines[0].startswith(head)
    assert all(len(line) <= 75 for line in lines)
    for line in lines[:-1]:
        assert line.endswith("=")
        assert re.search(r"=[0-9A-F]?$", line[:-1]) is None
    assert all(line[:1] not in (" ", "\t") for line in lines[1:])

    joined = "".join(line[:-1] for line in lines[:-1]) + lines[-1]
    assert decode_quoted_printable(joined[len(head) :]) == text


def test_quoted_printable_unknown_charset():
    """Test that an unknown charset raises LookupError."""
    with pytest.raises(LookupError):
        decode_quoted_printable("abc", "no-such-charset")


def test_caret_encoding():
    """Test RFC 6868 parameter value encoding."""
    assert encode_caret('a"b^c\nd') == "a^'b^^c^nd"
    assert decode_caret("a^'b^^c^nd^x") == 'a"b^c\nd^x'


def test_quote_parameter_value():
    """Test that only values with special characters are quoted."""
    assert quote_parameter_value("home") == "home"
    assert quote_parameter_value("a,b") == '"a,b"'
    assert quote_parameter_value("a:b") == '"a:b"'
