"""Tests for property parameters."""
from py_vcard import VCardParameters


def test_names_are_case_insensitive():
    """Test looking up parameters regardless of case."""
    params = VCardParameters()
    params.put("x-size", "8")

    assert params.first("X-SIZE") == "8"
    assert params.first("x-size") == "8"
    assert params.first("non-existent") is None
    assert "X-Size" in params


def test_values_are_lower_cased():
    """Test that values are lower-cased except for free-text parameters."""
    params = VCardParameters([("TYPE", "HOME"), ("type", "Work"), ("LABEL", "Main St."), ("X-ID", "AbC")])

    assert params.types == ["home", "work"]
    assert params.label == "Main St."
    assert params.first("X-ID") == "AbC"


def test_duplicate_values_are_ignored():
    """Test that a value is stored once."""
    params = VCardParameters()
    params.add_type("home")
    params.add_type("HOME")

    assert params.types == ["home"]


def test_replace_and_remove():
    """Test replacing and removing parameter values."""
    params = VCardParameters([("TYPE", "home"), ("TYPE", "work"), ("VALUE", "uri")])

    params.remove("TYPE", "home")
    params.value_type = None
    params.encoding = "b"

    assert params.types == ["work"]
    assert "VALUE" not in params
    assert params.encoding == "b"
    assert params.names() == ["TYPE", "ENCODING"]


def test_pref():
    """Test reading PREF as an integer."""
    assert VCardParameters([("PREF", "1")]).pref == 1
    assert VCardParameters([("PREF", "first")]).pref is None
    assert VCardParameters().pref is None


def test_copy_is_independent():
    """Test that a copy does not share values with the original."""
    params = VCardParameters([("TYPE", "home")])
    other = params.copy()
    other.add_type("work")

    assert params.types == ["home"]
    assert other == VCardParameters([("TYPE", "home"), ("TYPE", "work")])
