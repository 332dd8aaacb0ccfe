"""vCard property parameters."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

TYPE = "TYPE"
VALUE = "VALUE"
ENCODING = "ENCODING"
CHARSET = "CHARSET"
LANGUAGE = "LANGUAGE"
MEDIATYPE = "MEDIATYPE"
LABEL = "LABEL"
PREF = "PREF"

# Parameters whose value case carries meaning and is stored as given
FREE_TEXT_PARAMETERS = frozenset({"LABEL", "SORT-AS", "GEO", "TZ"})


def _keeps_case(name: str) -> bool:
    return name in FREE_TEXT_PARAMETERS or name.startswith("X-")


class VCardParameters:
    """Ordered multi-valued mapping of parameter names to values.

    Names are case-insensitive. Values are lower-cased when stored so that
    comparisons such as ``TYPE=HOME`` versus ``type=home`` behave the same,
    except for free-text and extension parameters.
    """

    def __init__(self, items: Iterable[tuple[str, str]] | None = None) -> None:
        self._params: dict[str, list[str]] = {}
        if items:
            for name, value in items:
                self.put(name, value)

    @staticmethod
    def _normalize(name: str, value: str) -> tuple[str, str]:
        name = name.strip().upper()
        if not _keeps_case(name):
            value = value.lower()
        return name, value

    def put(self, name: str, value: str) -> None:
        """Add a value, keeping any existing values of the parameter."""
        name, value = self._normalize(name, value)
        values = self._params.setdefault(name, [])
        if value not in values:
            values.append(value)

    def replace(self, name: str, value: str | None) -> None:
        """Set the only value of a parameter, or remove it if ``value`` is None."""
        self.remove_all(name)
        if value is not None:
            self.put(name, value)

    def get(self, name: str) -> list[str]:
        return list(self._params.get(name.upper(), []))

    def first(self, name: str) -> str | None:
        values = self._params.get(name.upper())
        return values[0] if values else None

    def remove(self, name: str, value: str) -> None:
        name, value = self._normalize(name, value)
        values = self._params.get(name)
        if values and value in values:
            values.remove(value)
            if not values:
                del self._params[name]

    def remove_all(self, name: str) -> list[str]:
        return self._params.pop(name.upper(), [])

    def names(self) -> list[str]:
        return list(self._params)

    def items(self) -> Iterator[tuple[str, list[str]]]:
        for name, values in self._params.items():
            yield name, list(values)

    def copy(self) -> VCardParameters:
        other = VCardParameters()
        other._params = {name: list(values) for name, values in self._params.items()}
        return other

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.upper() in self._params

    def __len__(self) -> int:
        return len(self._params)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._params))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VCardParameters):
            return NotImplemented
        return self._params == other._params

    def __repr__(self) -> str:
        return f"VCardParameters({self._params!r})"

    # Typed accessors

    @property
    def types(self) -> list[str]:
        return self.get(TYPE)

    def add_type(self, value: str) -> None:
        self.put(TYPE, value)

    @property
    def value_type(self) -> str | None:
        return self.first(VALUE)

    @value_type.setter
    def value_type(self, value: str | None) -> None:
        self.replace(VALUE, value)

    @property
    def encoding(self) -> str | None:
        return self.first(ENCODING)

    @encoding.setter
    def encoding(self, value: str | None) -> None:
        self.replace(ENCODING, value)

    @property
    def charset(self) -> str | None:
        return self.first(CHARSET)

    @property
    def language(self) -> str | None:
        return self.first(LANGUAGE)

    @language.setter
    def language(self, value: str | None) -> None:
        self.replace(LANGUAGE, value)

    @property
    def media_type(self) -> str | None:
        return self.first(MEDIATYPE)

    @media_type.setter
    def media_type(self, value: str | None) -> None:
        self.replace(MEDIATYPE, value)

    @property
    def label(self) -> str | None:
        return self.first(LABEL)

    @label.setter
    def label(self, value: str | None) -> None:
        self.replace(LABEL, value)

    @property
    def pref(self) -> int | None:
        """PREF parameter, or None if missing or not an integer."""
        value = self.first(PREF)
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None
