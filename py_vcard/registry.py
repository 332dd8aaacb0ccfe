"""Property scribe registry.

The built-in scribes are listed explicitly in :data:`BUILTIN_SCRIBES`.
Every reader and writer owns a :class:`ScribeIndex`, so registering an
extension scribe on one of them does not affect any other.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from .internal.internal import RegistrationError
from .properties import (
    Classification,
    Email,
    FormattedName,
    Kind,
    Label,
    Mailer,
    Note,
    ProdId,
    Profile,
    RawProperty,
    Role,
    SortString,
    Source,
    SourceDisplayText,
    Telephone,
    Title,
    Uid,
    Url,
)
from .scribe import (
    AddressScribe,
    AgentScribe,
    AnniversaryScribe,
    BirthdayScribe,
    CategoriesScribe,
    GeoScribe,
    KeyScribe,
    LogoScribe,
    NicknameScribe,
    OrganizationScribe,
    PhotoScribe,
    RawPropertyScribe,
    RevisionScribe,
    SoundScribe,
    StructuredNameScribe,
    TextPropertyScribe,
    VCardPropertyScribe,
    XmlPropertyScribe,
)
from .vcard import VCardProperty, VCardVersion

logger = logging.getLogger("py_vcard.registry")

V2_1, V3_0, V4_0 = VCardVersion.V2_1, VCardVersion.V3_0, VCardVersion.V4_0

BUILTIN_SCRIBES: dict[str, Callable[[], VCardPropertyScribe]] = {
    "FN": lambda: TextPropertyScribe(FormattedName),
    "N": StructuredNameScribe,
    "NICKNAME": NicknameScribe,
    "PHOTO": PhotoScribe,
    "BDAY": BirthdayScribe,
    "ANNIVERSARY": AnniversaryScribe,
    "ADR": AddressScribe,
    "LABEL": lambda: TextPropertyScribe(Label, versions=(V2_1, V3_0)),
    "TEL": lambda: TextPropertyScribe(Telephone, link_scheme="tel:"),
    "EMAIL": lambda: TextPropertyScribe(Email, link_scheme="mailto:"),
    "MAILER": lambda: TextPropertyScribe(Mailer, versions=(V2_1, V3_0)),
    "GEO": GeoScribe,
    "TITLE": lambda: TextPropertyScribe(Title),
    "ROLE": lambda: TextPropertyScribe(Role),
    "LOGO": LogoScribe,
    "AGENT": AgentScribe,
    "ORG": OrganizationScribe,
    "CATEGORIES": CategoriesScribe,
    "NOTE": lambda: TextPropertyScribe(Note),
    "PRODID": lambda: TextPropertyScribe(ProdId, versions=(V3_0, V4_0)),
    "REV": RevisionScribe,
    "SORT-STRING": lambda: TextPropertyScribe(SortString, versions=(V3_0,)),
    "SOUND": SoundScribe,
    "UID": lambda: TextPropertyScribe(Uid),
    "URL": lambda: TextPropertyScribe(Url, value_type="uri", link_scheme=""),
    "CLASS": lambda: TextPropertyScribe(Classification, versions=(V3_0,)),
    "KEY": KeyScribe,
    "SOURCE": lambda: TextPropertyScribe(Source, value_type="uri"),
    "NAME": lambda: TextPropertyScribe(SourceDisplayText, versions=(V3_0,)),
    "PROFILE": lambda: TextPropertyScribe(Profile, versions=(V3_0,)),
    "KIND": lambda: TextPropertyScribe(Kind, versions=(V4_0,)),
    "XML": XmlPropertyScribe,
}


def _check_constructible(scribe: VCardPropertyScribe) -> None:
    """Every property class must be constructible with no arguments."""
    try:
        scribe.property_class()
    except TypeError as e:
        raise RegistrationError(
            f"{scribe.property_class.__name__} cannot be created without arguments, "
            f"so scribe {scribe!r} cannot be registered: {e}"
        ) from e

    if not scribe.property_name:
        raise RegistrationError(f"Scribe {scribe!r} has no property name")


def _build_builtins() -> list[VCardPropertyScribe]:
    scribes = []
    for name, factory in BUILTIN_SCRIBES.items():
        scribe = factory()
        if scribe.property_name != name:
            raise RegistrationError(f"Built-in scribe for {name} is registered as {scribe.property_name}")
        scribes.append(scribe)
    return scribes


_BUILTINS = _build_builtins()


class ScribeIndex:
    """Looks up the scribe of a property by name, xCard qualified name or class.

    Extension scribes registered on an index take precedence over the
    built-in ones for the same name or class.
    """

    def __init__(self) -> None:
        self._by_name: dict[str, VCardPropertyScribe] = {}
        self._by_qname: dict[str, VCardPropertyScribe] = {}
        self._by_class: dict[type, VCardPropertyScribe] = {}
        for scribe in _BUILTINS:
            self._index(scribe)
        self._extensions: dict[str, VCardPropertyScribe] = {}

    def _index(self, scribe: VCardPropertyScribe) -> None:
        self._by_name[scribe.property_name] = scribe
        self._by_qname[scribe.qname] = scribe
        if scribe.property_class is not RawProperty:
            self._by_class[scribe.property_class] = scribe

    def _unindex(self, scribe: VCardPropertyScribe) -> None:
        if self._by_name.get(scribe.property_name) is scribe:
            del self._by_name[scribe.property_name]
        if self._by_qname.get(scribe.qname) is scribe:
            del self._by_qname[scribe.qname]
        if self._by_class.get(scribe.property_class) is scribe:
            del self._by_class[scribe.property_class]

    def register(self, scribe: VCardPropertyScribe) -> None:
        """Register an extension scribe.

        Raises:
            RegistrationError: If the scribe's property class cannot be
                created without arguments
        """
        _check_constructible(scribe)
        previous = self._extensions.get(scribe.property_name)
        if previous is not None:
            self._unindex(previous)
        self._extensions[scribe.property_name] = scribe
        self._index(scribe)
        logger.debug(f"Registered scribe {scribe!r}")

    def unregister(self, scribe: VCardPropertyScribe | str) -> None:
        """Remove an extension scribe, restoring any built-in one it shadowed."""
        name = scribe.upper() if isinstance(scribe, str) else scribe.property_name
        removed = self._extensions.pop(name, None)
        if removed is None:
            return

        self._unindex(removed)
        for builtin in _BUILTINS:
            if builtin.property_name == name or builtin.property_class is removed.property_class:
                self._index(builtin)

    def get_property_scribe(self, name: str) -> VCardPropertyScribe | None:
        """Scribe for a property name, e.g. ``"FN"``."""
        return self._by_name.get(name.upper())

    def get_property_scribe_by_qname(self, qname: str) -> VCardPropertyScribe | None:
        """Scribe for an xCard element name in Clark notation."""
        return self._by_qname.get(qname)

    def get_scribe_for(self, prop: VCardProperty) -> VCardPropertyScribe | None:
        """Scribe for a property instance.

        Raw properties get a raw scribe bound to their own name unless an
        extension scribe was registered for that name.
        """
        if isinstance(prop, RawProperty):
            extension = self._extensions.get(prop.name.upper())
            if extension is not None and extension.property_class is RawProperty:
                return extension
            return RawPropertyScribe(prop.name)

        for cls in type(prop).__mro__:
            scribe = self._by_class.get(cls)
            if scribe is not None:
                return scribe
        return None

    def scribes(self) -> list[VCardPropertyScribe]:
        """Every scribe reachable by name, extensions included."""
        return list(self._by_name.values())

    def __contains__(self, name: str) -> bool:
        return name.upper() in self._by_name
