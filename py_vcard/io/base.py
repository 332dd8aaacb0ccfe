"""Behaviour shared by every reader and writer."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import IO, Any

from ..config import GENERATOR, MAX_DEPTH, PRODID, CompatibilityMode, LabelPolicy
from ..debug import log_warnings
from ..internal.internal import ParseWarning
from ..properties import Address, Label, ProdId, RawProperty
from ..registry import ScribeIndex
from ..scribe.base import VCardPropertyScribe
from ..vcard import VCard, VCardProperty, VCardVersion

logger = logging.getLogger("py_vcard.io")


class _Stream:
    """Owns the underlying stream when it was opened from a path."""

    _stream: IO[Any] | None
    _owns_stream: bool = False

    def _open(self, source: Any, mode: str) -> None:
        if isinstance(source, Path):
            self._stream = source.open(mode, encoding="utf-8", newline="")
            self._owns_stream = True
        else:
            self._stream = source
            self._owns_stream = False

    def close(self) -> None:
        """Close the stream if this object opened it."""
        if self._owns_stream and self._stream is not None:
            self._stream.close()
        self._stream = None

    def __enter__(self):
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class VCardStreamReader(_Stream):
    """Base class of the readers.

    Args:
        compatibility_mode: Producer whose quirks should be tolerated
        label_policy: Whether LABEL properties are merged into addresses
        max_depth: Maximum nesting of embedded vCards
    """

    def __init__(
        self,
        compatibility_mode: CompatibilityMode = CompatibilityMode.RFC,
        label_policy: LabelPolicy = LabelPolicy.AUTO,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        self.compatibility_mode = compatibility_mode
        self.label_policy = label_policy
        self.max_depth = max_depth
        self.index = ScribeIndex()
        self._warnings: list[ParseWarning] = []

    def register_scribe(self, scribe: VCardPropertyScribe) -> None:
        """Register an extension scribe for this reader only."""
        self.index.register(scribe)

    def unregister_scribe(self, scribe: VCardPropertyScribe | str) -> None:
        self.index.unregister(scribe)

    @property
    def warnings(self) -> list[ParseWarning]:
        """Warnings from the most recent :meth:`read_next` call."""
        return list(self._warnings)

    def _warn(self, message: str, property_name: str | None = None, line: int | None = None) -> None:
        self._warnings.append(ParseWarning(message, property_name, line))

    def read_next(self) -> VCard | None:
        """Read the next vCard, or None at the end of the stream."""
        self._warnings = []
        vcard = self._read_next()
        if vcard is not None:
            logger.debug(f"{type(self).__name__}: read vCard {vcard.version} with {len(vcard)} properties")
        log_warnings(type(self).__name__, self._warnings)
        return vcard

    def _read_next(self) -> VCard | None:
        raise NotImplementedError

    def read_all(self) -> list[VCard]:
        return list(self)

    def __iter__(self) -> Iterator[VCard]:
        while True:
            vcard = self.read_next()
            if vcard is None:
                return
            yield vcard

    def _apply_label_policy(self, vcard: VCard) -> None:
        """Attach LABEL properties to the addresses they belong to.

        A label belongs to the first address with the same TYPE values that
        has no label yet. Labels that match no address are left alone.
        """
        if self.label_policy is LabelPolicy.PROPERTY:
            return

        for label in vcard.get_properties(Label):
            label_types = set(label.types)
            for adr in vcard.get_properties(Address):
                if adr.label is None and set(adr.types) == label_types:
                    adr.label = label.value
                    vcard.remove(label)
                    break


class VCardStreamWriter(_Stream):
    """Base class of the writers.

    Args:
        version: Version to write
        compatibility_mode: Consumer whose quirks should be accommodated
        label_policy: Whether address labels are written as parameters or as
            separate LABEL properties
        add_prodid: Add a PRODID property naming this library, replacing any
            existing one
        add_generator: Add an ``X-GENERATOR`` property
    """

    def __init__(
        self,
        version: VCardVersion = VCardVersion.V3_0,
        compatibility_mode: CompatibilityMode = CompatibilityMode.RFC,
        label_policy: LabelPolicy = LabelPolicy.AUTO,
        add_prodid: bool = True,
        add_generator: bool = False,
    ) -> None:
        self.version = version
        self.compatibility_mode = compatibility_mode
        self.label_policy = label_policy
        self.add_prodid = add_prodid
        self.add_generator = add_generator
        self.index = ScribeIndex()
        self._warnings: list[ParseWarning] = []

    def register_scribe(self, scribe: VCardPropertyScribe) -> None:
        """Register an extension scribe for this writer only."""
        self.index.register(scribe)

    def unregister_scribe(self, scribe: VCardPropertyScribe | str) -> None:
        self.index.unregister(scribe)

    @property
    def warnings(self) -> list[ParseWarning]:
        """Warnings from the most recent :meth:`write` call."""
        return list(self._warnings)

    def _warn(self, message: str, property_name: str | None = None) -> None:
        self._warnings.append(ParseWarning(message, property_name))

    def write(self, vcard: VCard) -> None:
        self._warnings = []
        self._write(vcard)
        log_warnings(type(self).__name__, self._warnings)

    def _write(self, vcard: VCard) -> None:
        raise NotImplementedError

    def _check_required(self, vcard: VCard, version: VCardVersion) -> None:
        if version in (VCardVersion.V2_1, VCardVersion.V3_0) and vcard.structured_name is None:
            self._warn(f"vCard version {version} requires that a structured name (N) be defined.")
        if version in (VCardVersion.V3_0, VCardVersion.V4_0) and vcard.formatted_name is None:
            self._warn(f"vCard version {version} requires that a formatted name (FN) be defined.")

    def _properties_to_write(self, vcard: VCard, version: VCardVersion, nested: bool) -> list[VCardProperty]:
        """The properties of a document in output order.

        PRODID and the generator are only added to top-level documents.
        Labels are moved between ADR parameters and LABEL properties
        according to the label policy.
        """
        properties: list[VCardProperty] = []
        use_parameter = self._labels_as_parameters(version)

        for prop in vcard.properties:
            if isinstance(prop, ProdId) and self.add_prodid and not nested:
                continue
            if isinstance(prop, Address) and prop.label is not None and not use_parameter:
                adr = dataclasses.replace(prop, parameters=prop.parameters.copy())
                adr.label = None
                label = Label(prop.label, group=prop.group)
                for t in prop.types:
                    label.add_type(t)
                properties.append(adr)
                properties.append(label)
                continue
            properties.append(prop)

        if not nested:
            if self.add_prodid:
                properties.insert(0, ProdId(PRODID))
            if self.add_generator:
                properties.append(RawProperty("X-GENERATOR", GENERATOR))

        return properties

    def _labels_as_parameters(self, version: VCardVersion) -> bool:
        if self.label_policy is LabelPolicy.AUTO:
            return version is VCardVersion.V4_0
        return self.label_policy is LabelPolicy.PARAMETER
