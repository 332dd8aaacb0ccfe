"""jCard: the JSON representation of vCard 4.0 (RFC 7095).

A jCard is ``["vcard", [property, ...]]`` where each property is
``[name, {parameters}, data type, value, ...]``.
"""

from __future__ import annotations

import io
import json
import logging
from pathlib import Path
from typing import IO, Any

from ..config import MAX_DEPTH, CompatibilityMode, LabelPolicy
from ..debug import format_json
from ..internal.internal import ParseContext, Skip, Value, VCardParseError, WriteContext
from ..parameters import VCardParameters
from ..properties import RawProperty
from ..scribe.base import DataFormat, JCardValue
from ..scribe.raw import RawPropertyScribe
from ..vcard import VCard, VCardProperty, VCardVersion
from .base import VCardStreamReader, VCardStreamWriter

logger = logging.getLogger("py_vcard.io.jcard")


def _load(source: Any) -> Any:
    try:
        if isinstance(source, Path):
            with source.open(encoding="utf-8") as f:
                return json.load(f)
        if isinstance(source, (str, bytes)):
            return json.loads(source)
        return json.load(source)
    except json.JSONDecodeError as e:
        raise VCardParseError(f"Invalid JSON: {e.msg}", line=e.lineno) from e


def _is_vcard_array(value: Any) -> bool:
    return isinstance(value, list) and len(value) >= 2 and value[0] == "vcard" and isinstance(value[1], list)


class JCardReader(VCardStreamReader):
    """Reads a jCard or a JSON array of jCards.

    Args:
        source: JSON text, a text stream, or a path
        compatibility_mode: Producer whose quirks should be tolerated
        label_policy: Whether LABEL properties are merged into addresses
        max_depth: Maximum nesting of embedded vCards

    Raises:
        VCardParseError: If the input is not JSON or not a jCard
    """

    def __init__(
        self,
        source: str | bytes | IO[str] | Path,
        compatibility_mode: CompatibilityMode = CompatibilityMode.RFC,
        label_policy: LabelPolicy = LabelPolicy.AUTO,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        super().__init__(compatibility_mode, label_policy, max_depth)
        self._stream = None
        data = _load(source)

        if _is_vcard_array(data):
            documents = [data]
        elif isinstance(data, list) and all(_is_vcard_array(d) for d in data):
            documents = data
        else:
            raise VCardParseError('Not a jCard: expected ["vcard", [...]] or an array of them')
        self._documents = iter(documents)

    def _read_next(self) -> VCard | None:
        document = next(self._documents, None)
        if document is None:
            return None
        return self._parse_vcard(document[1])

    def _parse_vcard(self, properties: list[Any]) -> VCard:
        vcard = VCard(VCardVersion.V4_0)
        seen_version = False

        for index, array in enumerate(properties):
            if (
                not isinstance(array, list)
                or len(array) < 3
                or not isinstance(array[0], str)
                or not isinstance(array[1], dict)
            ):
                self._warn(f"Property #{index + 1} is not a jCard property array; skipping it.")
                continue

            name = array[0].upper()
            if name == "VERSION":
                seen_version = True
                if array[3:] != ["4.0"]:
                    self._warn(f"Unexpected version {array[3:]!r}; jCard is always vCard 4.0.", name)
                continue

            self._parse_property(vcard, name, array)

        if not seen_version:
            self._warn("vCard has no VERSION property.")
        self._apply_label_policy(vcard)
        return vcard

    def _parse_property(self, vcard: VCard, name: str, array: list[Any]) -> None:
        parameters, group = self._parse_parameters(array[1])
        data_type = array[2] if isinstance(array[2], str) else None
        if data_type == "unknown":
            data_type = None
        value = JCardValue(list(array[3:]))

        scribe = self.index.get_property_scribe(name)
        if scribe is None or not scribe.supports(DataFormat.JSON):
            if scribe is not None:
                self._warn("Property cannot be read from jCard; reading it as a raw property.", name)
            elif not name.startswith("X-"):
                self._warn("Non-standard property; reading it as a raw property.", name)
            scribe = RawPropertyScribe(name)

        context = ParseContext(VCardVersion.V4_0, self.compatibility_mode, name)
        outcome = scribe.parse_json(value, data_type, parameters, context)
        for message in context.warnings:
            self._warn(message, name)

        if isinstance(outcome, Skip):
            self._warn(f"Property skipped: {outcome.reason}", name)
            return
        if not isinstance(outcome, Value):
            self._warn("Embedded vCards are not supported in jCard; skipping the property.", name)
            return

        outcome.property.group = group
        vcard.add(outcome.property)

    def _parse_parameters(self, params: dict[str, Any]) -> tuple[VCardParameters, str | None]:
        parameters = VCardParameters()
        group = None
        for name, value in params.items():
            if name.lower() == "group":
                group = str(value)
                continue
            values = value if isinstance(value, list) else [value]
            for v in values:
                parameters.put(name, str(v))
        return parameters, group


class JCardWriter(VCardStreamWriter):
    """Collects vCards as jCard; the JSON is written by :meth:`close`.

    One vCard is written as a single jCard, several as an array of jCards.

    Args:
        out: Text stream or path to write to; None to only build the
            document (see :meth:`to_string`)
        compatibility_mode: Consumer whose quirks should be accommodated
        label_policy: Whether address labels are written as ADR parameters or
            as LABEL properties
        add_prodid: Add a PRODID property
        add_generator: Add an X-GENERATOR property
        indent: Pretty-print the JSON
    """

    def __init__(
        self,
        out: IO[str] | Path | None = None,
        compatibility_mode: CompatibilityMode = CompatibilityMode.RFC,
        label_policy: LabelPolicy = LabelPolicy.AUTO,
        add_prodid: bool = True,
        add_generator: bool = False,
        indent: bool = False,
    ) -> None:
        super().__init__(VCardVersion.V4_0, compatibility_mode, label_policy, add_prodid, add_generator)
        self._open(out, "w")
        self.indent = indent
        self.documents: list[list[Any]] = []

    def _write(self, vcard: VCard) -> None:
        self._check_required(vcard, VCardVersion.V4_0)
        properties: list[list[Any]] = [["version", {}, "text", "4.0"]]

        for prop in self._properties_to_write(vcard, VCardVersion.V4_0, nested=False):
            array = self._property_array(vcard, prop)
            if array is not None:
                properties.append(array)

        document = ["vcard", properties]
        self.documents.append(document)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"JCardWriter: wrote vCard\n{format_json(document)}")

    def _property_array(self, vcard: VCard, prop: VCardProperty) -> list[Any] | None:
        scribe = self.index.get_scribe_for(prop)
        if scribe is None:
            self._warn(f"No scribe is registered for {type(prop).__name__}; skipping it.")
            return None

        name = prop.name if isinstance(prop, RawProperty) else scribe.property_name
        if not scribe.supports(DataFormat.JSON):
            self._warn("Property cannot be written as jCard; skipping it.", name)
            return None
        if not scribe.supports_version(VCardVersion.V4_0):
            self._warn("Property is not supported by vCard 4.0; skipping it.", name)
            return None

        context = WriteContext(VCardVersion.V4_0, self.compatibility_mode, vcard)
        parameters = scribe.prepare_parameters(prop, context)
        parameters.value_type = None
        result = scribe.write_json(prop, context)
        for message in context.warnings:
            self._warn(message, name)

        if isinstance(result, Skip):
            self._warn(f"Property skipped: {result.reason}", name)
            return None

        params: dict[str, Any] = {}
        if prop.group:
            params["group"] = prop.group
        for param_name, values in parameters.items():
            params[param_name.lower()] = values[0] if len(values) == 1 else values

        data_type = scribe.data_type(prop, VCardVersion.V4_0) or "unknown"
        return [name.lower(), params, data_type, *result.values]

    def to_json(self) -> Any:
        if len(self.documents) == 1:
            return self.documents[0]
        return self.documents

    def to_string(self) -> str:
        return json.dumps(self.to_json(), indent=2 if self.indent else None, ensure_ascii=False)

    def close(self) -> None:
        """Write the JSON to the output and close it if it was opened from a path."""
        if self._stream is not None and self.documents:
            self._stream.write(self.to_string())
        super().close()


def write_string(vcards: VCard | list[VCard], **kwargs: Any) -> str:
    """Write one or more vCards as a jCard string."""
    if isinstance(vcards, VCard):
        vcards = [vcards]
    writer = JCardWriter(io.StringIO(), **kwargs)
    for vcard in vcards:
        writer.write(vcard)
    return writer.to_string()
