"""Scribe for the GEO property."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from ..internal.html_utils import HCardElement
from ..internal.internal import ParseContext, ParseOutcome, Value, WriteContext
from ..internal.xml_utils import XCardElement
from ..parameters import VCardParameters
from ..properties import Geo
from ..vcard import VCardVersion
from .base import JCardValue, VCardPropertyScribe

GEO_URI_SCHEME = "geo:"


def format_coordinate(value: float) -> str:
    """Format a coordinate with at most four decimals, rounding half up."""
    d = Decimal(str(value)).quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)
    return format(d.normalize(), "f")


class GeoScribe(VCardPropertyScribe):
    """GEO is ``lat;long`` in 2.1 and 3.0 and a ``geo:`` URI in 4.0."""

    property_class = Geo
    escapes = False

    def default_data_type(self, version: VCardVersion) -> str | None:
        return "uri" if version is VCardVersion.V4_0 else None

    def _prepare_parameters(self, prop: Any, parameters: VCardParameters, context: WriteContext) -> None:
        if context.version is VCardVersion.V4_0:
            parameters.value_type = "uri"

    def write_text(self, prop: Any, context: WriteContext) -> str:
        if prop.latitude is None or prop.longitude is None:
            return ""
        if not _is_finite(prop.latitude, prop.longitude):
            context.add_warning("Coordinates must be finite numbers; writing an empty value.")
            return ""

        lat = format_coordinate(prop.latitude)
        lon = format_coordinate(prop.longitude)
        if context.version is VCardVersion.V4_0:
            return f"{GEO_URI_SCHEME}{lat},{lon}"
        return f"{lat};{lon}"

    def parse_text(
        self,
        value: str,
        data_type: str | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        prop = self.new_property(parameters)
        value = value.strip()

        if value.lower().startswith(GEO_URI_SCHEME):
            # geo:lat,long;crs=...;u=...
            coords = value[len(GEO_URI_SCHEME) :].split(";")[0].split(",")
        else:
            coords = value.split(";")

        if len(coords) < 2:
            context.add_warning(f'Could not parse coordinates from "{value}".')
            return Value(prop)

        try:
            latitude = float(coords[0])
            longitude = float(coords[1])
        except ValueError:
            context.add_warning(f'Coordinates are not numbers: "{value}".')
            return Value(prop)

        if not _is_finite(latitude, longitude):
            context.add_warning(f'Coordinates must be finite numbers: "{value}".')
            return Value(prop)

        prop.latitude = latitude
        prop.longitude = longitude
        return Value(prop)

    def write_xml(self, prop: Any, element: XCardElement, context: WriteContext) -> None:
        element.append("uri", self.write_text(prop, context))

    def write_json(self, prop: Any, context: WriteContext) -> JCardValue:
        return JCardValue.single(self.write_text(prop, context))

    def write_html(self, prop: Any, element: HCardElement, context: WriteContext) -> None:
        if prop.latitude is None or prop.longitude is None:
            return
        if not _is_finite(prop.latitude, prop.longitude):
            context.add_warning("Coordinates must be finite numbers; writing an empty value.")
            return
        element.append("abbr", "latitude", format_coordinate(prop.latitude)).tail = ", "
        element.append("abbr", "longitude", format_coordinate(prop.longitude))

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        latitude = element.first_value("latitude")
        longitude = element.first_value("longitude")
        if latitude is None and longitude is None:
            return self.parse_text(element.value(), None, VCardParameters(), context)

        prop = self.new_property(VCardParameters())
        try:
            prop.latitude = float(latitude) if latitude is not None else None
            prop.longitude = float(longitude) if longitude is not None else None
        except ValueError:
            prop.latitude = prop.longitude = None
            context.add_warning(f'Coordinates are not numbers: "{latitude}", "{longitude}".')
            return Value(prop)

        if not _is_finite(prop.latitude, prop.longitude):
            prop.latitude = prop.longitude = None
            context.add_warning(f'Coordinates must be finite numbers: "{latitude}", "{longitude}".')
        return Value(prop)


def _is_finite(*coordinates: float | None) -> bool:
    return all(c is None or math.isfinite(c) for c in coordinates)
