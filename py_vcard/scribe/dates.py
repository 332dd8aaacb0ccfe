"""Scribes for date and date-time properties (BDAY, ANNIVERSARY, REV)."""

from __future__ import annotations

import datetime
from typing import Any

from dateutil import parser as date_parser

from ..internal.html_utils import HCardElement
from ..internal.internal import ParseContext, ParseOutcome, Value, WriteContext
from ..internal.text import escape, unescape
from ..internal.xml_utils import XCardElement
from ..parameters import VCardParameters
from ..properties import Anniversary, Birthday, DateOrTimeProperty, Revision
from ..vcard import VCardVersion
from .base import JCardValue, VCardPropertyScribe

DATE_TYPES = ("date", "date-time", "date-and-or-time", "timestamp")


def format_date(value: datetime.date | datetime.datetime, extended: bool = True) -> str:
    """Format a date or date-time in ISO 8601.

    Timezone aware date-times are converted to UTC and get a ``Z`` suffix.

    Args:
        value: The date
        extended: Extended (``1980-03-05``) or basic (``19800305``) format
    """
    if isinstance(value, datetime.datetime):
        suffix = ""
        if value.tzinfo is not None:
            value = value.astimezone(datetime.UTC)
            suffix = "Z"
        fmt = "%Y-%m-%dT%H:%M:%S" if extended else "%Y%m%dT%H%M%S"
        return value.strftime(fmt) + suffix

    return value.strftime("%Y-%m-%d" if extended else "%Y%m%d")


def parse_date(value: str) -> datetime.date | datetime.datetime:
    """Parse an ISO 8601 date or date-time.

    Values without a time part are returned as :class:`datetime.date`.

    Raises:
        ValueError: If the value is not a date
    """
    value = value.strip()
    parsed = date_parser.isoparse(value)
    if "T" not in value.upper():
        return parsed.date()
    return parsed


class DateOrTimeScribe(VCardPropertyScribe):
    """Dates are written in basic format for 2.1 and 4.0 and in extended format
    for 3.0 (jCard and xCard always use extended). In 4.0 a date may be
    replaced by free text (``VALUE=text``)."""

    property_class = DateOrTimeProperty
    escapes = False

    # Data type of a 4.0 value with no VALUE parameter
    version4_data_type = "date-and-or-time"

    def default_data_type(self, version: VCardVersion) -> str | None:
        return self.version4_data_type if version is VCardVersion.V4_0 else None

    def data_type(self, prop: Any, version: VCardVersion) -> str | None:
        if prop.date is None and prop.text is not None:
            return "text"
        if version is not VCardVersion.V4_0:
            return None
        if isinstance(prop.date, datetime.datetime):
            return "timestamp" if self.version4_data_type == "timestamp" else "date-time"
        return "date"

    def prepare_parameters(self, prop: Any, context: WriteContext) -> VCardParameters:
        parameters = prop.parameters.copy()
        if context.version is VCardVersion.V4_0 and prop.date is None and prop.text is not None:
            parameters.value_type = "text"
        else:
            parameters.value_type = None
        return parameters

    def write_text(self, prop: Any, context: WriteContext) -> str:
        if prop.date is not None:
            return format_date(prop.date, extended=context.version is VCardVersion.V3_0)
        if prop.text is not None:
            if context.version is not VCardVersion.V4_0:
                context.add_warning("Text dates are only supported by vCard 4.0.")
            return escape(prop.text)
        return ""

    def parse_text(
        self,
        value: str,
        data_type: str | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        prop = self.new_property(parameters)
        parameters.value_type = None

        if data_type == "text":
            prop.text = unescape(value)
            return Value(prop)

        if not value:
            return Value(prop)

        try:
            prop.date = parse_date(value)
        except ValueError:
            context.add_warning(f'Could not parse date "{value}", keeping it as text.')
            prop.text = unescape(value)
        return Value(prop)

    def write_xml(self, prop: Any, element: XCardElement, context: WriteContext) -> None:
        if prop.date is None and prop.text is not None:
            element.append("text", prop.text)
        elif prop.date is not None:
            element.append(self.data_type(prop, VCardVersion.V4_0), format_date(prop.date, extended=True))

    def parse_xml(self, element: XCardElement, parameters: VCardParameters, context: ParseContext) -> ParseOutcome:
        text = element.first("text")
        if text is not None:
            return self.parse_text(escape(text), "text", parameters, context)
        return self.parse_text(element.first(*DATE_TYPES) or "", None, parameters, context)

    def write_json(self, prop: Any, context: WriteContext) -> JCardValue:
        if prop.date is None:
            return JCardValue.single(prop.text or "")
        return JCardValue.single(format_date(prop.date, extended=True))

    def parse_json(
        self,
        value: JCardValue,
        data_type: str | None,
        parameters: VCardParameters,
        context: ParseContext,
    ) -> ParseOutcome:
        text = value.as_single()
        if data_type == "text":
            text = escape(text)
        return self.parse_text(text, data_type, parameters, context)

    def write_html(self, prop: Any, element: HCardElement, context: WriteContext) -> None:
        if prop.date is None:
            element.set_text(prop.text or "")
            return
        element.element.tag = "time"
        element.element.set("datetime", format_date(prop.date, extended=True))
        element.set_text(format_date(prop.date, extended=True))

    def parse_html(self, element: HCardElement, context: ParseContext) -> ParseOutcome:
        return self.parse_text(element.value(), None, VCardParameters(), context)


class BirthdayScribe(DateOrTimeScribe):
    property_class = Birthday


class AnniversaryScribe(DateOrTimeScribe):
    property_class = Anniversary
    supported_versions = frozenset({VCardVersion.V4_0})


class RevisionScribe(DateOrTimeScribe):
    property_class = Revision
    version4_data_type = "timestamp"
