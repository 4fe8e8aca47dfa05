"""Parser for the ``werte<N>.xml`` data pages."""

from __future__ import annotations

from enum import StrEnum
import re
from typing import Any
from xml.sax.saxutils import unescape

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

IDENTIFIER_RE = re.compile(r"v\d{5}")

# An <ID> pairs only with a <VA> separated from it by whitespace alone.
_PAIR_RE = re.compile(r"<ID>([^<]*)</ID>\s*<VA>([^<]*)</VA>")
_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)")


class ValueType(StrEnum):
    """Type tag stored alongside each state entry."""

    NUMBER = "number"
    MIXED = "mixed"
    BOOLEAN = "boolean"


class PageParseError(ValueError):
    """Raised when a page body does not follow the ID/VA grammar."""


class Reading(BaseModel):
    """One ``(identifier, raw value)`` pair taken from a page."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    raw: str

    @field_validator("identifier", mode="before")
    @classmethod
    def _check_identifier(cls, value: Any) -> Any:
        """Accept only ``v`` followed by five digits, ignoring padding."""

        text = value.strip() if isinstance(value, str) else value
        if not isinstance(text, str) or not IDENTIFIER_RE.fullmatch(text):
            raise ValueError(f"invalid identifier {value!r}")
        return text


def infer_value(raw: str) -> tuple[int | float | str, ValueType]:
    """Return ``raw`` coerced to its inferred type.

    Text is numeric only when its trimmed form is a plain decimal numeral.
    """

    text = raw.strip()
    if text and _NUMBER_RE.fullmatch(text):
        if "." in text:
            return float(text), ValueType.NUMBER
        return int(text), ValueType.NUMBER
    return raw, ValueType.MIXED


def iter_pairs(body: str):
    """Yield ``(identifier text, value text)`` for every adjacent ID/VA pair."""

    for match in _PAIR_RE.finditer(body):
        yield match.group(1), match.group(2)


def parse_page(body: str | None) -> list[Reading]:
    """Extract every identifier/value pair from a page body.

    An ``<ID>`` without an adjacent ``<VA>`` is skipped. An identifier that
    is not ``v`` plus five digits rejects the whole page.
    """

    if not body:
        raise PageParseError("Empty page body")

    readings: list[Reading] = []
    for identifier, text in iter_pairs(body):
        try:
            reading = Reading(identifier=identifier, raw=unescape(text))
        except ValidationError as err:
            raise PageParseError(str(err)) from err
        readings.append(reading)

    if not readings:
        raise PageParseError("No readings found")
    return readings


__all__ = [
    "IDENTIFIER_RE",
    "PageParseError",
    "Reading",
    "ValueType",
    "infer_value",
    "iter_pairs",
    "parse_page",
]
