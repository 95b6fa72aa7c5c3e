"""Field extraction from complete P1 telegrams.

A telegram is plain text, one COSEM object per line::

    1-0:1.7.0(00.131*kW)
    0-1:24.2.1(210205130000W)(07025.512*m3)

A line starts with its OBIS tag, followed by one or more value groups in
parentheses. Lookup is by prefix: the first line starting with the tag wins.

All functions here are pure and raise ``P1ParseError`` subclasses on failure.
"""

from __future__ import annotations

import re
from datetime import datetime

from ..exceptions import (
    InvalidUnitError,
    MalformedNumberError,
    MalformedTimestampError,
    NoValuesError,
    TagNotFoundError,
)
from .common import DST_MARKERS, TIMESTAMP_FORMAT, UNIT_SEPARATOR
from .obis import ObisTag, find_obis_descriptor

_VALUE_GROUP_PATTERN = re.compile(r"\(([^()]*)\)")
_DECIMAL_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")
_TIMESTAMP_PATTERN = re.compile(r"[0-9]{12}")


def get_values_by_tag(tag: str, telegram: str) -> list[str]:
    """Return the value groups of the first line starting with tag.

    Args:
        tag: OBIS identifier, matched as a line prefix
        telegram: Complete telegram text

    Returns:
        Non-empty value groups in left-to-right order, without parentheses

    Raises:
        TagNotFoundError: If no line starts with tag
        NoValuesError: If the line carries no non-empty value group
    """
    for line in telegram.split("\n"):
        if line.startswith(tag):
            break
    else:
        raise TagNotFoundError(f"Tag {tag} not found in telegram")

    # Anything between the tag and the first "(" belongs to the identifier
    values = [group for group in _VALUE_GROUP_PATTERN.findall(line[len(tag):]) if group]
    if not values:
        raise NoValuesError(f"No values found for tag {tag}")
    return values


def get_value_by_tag(tag: str, telegram: str, group: int = 0) -> str:
    """Return a single value group of a tag line.

    Raises:
        TagNotFoundError: If no line starts with tag
        NoValuesError: If the line has fewer than group + 1 value groups
    """
    values = get_values_by_tag(tag, telegram)
    if group >= len(values):
        raise NoValuesError(
            f"Tag {tag} has {len(values)} value group(s), expected at least {group + 1}"
        )
    return values[group]


def parse_number(text: str) -> float:
    """Parse a plain decimal reading such as ``0002`` or ``007392.132``.

    Raises:
        MalformedNumberError: If text is not a decimal number
    """
    if not _DECIMAL_PATTERN.fullmatch(text):
        raise MalformedNumberError(f"Malformed number {text!r}")
    return float(text)


def parse_quantity(text: str, unit: str, required: bool = False) -> float:
    """Parse a reading carrying a ``*unit`` suffix.

    The suffix must match unit exactly: ``00.123*kVA`` is rejected for ``kW``,
    as is ``001.000*kWh``. A reading without any suffix is accepted unless
    required is set, in which case it is rejected before any numeric parse.

    Raises:
        InvalidUnitError: If the suffix differs from unit, or is missing and required
        MalformedNumberError: If the remaining text is not a decimal number
    """
    number, separator, actual_unit = text.partition(UNIT_SEPARATOR)
    if separator:
        if actual_unit != unit:
            raise InvalidUnitError(f"Invalid unit in {text!r}, expected *{unit}")
    elif required:
        raise InvalidUnitError(f"Missing unit in {text!r}, expected *{unit}")
    return parse_number(number)


def read_obis_value(tag: ObisTag, telegram: str) -> float:
    """Read one numeric OBIS value as described by the OBIS table.

    Selects the configured value group, validates its unit and applies the
    scale factor (kW readings are returned in W).

    Raises:
        P1ParseError: On any lookup, unit or number failure
    """
    descriptor = find_obis_descriptor(tag)
    text = get_value_by_tag(descriptor.tag, telegram, descriptor.group)
    if descriptor.unit is None:
        value = parse_number(text)
    else:
        value = parse_quantity(text, descriptor.unit, required=descriptor.unit_required)
    return value * descriptor.scale


def parse_timestamp(telegram: str) -> datetime:
    """Parse the telegram capture time (tag ``0-0:1.0.0``).

    The DST marker (``W``/``S``) is stripped; the result is a naive datetime in
    the meter's local time.

    Raises:
        TagNotFoundError: If the telegram has no timestamp line
        NoValuesError: If the timestamp line is empty
        MalformedTimestampError: If the value is not yyMMddHHmmss
    """
    text = get_value_by_tag(ObisTag.TIMESTAMP, telegram)
    if text.endswith(DST_MARKERS):
        text = text[:-1]
    # strptime also accepts single-digit fields
    if not _TIMESTAMP_PATTERN.fullmatch(text):
        raise MalformedTimestampError(f"Malformed timestamp {text!r}")
    try:
        return datetime.strptime(text, TIMESTAMP_FORMAT)
    except ValueError as e:
        raise MalformedTimestampError(f"Malformed timestamp {text!r}") from e
