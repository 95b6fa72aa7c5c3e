"""Protocol layer components for P1 telegram framing and parsing.

Reference: DSMR P1 Companion Standard 5.0.2
"""

from .common import ValueUnit
from .framer import TelegramAssembler
from .obis import ObisTag
from .telegram import (
    get_value_by_tag,
    get_values_by_tag,
    parse_number,
    parse_quantity,
    parse_timestamp,
    read_obis_value,
)

__all__ = [
    # Common types
    "ValueUnit",
    # Framing
    "TelegramAssembler",
    # Telegram fields
    "ObisTag",
    "get_value_by_tag",
    "get_values_by_tag",
    "parse_number",
    "parse_quantity",
    "parse_timestamp",
    "read_obis_value",
]
