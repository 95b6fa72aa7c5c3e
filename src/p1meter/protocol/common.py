"""Common types and constants shared across protocol components.

Reference: DSMR P1 Companion Standard 5.0.2, section 6.2 (telegram format)
"""

from enum import StrEnum

START_OF_FRAME = "/"  # First character of the header line ("/KFM5KAIFA-METER")
END_OF_FRAME = "!"  # Precedes the CRC16 on the last line ("!8234")

UNIT_SEPARATOR = "*"  # Separates a reading from its unit inside a value group

DST_MARKERS = ("W", "S")  # Trailing timestamp marker: winter / summer time
TIMESTAMP_FORMAT = "%y%m%d%H%M%S"


class ValueUnit(StrEnum):
    """Unit suffixes carried by the value groups this package reads."""

    KW = "kW"  # Kilowatt (instantaneous power)
    KWH = "kWh"  # Kilowatt-hour (energy register)
    M3 = "m3"  # Cubic meter (gas volume)
