"""OBIS reference table for the P1 telegram lines this package understands.

Every supported measurement is described once in ``_ObisTable``. A descriptor
names the value group holding the reading, the unit that group must carry, and
the factor converting it to the unit published to the sink.

Reference: DSMR P1 Companion Standard 5.0.2, Table 6 (OBIS codes)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from functools import lru_cache

from .common import ValueUnit


class ObisTag(StrEnum):
    """OBIS identifiers matched against the start of telegram lines."""

    TIMESTAMP = "0-0:1.0.0"
    CURRENT_TARIFF = "0-0:96.14.0"

    POWER_DELIVERED = "1-0:1.7.0"  # Usage, kW
    POWER_RETURNED = "1-0:2.7.0"  # Production, kW

    ENERGY_DELIVERED_TARIFF_1 = "1-0:1.8.1"
    ENERGY_DELIVERED_TARIFF_2 = "1-0:1.8.2"
    ENERGY_RETURNED_TARIFF_1 = "1-0:2.8.1"
    ENERGY_RETURNED_TARIFF_2 = "1-0:2.8.2"

    GAS_DELIVERED = "0-1:24.2.1"  # (capture time)(volume*m3)


@dataclass(frozen=True, kw_only=True)
class _ObisDescriptor:
    tag: ObisTag
    group: int = 0  # Index of the value group holding the reading

    unit: ValueUnit | None = None  # Expected unit suffix, None for bare numbers
    unit_required: bool = False  # Reject the reading if the suffix is absent
    scale: float = 1.0  # Multiplier applied after parsing


_ObisTable: tuple[_ObisDescriptor, ...] = (
    _ObisDescriptor(tag=ObisTag.CURRENT_TARIFF),
    # Instantaneous power, published in W
    _ObisDescriptor(tag=ObisTag.POWER_DELIVERED, unit=ValueUnit.KW, scale=1000.0),
    _ObisDescriptor(tag=ObisTag.POWER_RETURNED, unit=ValueUnit.KW, scale=1000.0),
    # Energy registers, published in kWh
    _ObisDescriptor(tag=ObisTag.ENERGY_DELIVERED_TARIFF_1, unit=ValueUnit.KWH),
    _ObisDescriptor(tag=ObisTag.ENERGY_DELIVERED_TARIFF_2, unit=ValueUnit.KWH),
    _ObisDescriptor(tag=ObisTag.ENERGY_RETURNED_TARIFF_1, unit=ValueUnit.KWH),
    _ObisDescriptor(tag=ObisTag.ENERGY_RETURNED_TARIFF_2, unit=ValueUnit.KWH),
    # Gas: group 0 is the capture timestamp
    _ObisDescriptor(tag=ObisTag.GAS_DELIVERED, group=1, unit=ValueUnit.M3, unit_required=True),
)


@lru_cache(maxsize=16)
def find_obis_descriptor(tag: ObisTag) -> _ObisDescriptor:
    """Find the descriptor for a numeric OBIS tag.

    Raises:
        ValueError: If the tag has no numeric descriptor (e.g. the timestamp)
    """
    for descriptor in _ObisTable:
        if descriptor.tag == tag:
            return descriptor
    raise ValueError(f"OBIS tag {tag} not found in OBIS table")
