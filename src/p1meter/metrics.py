"""Metrics published for every telegram.

Measurements (all floats):

- currentTariff: active tariff, 1 or 2
- wattUsage: current usage in W
- wattUsageAccumulative: accumulated usage in kWh (sum of both tariffs)
- wattProduction: current production in W
- wattNett: current nett power in W (production minus usage)
- wattProductionAccumulative: accumulated production in kWh (sum of both tariffs)
- wattAccumulativeNett: accumulated nett energy in kWh (production minus usage)
- gasUsageAccumulative: accumulated gas usage in m3

Each extractor raises a ``P1ParseError`` subclass. ``extract_metrics`` turns
every outcome into a ``MetricResult`` so one failing field never hides the
others.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from .exceptions import MetricUnavailableError, P1ParseError
from .protocol.obis import ObisTag
from .protocol.telegram import read_obis_value


class MetricKey(StrEnum):
    """Keys under which metrics are submitted to the sink."""

    CURRENT_TARIFF = "currentTariff"
    WATT_USAGE = "wattUsage"
    WATT_USAGE_ACCUMULATIVE = "wattUsageAccumulative"
    WATT_PRODUCTION = "wattProduction"
    WATT_NETT = "wattNett"
    WATT_PRODUCTION_ACCUMULATIVE = "wattProductionAccumulative"
    WATT_ACCUMULATIVE_NETT = "wattAccumulativeNett"
    GAS_USAGE_ACCUMULATIVE = "gasUsageAccumulative"


@dataclass(frozen=True)
class Metric:
    key: str
    value: float


@dataclass(frozen=True)
class MetricResult:
    """Outcome of extracting one metric: either a value or the error."""

    key: MetricKey
    value: float | None = None
    error: P1ParseError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def metric(self) -> Metric:
        """Return the extracted metric.

        Raises:
            ValueError: If extraction failed
        """
        if self.value is None:
            raise ValueError(f"Metric {self.key} is unavailable: {self.error}")
        return Metric(self.key, self.value)


# =============================================================================
# Extractors
# =============================================================================


def current_tariff(telegram: str) -> float:
    return read_obis_value(ObisTag.CURRENT_TARIFF, telegram)


def watt_usage(telegram: str) -> float:
    return read_obis_value(ObisTag.POWER_DELIVERED, telegram)


def watt_production(telegram: str) -> float:
    return read_obis_value(ObisTag.POWER_RETURNED, telegram)


def watt_usage_accumulative(telegram: str) -> float:
    """Delivered energy over both tariffs, in kWh."""
    return read_obis_value(ObisTag.ENERGY_DELIVERED_TARIFF_1, telegram) + read_obis_value(
        ObisTag.ENERGY_DELIVERED_TARIFF_2, telegram
    )


def watt_production_accumulative(telegram: str) -> float:
    """Returned energy over both tariffs, in kWh."""
    return read_obis_value(ObisTag.ENERGY_RETURNED_TARIFF_1, telegram) + read_obis_value(
        ObisTag.ENERGY_RETURNED_TARIFF_2, telegram
    )


def gas_usage_accumulative(telegram: str) -> float:
    return read_obis_value(ObisTag.GAS_DELIVERED, telegram)


# =============================================================================
# Derivation
# =============================================================================


@dataclass(frozen=True, kw_only=True)
class _NettDescriptor:
    key: MetricKey
    production: MetricKey
    usage: MetricKey


_MetricTable: tuple[tuple[MetricKey, Callable[[str], float]], ...] = (
    (MetricKey.CURRENT_TARIFF, current_tariff),
    (MetricKey.WATT_USAGE, watt_usage),
    (MetricKey.WATT_USAGE_ACCUMULATIVE, watt_usage_accumulative),
    (MetricKey.WATT_PRODUCTION, watt_production),
    (MetricKey.WATT_PRODUCTION_ACCUMULATIVE, watt_production_accumulative),
    (MetricKey.GAS_USAGE_ACCUMULATIVE, gas_usage_accumulative),
)

# Each nett metric is published right after its production metric
_NettTable: tuple[_NettDescriptor, ...] = (
    _NettDescriptor(
        key=MetricKey.WATT_NETT,
        production=MetricKey.WATT_PRODUCTION,
        usage=MetricKey.WATT_USAGE,
    ),
    _NettDescriptor(
        key=MetricKey.WATT_ACCUMULATIVE_NETT,
        production=MetricKey.WATT_PRODUCTION_ACCUMULATIVE,
        usage=MetricKey.WATT_USAGE_ACCUMULATIVE,
    ),
)


def _extract(key: MetricKey, extractor: Callable[[str], float], telegram: str) -> MetricResult:
    try:
        return MetricResult(key, value=extractor(telegram))
    except P1ParseError as e:
        return MetricResult(key, error=e)


def nett(production: MetricResult, usage: MetricResult, key: MetricKey) -> MetricResult:
    """Derive production minus usage, or report which operand is missing."""
    for operand in (production, usage):
        if operand.value is None:
            return MetricResult(
                key, error=MetricUnavailableError(f"{key} needs {operand.key}: {operand.error}")
            )
    return MetricResult(key, value=production.value - usage.value)


def extract_metrics(telegram: str) -> list[MetricResult]:
    """Extract every metric from a telegram in publication order.

    Order: tariff, usage, accumulated usage, production, nett, accumulated
    production, accumulated nett, gas.
    """
    results: dict[MetricKey, MetricResult] = {}
    ordered: list[MetricResult] = []

    for key, extractor in _MetricTable:
        result = _extract(key, extractor, telegram)
        results[key] = result
        ordered.append(result)

        for descriptor in _NettTable:
            if descriptor.production == key:
                ordered.append(nett(results[key], results[descriptor.usage], descriptor.key))

    return ordered
