"""
pyP1Meter: async reader for DSMR smart meter P1 telegrams.

Reassembles telegrams from the P1 serial stream, extracts power, energy and
gas readings and forwards them to InfluxDB.
"""

from __future__ import annotations

from .exceptions import (
    InvalidUnitError,
    MalformedNumberError,
    MalformedTimestampError,
    MetricUnavailableError,
    NoValuesError,
    P1ConnectionError,
    P1Error,
    P1ParseError,
    TagNotFoundError,
)
from .metrics import Metric, MetricKey, MetricResult, extract_metrics
from .protocol import ObisTag, TelegramAssembler, get_values_by_tag, parse_timestamp
from .reader import P1Reader
from .sink import InfluxDBSink, MetricSink
from .transport import P1Transport

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Exceptions
    "InvalidUnitError",
    "MalformedNumberError",
    "MalformedTimestampError",
    "MetricUnavailableError",
    "NoValuesError",
    "P1ConnectionError",
    "P1Error",
    "P1ParseError",
    "TagNotFoundError",
    # Protocol
    "ObisTag",
    "TelegramAssembler",
    "get_values_by_tag",
    "parse_timestamp",
    # Metrics
    "Metric",
    "MetricKey",
    "MetricResult",
    "extract_metrics",
    # I/O
    "InfluxDBSink",
    "MetricSink",
    "P1Reader",
    "P1Transport",
]
