"""P1 exception classes."""

from __future__ import annotations


class P1Error(Exception):
    """Base exception for all P1 errors."""


class P1ConnectionError(P1Error):
    """Connection-related errors."""


class P1ParseError(P1Error):
    """Telegram-level errors raised while extracting a single metric."""


class TagNotFoundError(P1ParseError):
    """No telegram line starts with the requested OBIS tag."""


class NoValuesError(P1ParseError):
    """Tag line found, but it carries no (or too few) value groups."""


class InvalidUnitError(P1ParseError):
    """Value group unit suffix is missing or not the one expected for the tag."""


class MalformedNumberError(P1ParseError):
    """Value group is not a decimal number once its unit suffix is removed."""


class MalformedTimestampError(P1ParseError):
    """Timestamp value group does not match the yyMMddHHmmss format."""


class MetricUnavailableError(P1ParseError):
    """Derived metric could not be computed because an operand failed."""
