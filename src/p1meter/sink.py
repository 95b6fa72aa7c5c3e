"""Metric sinks.

``InfluxDBSink`` writes each metric as a single InfluxDB 1.x line-protocol
point::

    wattUsage,host=pi,region=eu-west value=131.5

Points carry no timestamp, so InfluxDB stamps them on arrival.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Protocol

import httpx
from influxdb_client import Point

logger = logging.getLogger(__name__)

DEFAULT_INFLUX_URL = "http://localhost:8086/write?db=p1meter"
DEFAULT_TAGS = MappingProxyType({"host": "pi", "region": "eu-west"})


class MetricSink(Protocol):
    """Anything metrics can be submitted to, one at a time."""

    async def submit(self, key: str, value: float) -> bool: ...


def format_point(key: str, value: float, tags: Mapping[str, str]) -> str:
    """Format one line-protocol point with a single ``value`` field.

    Tags are written sorted by key. Whole numbers lose their trailing ``.0``
    and non-finite values produce an empty string.
    """
    point = Point(str(key))
    for tag_key, tag_value in tags.items():
        point = point.tag(tag_key, tag_value)
    return point.field("value", float(value)).to_line_protocol()


class InfluxDBSink:
    """Posts metrics to the InfluxDB 1.x ``/write`` endpoint.

    Failures are logged and reported through the return value of ``submit``;
    they never raise.
    """

    # Public attributes
    url: str
    tags: dict[str, str]
    timeout: float | None
    failures: int

    # Private attributes
    _client: httpx.AsyncClient | None
    _client_kwargs: dict[str, Any]

    def __init__(
        self,
        url: str = DEFAULT_INFLUX_URL,
        tags: dict[str, str] | None = None,
        timeout: float | None = 10.0,
        **client_kwargs: Any,
    ) -> None:
        """Initialize sink (does not create the HTTP client).

        Args:
            url: Full write URL including the ``db`` query parameter
            tags: Tag set added to every point (default host=pi, region=eu-west)
            timeout: HTTP timeout in seconds, None to wait forever
            **client_kwargs: Additional ``httpx.AsyncClient`` arguments (auth, transport, etc.)
        """
        self.url = url
        self.tags = dict(DEFAULT_TAGS if tags is None else tags)
        self.timeout = timeout
        self.failures = 0
        self._client_kwargs = client_kwargs
        self._client = None

    async def open(self) -> None:
        """Create the HTTP client (idempotent)."""
        self._get_client()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, **self._client_kwargs)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client (idempotent)."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def submit(self, key: str, value: float) -> bool:
        """Write one metric.

        Returns:
            True if InfluxDB answered 204 No Content, False otherwise
        """
        point = format_point(key, value, self.tags)
        if not point:
            self.failures += 1
            logger.warning("Cannot write %s: %r has no line-protocol form", key, value)
            return False

        client = self._get_client()
        logger.debug("InfluxDB POST: %s %s", self.url, point)

        try:
            response = await client.post(self.url, content=point)
        except httpx.HTTPError as e:
            self.failures += 1
            logger.warning("InfluxDB request error for %s: %s", key, e)
            return False

        if response.status_code != httpx.codes.NO_CONTENT:
            self.failures += 1
            logger.warning(
                "InfluxDB POST for %s failed with status %d: %s",
                key,
                response.status_code,
                response.text,
            )
            return False
        return True

    async def __aenter__(self) -> InfluxDBSink:
        """Async context manager entry."""
        await self.open()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
