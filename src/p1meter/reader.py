"""P1 read loop: serial chunks in, metrics out.

One task does everything in sequence. A chunk is read, fed to the assembler
and, when it completes a telegram, every metric is submitted to the sink and
awaited before the next chunk is read. A slow sink therefore slows down
reading; the serial driver buffers the bytes in the meantime.
"""

from __future__ import annotations

import logging
from typing import Protocol

from .exceptions import P1ConnectionError
from .metrics import MetricResult, extract_metrics
from .protocol.framer import TelegramAssembler
from .sink import MetricSink

logger = logging.getLogger(__name__)


class ChunkSource(Protocol):
    async def read_chunk(self) -> bytes: ...


class P1Reader:
    """Reads telegrams from a chunk source and publishes their metrics."""

    # Public attributes
    source: ChunkSource
    sink: MetricSink
    assembler: TelegramAssembler
    telegrams: int

    def __init__(
        self,
        source: ChunkSource,
        sink: MetricSink,
        assembler: TelegramAssembler | None = None,
    ) -> None:
        self.source = source
        self.sink = sink
        self.assembler = assembler if assembler is not None else TelegramAssembler()
        self.telegrams = 0

    async def run(self) -> None:
        """Process chunks until the stream ends or fails.

        Raises:
            P1ConnectionError: If the source fails while reading
        """
        while True:
            try:
                chunk = await self.source.read_chunk()
            except P1ConnectionError as e:
                logger.error("Quitting due to read error: %s", e)
                raise

            if not chunk:
                logger.info("Quitting: end of stream after %d telegram(s)", self.telegrams)
                return

            await self.feed(chunk)

    async def feed(self, chunk: bytes) -> list[MetricResult] | None:
        """Feed one chunk; publish and return the metrics if it completed a telegram."""
        telegram = self.assembler.feed(chunk)
        if telegram is None:
            return None
        return await self.process_telegram(telegram)

    async def process_telegram(self, telegram: str) -> list[MetricResult]:
        """Extract all metrics from a telegram and submit them in order."""
        self.telegrams += 1
        logger.debug("Complete telegram:\n%s", telegram)

        results = extract_metrics(telegram)
        for result in results:
            if not result.ok:
                logger.warning("Skipping %s: %s", result.key, result.error)
                continue

            metric = result.metric()
            logger.info("%s: %s", metric.key, metric.value)
            if not await self.sink.submit(metric.key, metric.value):
                logger.warning("Failed to submit %s", metric.key)
        return results
