"""Telegram reassembly from an arbitrarily chunked P1 byte stream.

The serial port delivers whatever bytes happen to be available, so a telegram
may arrive in any number of reads and a read may split a line, a value group
or a marker. ``TelegramAssembler`` keeps the text of the telegram in flight and
works on whole chunks:

- a chunk containing ``/`` (start of frame) first discards the buffer
- every chunk is appended
- a chunk containing ``!`` (end of frame) completes the telegram

A start marker always resynchronizes the assembler, so a truncated telegram is
dropped silently when the next one begins. There is no size limit and no
timeout: if ``!`` never arrives the buffer grows until the next ``/``.
"""

from __future__ import annotations

import codecs
import logging

from .common import END_OF_FRAME, START_OF_FRAME

logger = logging.getLogger(__name__)


class TelegramAssembler:
    """Accumulates byte chunks into complete telegram texts.

    Holds a single telegram buffer; not safe for interleaved streams.
    """

    # Private attributes
    _buffer: str
    _decoder: codecs.IncrementalDecoder

    def __init__(self, encoding: str = "utf-8") -> None:
        """Initialize an empty assembler.

        Args:
            encoding: Text encoding of the stream (P1 is ASCII; invalid bytes
                      are replaced with U+FFFD instead of raising)
        """
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""

    @property
    def pending(self) -> int:
        """Number of characters buffered for the telegram in flight."""
        return len(self._buffer)

    def reset(self) -> None:
        """Drop the telegram in flight and any partially decoded bytes."""
        self._decoder.reset()
        self._buffer = ""

    def feed(self, chunk: bytes) -> str | None:
        """Add one chunk to the stream.

        Args:
            chunk: Raw bytes as read from the transport

        Returns:
            The complete telegram if this chunk carried the end marker,
            otherwise None
        """
        text = self._decoder.decode(chunk)

        if START_OF_FRAME in text:
            if self._buffer:
                logger.debug("Discarding %d buffered characters on start of frame", len(self._buffer))
            self._buffer = ""

        self._buffer += text

        if END_OF_FRAME not in text:
            return None

        telegram = self._buffer
        self._buffer = ""
        return telegram
