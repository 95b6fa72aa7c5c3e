"""P1 transport layer for handling the serial connection and raw reads."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import serial_asyncio_fast

from .exceptions import P1ConnectionError

logger = logging.getLogger(__name__)


class P1Transport:
    """Handles connection and raw byte input from a P1 port.

    Supports multiple connection types:
    - Serial ports: /dev/ttyUSB0, COM3
    - TCP sockets: socket://192.168.1.100:2001 (ser2net style P1 bridges)
    - RFC2217: rfc2217://192.168.1.100:2001

    All connection types are handled transparently by pyserial-asyncio-fast.

    Default serial parameters follow DSMR 4.0 and later:
    - 115200 baud
    - 8 data bits
    - No parity
    - 1 stop bit (8N1 format)

    The P1 port only transmits, so the transport is read-only.
    """

    # Public attributes
    url: str
    chunk_size: int
    serial_kwargs: dict[str, Any]

    # Private attributes
    _reader: asyncio.StreamReader | None
    _writer: asyncio.StreamWriter | None
    _connected: bool

    def __init__(
        self,
        url: str,
        baudrate: int = 115200,
        bytesize: int = 8,
        parity: str = "N",
        stopbits: float = 1,
        chunk_size: int = 1024,
        **kwargs: Any,
    ) -> None:
        """Initialize transport (does not open connection).

        Args:
            url: Connection URL (serial port or socket://host:port or rfc2217://host:port)
            baudrate: Baud rate (default 115200; DSMR 2.x/3.x meters use 9600)
            bytesize: Number of data bits (default 8; DSMR 2.x/3.x use 7)
            parity: Parity checking - 'N'=None, 'E'=Even, 'O'=Odd (default 'N'; DSMR 2.x/3.x use 'E')
            stopbits: Number of stop bits - 1, 1.5, or 2 (default 1)
            chunk_size: Maximum number of bytes returned by a single read
            **kwargs: Additional serial parameters (xonxoff, rtscts, dsrdtr, etc.)
        """
        self.url = url
        self.chunk_size = chunk_size

        # Build serial parameters dictionary
        self.serial_kwargs = {
            "baudrate": baudrate,
            "bytesize": bytesize,
            "parity": parity,
            "stopbits": stopbits,
            **kwargs,  # Additional parameters like flow control
        }

        # Initialize connection state
        self._reader = None
        self._writer = None
        self._connected = False

    async def open(self) -> None:
        """Open connection to the P1 port.

        Raises:
            P1ConnectionError: If connection fails
        """
        if self._connected:
            return  # Already connected

        try:
            (
                self._reader,
                self._writer,
            ) = await serial_asyncio_fast.open_serial_connection(
                url=self.url, **self.serial_kwargs
            )
            self._connected = True
        except Exception as e:
            raise P1ConnectionError(
                f"Failed to open connection to {self.url}: {e}"
            ) from e

        logger.info("Opened %s with %s", self.url, self.serial_kwargs)

    async def close(self) -> None:
        """Close connection (idempotent - safe to call multiple times)."""
        if not self._connected and not self._writer:
            return  # Already closed

        if self._writer:
            try:
                self._writer.close()
                await self._writer.wait_closed()
            except Exception as e:
                logger.debug("Ignoring error while closing %s: %s", self.url, e)

        self._reader = None
        self._writer = None
        self._connected = False

    def is_connected(self) -> bool:
        """Check if transport is connected.

        Returns:
            True if connected, False otherwise
        """
        return self._connected

    async def read_chunk(self) -> bytes:
        """Wait for the next chunk of raw bytes.

        Returns whatever is available, between 1 and chunk_size bytes. There
        is no timeout: a silent meter blocks the caller.

        Returns:
            The chunk, or empty bytes once the stream has been closed

        Raises:
            P1ConnectionError: If not connected or the read fails
        """
        if not self._connected or not self._reader:
            raise P1ConnectionError("Transport is not connected")

        try:
            data = await self._reader.read(self.chunk_size)
        except Exception as e:
            self._connected = False  # Mark as disconnected on error
            raise P1ConnectionError(f"Failed to read data: {e}") from e
        return data

    async def __aenter__(self) -> P1Transport:
        """Async context manager entry."""
        await self.open()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
