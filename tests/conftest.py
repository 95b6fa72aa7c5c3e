"""Shared test fixtures for pyP1Meter tests."""

from __future__ import annotations

import os
import pty
from collections.abc import Generator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

# DSMR 4.2 telegram captured from a Kaifa MA105 meter
SAMPLE_TELEGRAM = (
    "/KFM5KAIFA-METER\r\n"
    "\r\n"
    "1-3:0.2.8(42)\r\n"
    "0-0:1.0.0(210212094443W)\r\n"
    "0-0:96.1.1(4530303235303030303634383435373136)\r\n"
    "1-0:1.8.1(007392.132*kWh)\r\n"
    "1-0:1.8.2(007139.800*kWh)\r\n"
    "1-0:2.8.1(001795.226*kWh)\r\n"
    "1-0:2.8.2(004446.275*kWh)\r\n"
    "0-0:96.14.0(0002)\r\n"
    "1-0:1.7.0(00.131*kW)\r\n"
    "1-0:2.7.0(00.000*kW)\r\n"
    "0-0:96.7.21(00001)\r\n"
    "0-0:96.7.9(00001)\r\n"
    "1-0:99.97.0(2)(0-0:96.7.19)(181206112732W)(0000007692*s)(000101000001W)(2147483647*s)\r\n"
    "1-0:32.32.0(00000)\r\n"
    "1-0:32.36.0(00000)\r\n"
    "0-0:96.13.1()\r\n"
    "0-0:96.13.0()\r\n"
    "1-0:31.7.0(002*A)\r\n"
    "1-0:21.7.0(00.123*kW)\r\n"
    "1-0:22.7.0(00.000*kW)\r\n"
    "0-1:24.1.0(003)\r\n"
    "0-1:96.1.0(4730303331303033333930303231353136)\r\n"
    "0-1:24.2.1(210205130000W)(07025.512*m3)\r\n"
    "!8234\r\n"
)


def drop_line(telegram: str, tag: str) -> str:
    """Return telegram without the line starting with tag."""
    return "".join(line for line in telegram.splitlines(keepends=True) if not line.startswith(tag))


def replace_line(telegram: str, tag: str, line: str) -> str:
    """Return telegram with the line starting with tag replaced by line."""
    return "".join(
        f"{line}\r\n" if current.startswith(tag) else current
        for current in telegram.splitlines(keepends=True)
    )


@pytest.fixture
def sample_stream() -> bytes:
    """Raw stream: tail of a previous telegram, one full telegram, start of the next."""
    return b"0-1:24.2.1(210205125959W)(07025.500*m3)\r\n!1F2E\r\n" + SAMPLE_TELEGRAM.encode() + b"/KFM5KAIFA-METER\r\n"


@pytest.fixture
def mock_serial_connection() -> tuple[AsyncMock, AsyncMock]:
    """Create mock reader and writer for serial connections."""
    mock_reader = AsyncMock()
    mock_writer = AsyncMock()

    mock_writer.close = MagicMock()
    mock_writer.wait_closed = AsyncMock()

    mock_reader.read = AsyncMock()

    return mock_reader, mock_writer


@pytest.fixture
def mock_open_serial_connection(mock_serial_connection: tuple[AsyncMock, AsyncMock]) -> Any:
    """Mock serial_asyncio_fast.open_serial_connection."""
    mock_reader, mock_writer = mock_serial_connection

    async def mock_open(*_args: Any, **_kwargs: Any) -> tuple[AsyncMock, AsyncMock]:
        return mock_reader, mock_writer

    return mock_open


class RecordingSink:
    """Metric sink that records submissions and fails for selected keys."""

    def __init__(self, failing: set[str] | None = None) -> None:
        self.submitted: list[tuple[str, float]] = []
        self.failing = failing or set()

    async def submit(self, key: str, value: float) -> bool:
        self.submitted.append((key, value))
        return key not in self.failing


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


class VirtualP1Port:
    """Virtual P1 port using pty: writes to the master side reach the reader on the slave side."""

    def __init__(self) -> None:
        self.master_fd: int = -1
        self.slave_fd: int = -1
        self.slave_name: str = ""

    def start(self) -> None:
        """Start the virtual serial port."""
        if os.name == "nt":
            pytest.skip("pty not available on Windows")

        self.master_fd, self.slave_fd = pty.openpty()
        self.slave_name = os.ttyname(self.slave_fd)

    def stop(self) -> None:
        """Stop the virtual serial port."""
        if self.master_fd >= 0:
            os.close(self.master_fd)
        if self.slave_fd >= 0:
            os.close(self.slave_fd)

    def send(self, data: bytes) -> None:
        """Emit bytes as the meter would."""
        os.write(self.master_fd, data)


@pytest.fixture
def virtual_p1_port() -> Generator[VirtualP1Port]:
    """Create virtual P1 port for testing."""
    port = VirtualP1Port()
    port.start()
    yield port
    port.stop()


# Test markers for different test types
def pytest_configure(config: Any) -> None:
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test (fast, uses mocks)"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (slower, uses real I/O)"
    )
    config.addinivalue_line(
        "markers", "serial: mark test as requiring serial port simulation"
    )
