"""Unit tests for the command line entry point."""

from __future__ import annotations

import argparse
from unittest.mock import AsyncMock, patch

import pytest

from p1meter.__main__ import build_parser, main
from p1meter.exceptions import P1ConnectionError
from p1meter.sink import DEFAULT_INFLUX_URL


@pytest.mark.unit
class TestBuildParser:
    """Test argument parsing."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("P1METER_DEVICE", raising=False)
        monkeypatch.delenv("P1METER_INFLUX_URL", raising=False)

        args = build_parser().parse_args([])

        assert args.device == "/dev/ttyUSB0"
        assert args.baudrate == 115200
        assert args.bytesize == 8
        assert args.parity == "N"
        assert args.stopbits == 1
        assert args.influx_url == DEFAULT_INFLUX_URL
        assert args.tags is None
        assert args.log_level == "INFO"

    def test_environment_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("P1METER_DEVICE", "socket://p1bridge:2001")
        monkeypatch.setenv("P1METER_INFLUX_URL", "http://influx:8086/write?db=energy")

        args = build_parser().parse_args([])

        assert args.device == "socket://p1bridge:2001"
        assert args.influx_url == "http://influx:8086/write?db=energy"

    def test_tags(self) -> None:
        args = build_parser().parse_args(["--tag", "host=meter", "--tag", "region=nl"])

        assert dict(args.tags) == {"host": "meter", "region": "nl"}

    def test_invalid_tag(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--tag", "host"])


@pytest.mark.unit
class TestMain:
    """Test process exit codes."""

    def test_connection_error_exit_code(self) -> None:
        with patch("p1meter.__main__.run", AsyncMock(side_effect=P1ConnectionError("Failed to open connection"))):
            assert main(["--device", "/dev/nonexistent"]) == 1

    def test_clean_exit(self) -> None:
        run = AsyncMock(return_value=None)

        with patch("p1meter.__main__.run", run):
            assert main(["--log-level", "DEBUG"]) == 0

        (args,) = run.await_args.args
        assert isinstance(args, argparse.Namespace)
        assert args.log_level == "DEBUG"
