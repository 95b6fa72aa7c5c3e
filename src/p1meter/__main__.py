"""Command line entry point: ``p1meter`` / ``python -m p1meter``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from collections.abc import Sequence

from .exceptions import P1Error
from .reader import P1Reader
from .sink import DEFAULT_INFLUX_URL, DEFAULT_TAGS, InfluxDBSink
from .transport import P1Transport

logger = logging.getLogger(__name__)

DEFAULT_DEVICE = "/dev/ttyUSB0"


def _tag(text: str) -> tuple[str, str]:
    key, separator, value = text.partition("=")
    if not separator or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {text!r}")
    return key, value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="p1meter",
        description="Read DSMR P1 telegrams from a smart meter and post the readings to InfluxDB.",
    )
    parser.add_argument(
        "--device",
        default=os.environ.get("P1METER_DEVICE", DEFAULT_DEVICE),
        help="serial port or socket:// URL (env P1METER_DEVICE, default %(default)s)",
    )
    parser.add_argument("--baudrate", type=int, default=115200, help="default %(default)s")
    parser.add_argument("--bytesize", type=int, choices=(7, 8), default=8, help="default %(default)s")
    parser.add_argument("--parity", choices=("N", "E", "O"), default="N", help="default %(default)s")
    parser.add_argument("--stopbits", type=float, choices=(1, 1.5, 2), default=1, help="default %(default)s")
    parser.add_argument(
        "--influx-url",
        default=os.environ.get("P1METER_INFLUX_URL", DEFAULT_INFLUX_URL),
        help="InfluxDB write URL (env P1METER_INFLUX_URL, default %(default)s)",
    )
    parser.add_argument(
        "--tag",
        dest="tags",
        type=_tag,
        action="append",
        metavar="KEY=VALUE",
        help="tag added to every point, repeatable (default host=pi region=eu-west)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="default %(default)s",
    )
    return parser


async def run(args: argparse.Namespace) -> None:
    transport = P1Transport(
        args.device,
        baudrate=args.baudrate,
        bytesize=args.bytesize,
        parity=args.parity,
        stopbits=args.stopbits,
    )
    tags = dict(args.tags) if args.tags else dict(DEFAULT_TAGS)

    async with transport, InfluxDBSink(args.influx_url, tags=tags) as sink:
        await P1Reader(transport, sink).run()


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        asyncio.run(run(args))
    except P1Error as e:
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
