#!/usr/bin/env python3
"""Print the arbitrated position stream read from an MQTT broker.

Sensors publish JSON objects such as ``{"lat": 52.1, "lon": 4.3, "time": 1700000000}``
on ``<prefix>/gps`` and ``<prefix>/network``. This script bootstraps from
retained messages, then prints every result the arbitration emits.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from geostream import ArbitrationStream, StreamConfig  # noqa: E402
from geostream.mqtt import MqttLocationService  # noqa: E402

_LOG = logging.getLogger("watch_location")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--host", help="MQTT broker host (default: GEOSTREAM_MQTT_HOST or localhost)")
    parser.add_argument("--port", type=int, help="MQTT broker port")
    parser.add_argument("--prefix", help="Topic prefix (default: location)")
    parser.add_argument("--settle", type=float, default=1.0, help="Seconds to wait for retained messages")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


async def _run(args: argparse.Namespace) -> None:
    mqtt_overrides = {
        key: value
        for key, value in (("host", args.host), ("port", args.port), ("topic_prefix", args.prefix))
        if value is not None
    }
    config = StreamConfig.from_env(mqtt=mqtt_overrides)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    with MqttLocationService(config.mqtt) as service:
        # Give retained last-known messages a chance to arrive before bootstrapping.
        await asyncio.sleep(args.settle)
        stream = ArbitrationStream(service, config)
        with stream.subscribe(
            lambda r: print(f"#{r.as_of:<5} {r.provider:<8} {r.latitude:.6f} {r.longitude:.6f}", flush=True)
        ):
            await stop.wait()
        stream.close()
    _LOG.info("Stopped")


def main() -> None:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(_run(args))


if __name__ == "__main__":
    main()
