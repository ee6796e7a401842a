#!/usr/bin/env python3
"""Run the ShipsIO exchange outside a Signal K host.

Deltas for vessels learned from ShipsIO are printed as JSON lines instead
of being handed to a server, which makes this handy to check a key or to
see what ShipsIO returns around your position.

Usage
-----
Set environment variables and run::

    export SHIPSIO_KEY="your-key"
    python scripts/run_exchange.py --once --integrate

Options::

    --once               Run a single cycle immediately and exit
    --integrate          Ask ShipsIO for nearby vessels
    --signalk-url URL    Local Signal K server (default: http://localhost:3000)
    --interval SECONDS   Interval between cycles (minimum 120)
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import signal
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyshipsio import ExchangeConfig, ExchangePlugin  # noqa: E402


def _print_delta(source: str, delta: dict[str, Any]) -> None:
    print(json.dumps({"source": source, **delta}, sort_keys=True), flush=True)


def _print_error(message: str) -> None:
    print(f"ERROR: {message}", file=sys.stderr, flush=True)


async def main() -> int:
    parser = argparse.ArgumentParser(description="Exchange AIS targets with the ShipsIO network.")
    parser.add_argument("--once", action="store_true", help="Run a single cycle immediately and exit")
    parser.add_argument("--integrate", action="store_true", help="Ask ShipsIO for nearby vessels")
    parser.add_argument("--signalk-url", help="Local Signal K server base URL")
    parser.add_argument("--interval", type=float, help="Seconds between cycles (minimum 120)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    overrides: dict[str, Any] = {}
    if args.integrate:
        overrides["integrate"] = True
    if args.signalk_url:
        overrides["signalk_url"] = args.signalk_url
    if args.interval is not None:
        overrides["interval"] = args.interval
    config = ExchangeConfig.from_env(**overrides)

    async with ExchangePlugin(sink=_print_delta, on_error=_print_error) as plugin:
        if not await plugin.start(config):
            return 2

        if args.once:
            await plugin.stop()
            report = await plugin.run_cycle()
            if report is None or not report.ok:
                return 1
            print(
                f"seen={report.vessels_seen} sent={report.batch_size} posted={report.posted} "
                f"peers={report.peers_received} new={report.peers_emitted}",
                file=sys.stderr,
            )
            return 0

        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError):
                loop.add_signal_handler(sig, stop.set)
        await stop.wait()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
