#!/usr/bin/env python3
"""Refresh the local ride cache and print what it holds.

This script refreshes the signed-in user's offered and active rides into
the local store, then prints the upcoming rides, the active rides and the
offered rides read back from the cache.

Usage
-----
Set environment variables and run::

    export CARONAE_TOKEN="your-api-token"
    export CARONAE_STORE_PATH="~/.cache/caronae/rides.json"
    python scripts/sync_rides.py --user-id 1234

Options::

    --user-id ID        Id of the signed-in user (required)
    --json              Output as machine-readable JSON
    --skip-all          Skip the list of every upcoming ride
    --verbose, -v       Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pycaronae import CaronaeClient, CaronaeConfig, CaronaeError, Ride, User  # noqa: E402


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _ride_line(ride: Ride) -> str:
    direction = "->" if ride.going else "<-"
    driver = ride.driver.name if ride.driver is not None else "?"
    flags = " [active]" if ride.is_active else ""
    return f"  #{ride.id} {ride.date.isoformat()} {ride.neighborhood} {direction} {ride.hub} ({driver}){flags}"


async def _run(args: argparse.Namespace) -> int:
    config = CaronaeConfig.from_env()
    me = User(id=args.user_id)
    report: dict[str, list[Ride]] = {}

    async with CaronaeClient(config, current_user=me) as client:
        try:
            await client.rides.update_offered_rides()
            report["active"] = await client.rides.get_active_rides()
            if not args.skip_all:
                report["upcoming"] = await client.rides.get_all_rides()
        except CaronaeError as exc:
            print(f"Sync failed: {exc}", file=sys.stderr)
            return 1
        report["offered"] = client.rides.get_offered_rides()

    if args.json_mode:
        dumped: dict[str, Any] = {key: [ride.model_dump(mode="json") for ride in rides] for key, rides in report.items()}
        print(json.dumps(dumped, indent=2, ensure_ascii=False))
        return 0

    for key, rides in report.items():
        print(_section(f"{key} rides ({len(rides)})"))
        for ride in rides:
            print(_ride_line(ride))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Refresh the local Caronae ride cache and print it",
    )
    parser.add_argument("--user-id", type=int, required=True, help="Id of the signed-in user")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--skip-all", action="store_true", help="Skip the list of every upcoming ride")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    sys.exit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
