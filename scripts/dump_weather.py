#!/usr/bin/env python3
"""Dump weather data the pynetatmo library can fetch.

Calls the read operations of :class:`pynetatmo.NetatmoClient` and prints
each result as the camelCase JSON an adapter would return.

Usage
-----
Set environment variables and run::

    export NETATMO_CLIENT_ID="..."
    export NETATMO_CLIENT_SECRET="..."
    export NETATMO_REFRESH_TOKEN="..."
    python scripts/dump_weather.py history --begin-date 2021-08-01 --end-date 2021-08-04

Commands::

    devices              List the stations on the account
    current              Latest readings of the first station
    history              Merged indoor/outdoor history
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

from pynetatmo import ApiResult, NetatmoClient, NetatmoConfig  # noqa: E402
from pynetatmo.ingestion.query import parse_max_data_points  # noqa: E402


def _result_payload(result: ApiResult[Any], body: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {"success": result.success, "message": result.message}
    if result.success:
        payload["data"] = body
    else:
        payload["category"] = result.category.value if result.category else None
        payload["statusCode"] = result.status_code
    return payload


async def run(args: argparse.Namespace) -> int:
    config = NetatmoConfig.from_env()
    async with NetatmoClient(config) as client:
        if args.command == "devices":
            result = await ApiResult.capture(client.get_available_devices())
            body = [device.to_dict() for device in result.data or []]
        elif args.command == "current":
            result = await ApiResult.capture(client.get_current_weather())
            body = result.data.to_dict() if result.data is not None else None
        else:
            result = await ApiResult.capture(
                client.get_historical_weather(
                    device_id=args.device_id,
                    module_id=args.module_id,
                    scale=args.scale,
                    sensor_types=args.type,
                    begin_date=args.begin_date,
                    end_date=args.end_date,
                    limit=args.limit,
                )
            )
            max_points = parse_max_data_points(args.max_points)
            body = result.data.truncated(max_points).to_dict() if result.data is not None else None

    payload = json.dumps(_result_payload(result, body), indent=2, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
        print(f"JSON written to {args.output}", file=sys.stderr)
    else:
        print(payload)
    return 0 if result.success else 1


def main() -> None:
    parser = argparse.ArgumentParser(description="Dump Netatmo weather station data as JSON.")
    parser.add_argument("command", choices=["devices", "current", "history"])
    parser.add_argument("--device-id", help="Station MAC address (default: first station)")
    parser.add_argument("--module-id", help="Module MAC address for the station-side series")
    parser.add_argument("--scale", help="Sampling scale, e.g. 30min, 1hour, 1day (default: 1hour)")
    parser.add_argument("--type", help="Comma-separated sensor types (default: Temperature,Humidity,Pressure)")
    parser.add_argument("--begin-date", help="yyyy-MM-dd, UTC (default: seven days ago)")
    parser.add_argument("--end-date", help="yyyy-MM-dd, UTC, inclusive (default: now)")
    parser.add_argument("--limit", help="Maximum samples requested upstream (default: 1024)")
    parser.add_argument("--max-points", help="Only print the first N merged records")
    parser.add_argument("--output", "-o", help="Write output to FILE instead of stdout")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
