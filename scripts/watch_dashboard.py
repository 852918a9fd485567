#!/usr/bin/env python3
"""Watch a live sensor hub event stream from the terminal.

Connects the SSE transport to a dashboard and prints every render update:
one line per re-rendered device card plus the header indicators.

Configuration comes from ``FIREALARM_*`` environment variables; ``--url``
overrides the event stream endpoint.
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

from pyfirealarm import DashboardConfig, FireAlarmDashboard, RenderReason, RenderUpdate  # noqa: E402
from pyfirealarm.exceptions import FireAlarmConfigError  # noqa: E402


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Print live sensor unit render updates from an SSE event stream.",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="Event stream URL (default: FIREALARM_EVENTS_URL or http://localhost:8000/events).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print each render update as one JSON line.",
    )
    parser.add_argument(
        "--no-ticks",
        action="store_true",
        help="Suppress per-second tick updates.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    return parser.parse_args()


def _print_update(update: RenderUpdate) -> None:
    header = update.header
    hub = header.hub_battery_text or "n/a"
    print(
        f"[{header.last_alive_text}] {update.reason.value} devices={header.device_count_text} hub={hub}",
    )
    for device_id in update.created:
        print(f"  + new unit {device_id}")
    for view in update.devices:
        flags = []
        if view.low_battery:
            flags.append("LOW BATTERY")
        if view.secondary_gas_detected:
            flags.append("MQ DET")
        flag_text = f" [{', '.join(flags)}]" if flags else ""
        print(
            f"  {view.id:<10} {view.name} / {view.zone}: {view.gas_label} {view.status_label} "
            f"ppm={view.gas_ppm} t={view.temperature}C h={view.humidity}% "
            f"batt={view.battery_voltage}V {view.last_update_text}{flag_text}",
        )


async def _watch(config: DashboardConfig, *, as_json: bool, show_ticks: bool) -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    def sink(update: RenderUpdate) -> None:
        if update.reason is RenderReason.TICK and not show_ticks:
            return
        if as_json:
            print(update.model_dump_json(), flush=True)
        else:
            _print_update(update)

    async with FireAlarmDashboard(config, on_render=sink):
        await stop.wait()


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    overrides: dict[str, object] = {"sse_enabled": True}
    if args.url:
        overrides["events_url"] = args.url
    try:
        config = DashboardConfig.from_env(**overrides)
    except FireAlarmConfigError as exc:
        print(f"[watch] Invalid configuration: {exc}", file=sys.stderr)
        return 2

    print(f"[watch] Listening on {config.events_url}")
    asyncio.run(_watch(config, as_json=args.json, show_ticks=not args.no_ticks))
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
