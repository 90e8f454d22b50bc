#!/usr/bin/env python3
"""Example: run the live telemetry engine and print the field.

Runs the scheduler in real time for a few seconds, printing the running
order whenever a flag is thrown and at the end, plus the cockpit view of
the lead detailed car.

Usage:
    python examples/live_telemetry.py [--config FILE] [--seconds N] [--cars N]

Examples:
    python examples/live_telemetry.py --seconds 10 --cars 12 --seed 7
    python examples/live_telemetry.py --config examples/le_mans.yaml
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from telesim import RaceEngine, TickScheduler, default_config, load_config
from telesim.logging_utils import setup_logging
from telesim.models import DriverModelKind
from telesim.output import ConsoleOutput


async def run(scheduler: TickScheduler, seconds: float) -> None:
    def on_snapshot(snapshot):
        if snapshot.events:
            ConsoleOutput.print_leaderboard(snapshot)

    unsubscribe = scheduler.subscribe(on_snapshot)
    await scheduler.start()
    await asyncio.sleep(seconds)
    await scheduler.stop()
    unsubscribe()


def main():
    parser = argparse.ArgumentParser(description="Live race telemetry simulation")
    parser.add_argument("--config", help="YAML engine configuration")
    parser.add_argument(
        "--seconds",
        type=float,
        default=5.0,
        help="Wall-clock seconds to run (default: 5)",
    )
    parser.add_argument("--cars", type=int, default=10, help="Cars on the default roster")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--fast",
        type=int,
        metavar="TICKS",
        help="Skip the clock and simulate this many ticks immediately",
    )
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    setup_logging(args.log_level)

    if args.config:
        config = load_config(args.config)
    else:
        config = default_config(vehicle_count=args.cars, seed=args.seed)

    engine = RaceEngine(config)
    scheduler = TickScheduler(engine)

    if args.fast:
        scheduler.run_ticks(args.fast)
    else:
        asyncio.run(run(scheduler, args.seconds))

    snapshot = scheduler.snapshot
    ConsoleOutput.print_leaderboard(snapshot)

    detailed = [
        v for v in snapshot.vehicles if v.identity.driver_model is DriverModelKind.DETAILED
    ]
    for vehicle in detailed[:1]:
        ConsoleOutput.print_cockpit(vehicle, snapshot.total_laps)
        ConsoleOutput.print_lap_history(vehicle)

    return 0


if __name__ == "__main__":
    sys.exit(main())
