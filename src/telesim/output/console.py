"""Console output formatting."""

import math

from telesim.models.vehicle import Corner, Vehicle
from telesim.simulation.race import RaceSnapshot


def format_lap_time(seconds: float | None) -> str:
    """Format seconds as m:ss.mmm ("--:--.---" when unknown)."""
    if seconds is None or not math.isfinite(seconds):
        return "--:--.---"
    minutes = int(seconds // 60)
    return f"{minutes}:{seconds - minutes * 60:06.3f}"


class ConsoleOutput:
    """Formats race snapshots for console display."""

    @staticmethod
    def print_leaderboard(snapshot: RaceSnapshot) -> None:
        """Print the running order.

        Args:
            snapshot: Snapshot to display
        """
        env = snapshot.environment
        flag = env.flags.active
        print("\n" + "=" * 72)
        print(
            f"TICK {snapshot.tick:<6} {snapshot.elapsed:8.1f}s   "
            f"AIR {env.air_temp:4.1f}C  TRACK {env.track_temp:4.1f}C  "
            f"CLOUD {env.cloud_cover:4.0%}  RAIN {env.rain_intensity:4.0%}"
            + (f"  [{flag.value.upper()} FLAG]" if flag else "")
        )
        print("=" * 72)
        print(f"{'Pos':<4} {'#':<4} {'Class':<6} {'Lic':<13} {'Speed':>7} {'Gear':>5} {'Laps':>5} {'Best':>10}")
        print("-" * 72)

        for vehicle in snapshot.vehicles:
            brk = " BRK" if vehicle.driver.is_braking else ""
            print(
                f"{vehicle.position:<4} "
                f"{vehicle.identity.number:<4} "
                f"{vehicle.identity.vehicle_class.value:<6} "
                f"{vehicle.identity.license:<13} "
                f"{vehicle.speed:7.1f} "
                f"{vehicle.driver.gear:>5} "
                f"{vehicle.laps.laps_completed:>5} "
                f"{format_lap_time(vehicle.laps.best_lap_time):>10}"
                f"{brk}"
            )

        print("=" * 72)

    @staticmethod
    def print_cockpit(vehicle: Vehicle, total_laps: int) -> None:
        """Print cockpit-style telemetry for one vehicle."""
        d = vehicle.driver
        laps = vehicle.laps
        print(f"\n--- #{vehicle.identity.number} {vehicle.identity.vehicle_class.value} ---")
        print(
            f"RPM {d.rpm:6.0f}  GEAR {d.gear}  SPEED {vehicle.speed:5.1f} kph  "
            f"THR {d.throttle:5.1f}%  BRK {d.brake:5.1f}%  [{d.phase.value}]"
        )
        print(
            f"LAP {laps.laps_completed}/{total_laps}  TIME {format_lap_time(laps.lap_time)}  "
            f"BEST {format_lap_time(laps.best_lap_time)}  "
            f"FUEL {vehicle.fuel:5.2f} L ({laps.fuel_avg_per_lap:.2f} L/lap)"
        )
        s = vehicle.setup
        print(f"BB {s.brake_bias:.1f}  TC {s.tc1}/{s.tc_cut}  ABS {s.abs}  MAP {s.engine_map}")
        for corner in Corner:
            tire = vehicle.tire(corner)
            print(
                f"  {corner.value}: {tire.temperature:5.1f}C  "
                f"{tire.pressure:5.2f} psi  {(1 - tire.wear):6.1%} left"
            )

    @staticmethod
    def print_lap_history(vehicle: Vehicle) -> None:
        """Print every completed lap with its sectors, marking the best."""
        laps = vehicle.laps
        print(f"\nLap history for #{vehicle.identity.number}")
        if not laps.history:
            print("  no completed laps")
            return

        for i, lap in enumerate(laps.history, 1):
            sectors = "  ".join(f"S{j} {t:6.2f}" for j, t in enumerate(lap.sectors, 1))
            best = " *" if lap.lap_time == laps.best_lap_time else ""
            print(f"  {i:>3}  {format_lap_time(lap.lap_time)}  {sectors}{best}")
