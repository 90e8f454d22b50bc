"""Lap and sector timing."""

from dataclasses import replace

from telesim.models.track import Track
from telesim.models.vehicle import LapRecord, LapState
from telesim.simulation.kinematics import AdvanceResult


class LapTracker:
    """Detects start/finish crossings and records lap and sector times."""

    def __init__(self, track: Track, min_lap_time: float = 10.0):
        """Initialize the lap tracker.

        Args:
            track: Track providing sector boundaries
            min_lap_time: Crossings before this lap time do not count as a lap
        """
        self.track = track
        self.min_lap_time = min_lap_time

    def update(
        self,
        laps: LapState,
        advance: AdvanceResult,
        dt: float,
        fuel: float,
    ) -> tuple[LapState, LapRecord | None]:
        """Accumulate time and close sectors/laps crossed during a tick.

        Args:
            laps: Lap state before the tick
            advance: Movement result for the tick
            dt: Elapsed time in seconds
            fuel: Fuel remaining after the tick

        Returns:
            New lap state and the lap completed this tick, if any
        """
        lap_time = laps.lap_time + dt
        sector_elapsed = laps.sector_elapsed + dt
        current_sector = laps.current_sector
        sector_times = laps.sector_times
        completed: LapRecord | None = None
        state = laps

        for segment_index in advance.segments_entered:
            if segment_index == 0:
                if lap_time < self.min_lap_time:
                    # Not a lap; splits keep running so they still sum to the lap time
                    continue
                completed = LapRecord(
                    lap_time=lap_time,
                    sectors=sector_times + (sector_elapsed,),
                )
                state = self._complete(state, completed, fuel)
                lap_time = 0.0
                sector_elapsed = 0.0
                sector_times = ()
                current_sector = 0
            elif self.track.is_sector_start(segment_index):
                sector = self.track.sector_of(segment_index)
                if sector != current_sector:
                    sector_times = sector_times + (sector_elapsed,)
                    sector_elapsed = 0.0
                    current_sector = sector

        return (
            replace(
                state,
                lap_time=lap_time,
                sector_elapsed=sector_elapsed,
                current_sector=current_sector,
                sector_times=sector_times,
            ),
            completed,
        )

    def _complete(self, laps: LapState, record: LapRecord, fuel: float) -> LapState:
        best = record.lap_time if laps.best_lap_time is None else min(laps.best_lap_time, record.lap_time)
        completed = laps.laps_completed + 1
        fuel_used = max(0.0, laps.fuel_at_lap_start - fuel)
        fuel_avg = (laps.fuel_avg_per_lap * laps.laps_completed + fuel_used) / completed
        return replace(
            laps,
            history=laps.history + (record,),
            best_lap_time=best,
            laps_completed=completed,
            fuel_at_lap_start=fuel,
            fuel_avg_per_lap=fuel_avg,
        )
