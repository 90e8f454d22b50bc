"""Path following: moves a vehicle along the track polyline."""

import math
from dataclasses import dataclass

from telesim.models.track import ResolvedPosition, Track


@dataclass(frozen=True)
class AdvanceResult:
    """Where a vehicle ended up after one tick of movement."""

    segment_index: int
    progress: float
    distance: float
    position: ResolvedPosition
    segments_entered: tuple[int, ...] = ()

    @property
    def crossed_start(self) -> bool:
        """True if the start/finish line (entry into segment 0) was passed."""
        return 0 in self.segments_entered


def advance_along_track(
    track: Track,
    segment_index: int,
    progress: float,
    speed: float,
    dt: float,
    movement_scale: float,
) -> AdvanceResult:
    """Advance a (segment, progress) position by speed x dt.

    Overshoot past the end of a segment is carried into the next one,
    rescaled by the ratio of the old segment length to the new one so the
    linear distance carried over stays the same. Degenerate (zero-length)
    segments are passed through without consuming distance.

    Args:
        track: Track to follow
        segment_index: Current segment
        progress: Fraction along the current segment
        speed: Vehicle speed
        dt: Elapsed time in seconds
        movement_scale: Divides speed x dt into track distance units

    Returns:
        New segment index, progress in [0, 1) and the segments entered
    """
    n = track.segment_count
    index = segment_index % n
    if not math.isfinite(progress):
        progress = 0.0
    progress = min(max(progress, 0.0), math.nextafter(1.0, 0.0))

    advance = speed * dt / movement_scale
    if not math.isfinite(advance) or advance < 0:
        advance = 0.0

    entered: list[int] = []

    # A vehicle parked on a degenerate segment moves on to the next real one
    if track.segment(index).degenerate:
        progress = 0.0
        while track.segment(index).degenerate:
            index = (index + 1) % n
            entered.append(index)

    segment = track.segment(index)
    progress += advance / segment.length

    while progress >= 1.0:
        overshoot = progress - 1.0
        old_length = segment.length
        index = (index + 1) % n
        entered.append(index)
        segment = track.segment(index)
        while segment.degenerate:
            index = (index + 1) % n
            entered.append(index)
            segment = track.segment(index)
        progress = overshoot * (old_length / segment.length)

    return AdvanceResult(
        segment_index=index,
        progress=progress,
        distance=advance,
        position=track.resolve(index, progress),
        segments_entered=tuple(entered),
    )
