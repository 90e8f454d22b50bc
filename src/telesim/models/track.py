"""Track model: closed polyline with segments, braking zones and sectors."""

import logging
import math
import warnings
from dataclasses import dataclass
from typing import Iterable, Sequence

from pydantic import BaseModel, ConfigDict, Field

from telesim.errors import DegenerateSegmentWarning, InvalidTrackError

logger = logging.getLogger(__name__)

MIN_TRACK_POINTS = 3


class TrackPoint(BaseModel):
    """A point of the track polyline in an abstract plane."""

    model_config = ConfigDict(frozen=True)

    x: float = Field(..., allow_inf_nan=False, description="Horizontal coordinate")
    y: float = Field(..., allow_inf_nan=False, description="Vertical coordinate")


class BrakingZone(BaseModel):
    """Where a driver starts braking on a segment, and for what corner."""

    model_config = ConfigDict(frozen=True)

    segment_index: int = Field(..., ge=0, description="Segment this zone belongs to")
    brake_start_fraction: float = Field(
        ...,
        gt=0.0,
        lt=1.0,
        description="Progress along the segment where braking begins",
    )
    brake_target: float = Field(
        default=80.0,
        ge=0.0,
        le=100.0,
        description="Brake pedal target in percent",
    )
    target_gear: int = Field(default=3, ge=1, description="Gear to reach for the corner")
    min_corner_speed: float = Field(
        default=120.0,
        ge=0.0,
        description="Corner speed in kph; brakes stop slowing the car below it",
    )
    severity: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Corner severity, 1 = tightest (also braking power)",
    )


@dataclass(frozen=True)
class TrackSegment:
    """One edge of the closed polyline."""

    index: int
    start: TrackPoint
    end: TrackPoint
    length: float
    heading: float
    degenerate: bool = False

    @property
    def effective_length(self) -> float:
        """Length safe to divide by (1.0 for degenerate segments)."""
        return 1.0 if self.degenerate else self.length


@dataclass(frozen=True)
class ResolvedPosition:
    """Cartesian position and heading for a point on the track."""

    x: float
    y: float
    heading: float


class Track:
    """Immutable closed track built from an ordered list of points.

    The last point closes the loop back onto the first one. If the caller
    did not repeat the first point, it is appended.
    """

    def __init__(
        self,
        points: Sequence[TrackPoint | tuple[float, float]],
        braking_zones: Iterable[BrakingZone] = (),
        scale: float = 1.0,
        sector_starts: Sequence[int] | None = None,
        name: str = "",
    ):
        """Build the track and precompute segment geometry.

        Args:
            points: Ordered polyline points (at least 3)
            braking_zones: At most one braking zone per segment
            scale: Multiplier applied to raw segment lengths
            sector_starts: Segment indices where timing sectors begin
            name: Display name

        Raises:
            InvalidTrackError: If the definition cannot form a usable loop
        """
        if not math.isfinite(scale) or scale <= 0:
            raise InvalidTrackError(f"Track scale must be positive, got {scale}")
        if len(points) < MIN_TRACK_POINTS:
            raise InvalidTrackError(
                f"Track needs at least {MIN_TRACK_POINTS} points, got {len(points)}"
            )

        closed = [self._coerce_point(p) for p in points]
        if closed[-1] != closed[0]:
            closed.append(closed[0])

        self.name = name
        self.scale = scale
        self._points: tuple[TrackPoint, ...] = tuple(closed)
        self._segments = tuple(self._build_segments())

        if all(segment.degenerate for segment in self._segments):
            raise InvalidTrackError("Every track segment has zero length")

        self._zones = self._index_zones(braking_zones)
        self._sector_starts = self._validate_sectors(sector_starts)
        self._total_length = sum(segment.length for segment in self._segments)

    @staticmethod
    def _coerce_point(point: TrackPoint | tuple[float, float]) -> TrackPoint:
        if isinstance(point, TrackPoint):
            return point
        x, y = point
        if not (math.isfinite(x) and math.isfinite(y)):
            raise InvalidTrackError(f"Track point has non-finite coordinates: {point}")
        return TrackPoint(x=x, y=y)

    def _build_segments(self) -> Iterable[TrackSegment]:
        for i, (start, end) in enumerate(zip(self._points, self._points[1:])):
            dx = end.x - start.x
            dy = end.y - start.y
            length = math.hypot(dx, dy) * self.scale
            degenerate = length == 0.0
            if degenerate:
                message = f"Track segment {i} has zero length; it will be passed through"
                logger.warning(message)
                warnings.warn(message, DegenerateSegmentWarning, stacklevel=3)
            yield TrackSegment(
                index=i,
                start=start,
                end=end,
                length=length,
                heading=math.atan2(dy, dx),
                degenerate=degenerate,
            )

    def _index_zones(self, zones: Iterable[BrakingZone]) -> dict[int, BrakingZone]:
        indexed: dict[int, BrakingZone] = {}
        for zone in zones:
            if zone.segment_index >= self.segment_count:
                raise InvalidTrackError(
                    f"Braking zone on segment {zone.segment_index}, "
                    f"track has {self.segment_count} segments"
                )
            if zone.segment_index in indexed:
                raise InvalidTrackError(
                    f"More than one braking zone on segment {zone.segment_index}"
                )
            indexed[zone.segment_index] = zone
        return indexed

    def _validate_sectors(self, sector_starts: Sequence[int] | None) -> tuple[int, ...]:
        if sector_starts is None:
            # Three near-equal groups of segments (fewer on tiny tracks)
            count = min(3, self.segment_count)
            return tuple(sorted({(self.segment_count * k) // count for k in range(count)}))

        starts = tuple(sector_starts)
        if not starts or starts[0] != 0:
            raise InvalidTrackError("Sector starts must begin with segment 0")
        if any(b <= a for a, b in zip(starts, starts[1:])):
            raise InvalidTrackError("Sector starts must be strictly increasing")
        if starts[-1] >= self.segment_count:
            raise InvalidTrackError(
                f"Sector start {starts[-1]} is outside the {self.segment_count} segments"
            )
        return starts

    @property
    def points(self) -> tuple[TrackPoint, ...]:
        """Closed polyline points (first point repeated last)."""
        return self._points

    @property
    def segments(self) -> tuple[TrackSegment, ...]:
        return self._segments

    @property
    def segment_count(self) -> int:
        """Number of traversal segments N."""
        return len(self._segments)

    @property
    def total_length(self) -> float:
        """Scaled length of the whole loop."""
        return self._total_length

    @property
    def braking_zones(self) -> tuple[BrakingZone, ...]:
        return tuple(self._zones[i] for i in sorted(self._zones))

    @property
    def sector_starts(self) -> tuple[int, ...]:
        return self._sector_starts

    @property
    def sector_count(self) -> int:
        return len(self._sector_starts)

    @property
    def degenerate_segments(self) -> tuple[int, ...]:
        return tuple(s.index for s in self._segments if s.degenerate)

    def segment(self, index: int) -> TrackSegment:
        """Get segment geometry by index."""
        if not 0 <= index < self.segment_count:
            raise IndexError(f"Segment index {index} out of range [0, {self.segment_count})")
        return self._segments[index]

    def braking_zone(self, index: int) -> BrakingZone | None:
        """Get the braking zone on a segment, if any."""
        return self._zones.get(index)

    def sector_of(self, index: int) -> int:
        """Get the 0-based sector that contains a segment."""
        sector = 0
        for i, start in enumerate(self._sector_starts):
            if index >= start:
                sector = i
        return sector

    def is_sector_start(self, index: int) -> bool:
        return index in self._sector_starts

    def resolve(self, segment_index: int, progress: float) -> ResolvedPosition:
        """Resolve (segment, progress) to Cartesian coordinates.

        Args:
            segment_index: Segment the position lies on
            progress: Fraction along the segment in [0, 1)

        Returns:
            Interpolated position and the segment heading
        """
        segment = self.segment(segment_index)
        x = segment.start.x + (segment.end.x - segment.start.x) * progress
        y = segment.start.y + (segment.end.y - segment.start.y) * progress
        return ResolvedPosition(x=x, y=y, heading=segment.heading)

    def __repr__(self) -> str:
        return (
            f"Track(name={self.name!r}, segments={self.segment_count}, "
            f"length={self._total_length:.1f}, zones={len(self._zones)})"
        )
