"""Tests for the track model."""

import math

import pytest

from telesim.config import DEFAULT_TRACK_POINTS, TrackConfig
from telesim.errors import DegenerateSegmentWarning, InvalidTrackError
from telesim.models import BrakingZone, Track, TrackPoint


class TestTrackConstruction:

    def test_default_circuit(self):
        """Default circuit has 12 segments split into three sectors."""
        track = TrackConfig().build()

        assert track.segment_count == len(DEFAULT_TRACK_POINTS) - 1 == 12
        assert track.sector_starts == (0, 4, 8)
        assert len(track.braking_zones) == 5
        assert track.total_length > 0

    def test_open_polyline_is_closed(self):
        """A polyline that does not return to its start gets closed."""
        track = Track([(0, 0), (1, 0), (1, 1), (0, 1)])

        assert track.segment_count == 4
        assert track.points[-1] == track.points[0]
        assert track.total_length == pytest.approx(4.0)

    def test_scale_multiplies_lengths(self):
        track = Track([(0, 0), (1, 0), (1, 1), (0, 1)], scale=2.5)

        assert track.segment(0).length == pytest.approx(2.5)
        assert track.total_length == pytest.approx(10.0)

    @pytest.mark.parametrize("points", [[], [(0, 0)], [(0, 0), (1, 1)]])
    def test_too_few_points(self, points):
        with pytest.raises(InvalidTrackError):
            Track(points)

    def test_non_finite_point(self):
        with pytest.raises(InvalidTrackError):
            Track([(0, 0), (1, math.nan), (1, 1)])

    def test_non_positive_scale(self):
        with pytest.raises(InvalidTrackError):
            Track([(0, 0), (1, 0), (1, 1)], scale=0)


class TestDegenerateSegments:

    def test_zero_length_segment_warns(self):
        """Repeated points produce a degenerate segment and a warning, not an error."""
        with pytest.warns(DegenerateSegmentWarning):
            track = Track([(0, 0), (1, 0), (1, 0), (1, 1), (0, 1)])

        assert track.degenerate_segments == (1,)
        assert track.segment(1).effective_length == 1.0

    def test_all_segments_degenerate(self):
        with pytest.warns(DegenerateSegmentWarning):
            with pytest.raises(InvalidTrackError):
                Track([(1, 1), (1, 1), (1, 1)])


class TestBrakingZones:

    def test_zone_lookup(self, unit_square):
        zone = BrakingZone(segment_index=2, brake_start_fraction=0.8)
        track = Track(unit_square.points, braking_zones=[zone])

        assert track.braking_zone(2) == zone
        assert track.braking_zone(0) is None

    def test_zone_out_of_range(self, unit_square):
        zone = BrakingZone(segment_index=4, brake_start_fraction=0.8)

        with pytest.raises(InvalidTrackError):
            Track(unit_square.points, braking_zones=[zone])

    def test_duplicate_zones(self, unit_square):
        zones = [
            BrakingZone(segment_index=1, brake_start_fraction=0.8),
            BrakingZone(segment_index=1, brake_start_fraction=0.5),
        ]

        with pytest.raises(InvalidTrackError):
            Track(unit_square.points, braking_zones=zones)


class TestSectors:

    def test_custom_sectors(self, unit_square):
        track = Track(unit_square.points, sector_starts=[0, 2])

        assert track.sector_count == 2
        assert track.sector_of(1) == 0
        assert track.sector_of(3) == 1
        assert track.is_sector_start(2)
        assert not track.is_sector_start(3)

    @pytest.mark.parametrize("starts", [[1, 2], [0, 2, 2], [0, 4]])
    def test_invalid_sectors(self, unit_square, starts):
        with pytest.raises(InvalidTrackError):
            Track(unit_square.points, sector_starts=starts)


class TestResolve:

    def test_midpoint(self, unit_square):
        position = unit_square.resolve(0, 0.5)

        assert position.x == pytest.approx(0.5)
        assert position.y == pytest.approx(0.0)
        assert position.heading == pytest.approx(0.0)

    def test_heading_follows_segment(self, unit_square):
        position = unit_square.resolve(1, 0.25)

        assert position.x == pytest.approx(1.0)
        assert position.y == pytest.approx(0.25)
        assert position.heading == pytest.approx(math.pi / 2)

    def test_segment_out_of_range(self, unit_square):
        with pytest.raises(IndexError):
            unit_square.segment(4)

    def test_track_points_accepted(self):
        points = [TrackPoint(x=0, y=0), TrackPoint(x=3, y=0), TrackPoint(x=0, y=4)]
        track = Track(points)

        assert track.total_length == pytest.approx(12.0)
