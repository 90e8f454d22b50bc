"""Tests for movement along the track polyline."""

import numpy as np
import pytest

from telesim.simulation import advance_along_track


class TestAdvanceAlongTrack:

    def test_within_segment(self, unit_square):
        """Speed 100, dt 0.5 and scale 100 moves half of a unit segment."""
        result = advance_along_track(unit_square, 0, 0.0, 100, 0.5, 100)

        assert result.segment_index == 0
        assert result.progress == pytest.approx(0.5)
        assert result.segments_entered == ()
        assert result.position.x == pytest.approx(0.5)

    def test_overshoot_carries_distance(self, rectangle):
        """Overshoot is rescaled by the ratio of segment lengths."""
        # Segment 0 has length 2, segment 1 length 1
        result = advance_along_track(rectangle, 0, 0.5, 260, 1.0, 100)

        # 0.5 + 2.6 / 2 = 1.8, overshoot 0.8 x (2 / 1)
        assert result.segment_index == 1
        assert result.progress == pytest.approx(0.6)
        assert result.segments_entered == (1,)

    def test_multiple_segments_in_one_tick(self, unit_square):
        result = advance_along_track(unit_square, 0, 0.0, 250, 1.0, 100)

        assert result.segment_index == 2
        assert result.progress == pytest.approx(0.5)
        assert result.segments_entered == (1, 2)

    def test_wrap_crosses_start(self, unit_square):
        result = advance_along_track(unit_square, 3, 0.9, 20, 1.0, 100)

        assert result.segment_index == 0
        assert result.progress == pytest.approx(0.1)
        assert result.crossed_start

    def test_stationary(self, unit_square):
        result = advance_along_track(unit_square, 2, 0.3, 0.0, 0.1, 60)

        assert result.segment_index == 2
        assert result.progress == pytest.approx(0.3)
        assert not result.crossed_start

    @pytest.mark.parametrize("speed", [-50.0, float("nan"), float("inf")])
    def test_invalid_speed_does_not_move(self, unit_square, speed):
        result = advance_along_track(unit_square, 1, 0.4, speed, 0.1, 60)

        assert result.segment_index == 1
        assert result.progress == pytest.approx(0.4)

    def test_degenerate_segment_skipped(self, track_with_gap):
        """Zero-length segments are passed through without consuming distance."""
        result = advance_along_track(track_with_gap, 0, 0.9, 30, 1.0, 100)

        assert result.segment_index == 2
        assert result.progress == pytest.approx(0.2)
        assert result.segments_entered == (1, 2)

    def test_parked_on_degenerate_segment(self, track_with_gap):
        result = advance_along_track(track_with_gap, 1, 0.0, 0.0, 0.1, 60)

        assert result.segment_index == 2
        assert result.progress == 0.0

    def test_progress_stays_in_range(self, rectangle, rng):
        segment, progress = 0, 0.0
        for _ in range(2000):
            speed = float(rng.uniform(0, 340))
            dt = float(rng.uniform(0.01, 0.5))
            result = advance_along_track(rectangle, segment, progress, speed, dt, 60)
            segment, progress = result.segment_index, result.progress

            assert 0 <= segment < rectangle.segment_count
            assert 0.0 <= progress < 1.0
            assert np.isfinite([result.position.x, result.position.y]).all()
