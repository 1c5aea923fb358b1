"""
Tests for Timestamp Sequencer

Tests for elapsed-time allocation across simulated samples.
"""

import random
from datetime import datetime, timedelta, timezone

import pytest
from synthtrack.generation.models import SimulatedSample, TimingModel, format_timestamp
from synthtrack.generation.timestamp_sequencer import TimestampSequencer

START = datetime(2026, 1, 15, 8, 0, tzinfo=timezone.utc)


def _samples(paces, spacing_m=10.0):
    return [
        SimulatedSample(
            lat=51.5,
            lon=-0.1,
            distance_from_start_m=i * spacing_m,
            elevation_m=10.0,
            pace_sec_per_km=pace,
            speed_kmh=3600 / pace,
        )
        for i, pace in enumerate(paces)
    ]


class TestIndependentTiming:
    """Tests for even intervals with jitter"""

    def test_even_intervals_without_jitter(self):
        """Inconsistency 0 gives equal intervals summing to the target"""
        sequencer = TimestampSequencer(START, 1500, inconsistency_pct=0)

        sequenced = sequencer.sequence(_samples([300] * 501))

        assert sequenced[0].timestamp == START
        assert sequenced[-1].timestamp == START + timedelta(seconds=1500)
        assert sequenced[1].timestamp - sequenced[0].timestamp == timedelta(seconds=3)

    def test_first_interval_is_zero(self):
        """The first sample is at the start time"""
        sequencer = TimestampSequencer(START, 600, 30, rng=random.Random(1))

        assert sequencer.intervals(_samples([300] * 10))[0] == 0

    def test_jitter_is_bounded(self):
        """Each interval stays within +-inconsistency of the average"""
        sequencer = TimestampSequencer(START, 990, 20, rng=random.Random(3))

        intervals = sequencer.intervals(_samples([300] * 100))

        # 990 s over 99 intervals = 10 s average
        for interval in intervals[1:]:
            assert 8.0 <= interval <= 12.0

    def test_timestamps_are_monotonic(self):
        """Time never goes backwards"""
        sequencer = TimestampSequencer(START, 600, 100, rng=random.Random(8))

        sequenced = sequencer.sequence(_samples([300] * 60))

        for prev, sample in zip(sequenced, sequenced[1:]):
            assert sample.timestamp >= prev.timestamp

    def test_single_sample_at_start(self):
        """One sample sits at the start time"""
        sequencer = TimestampSequencer(START, 600, 10, rng=random.Random(1))

        sequenced = sequencer.sequence(_samples([300]))

        assert len(sequenced) == 1
        assert sequenced[0].timestamp == START

    def test_empty_samples(self):
        """No samples, no timestamps"""
        assert TimestampSequencer(START, 600).sequence([]) == []

    def test_negative_target_clamped_to_zero(self):
        """Negative intervals are replaced by 0"""
        sequencer = TimestampSequencer(START, -100, 0)

        intervals = sequencer.intervals(_samples([300] * 5))

        assert intervals == [0, 0, 0, 0, 0]


class TestPaceDerivedTiming:
    """Tests for intervals that follow simulated pace"""

    def test_intervals_follow_pace(self):
        """Slower segments take proportionally longer"""
        sequencer = TimestampSequencer(START, 90, timing_model=TimingModel.PACE_DERIVED)

        intervals = sequencer.intervals(_samples([300, 300, 600]))

        assert intervals == pytest.approx([0, 30, 60])

    def test_total_matches_target(self):
        """Intervals are scaled to the requested time"""
        sequencer = TimestampSequencer(START, 1200, timing_model=TimingModel.PACE_DERIVED)

        sequenced = sequencer.sequence(_samples([280 + (i % 5) * 10 for i in range(200)]))

        elapsed = (sequenced[-1].timestamp - START).total_seconds()
        assert elapsed == pytest.approx(1200, abs=0.01)

    def test_zero_distance_falls_back_to_independent(self):
        """A track that never moves still spans the target time"""
        sequencer = TimestampSequencer(START, 100, timing_model=TimingModel.PACE_DERIVED)

        intervals = sequencer.intervals(_samples([300] * 5, spacing_m=0))

        assert intervals == pytest.approx([0, 25, 25, 25, 25])


class TestTimestampFormat:
    """Tests for ISO-8601 output"""

    def test_utc_millisecond_format(self):
        """Timestamps end with Z and carry milliseconds"""
        sequencer = TimestampSequencer(START, 10, 0)

        sequenced = sequencer.sequence(_samples([300] * 3))

        assert sequenced[0].timestamp_iso == "2026-01-15T08:00:00.000Z"
        assert sequenced[1].timestamp_iso == "2026-01-15T08:00:05.000Z"

    def test_format_converts_to_utc(self):
        """Offsets are normalized to UTC"""
        plus_two = timezone(timedelta(hours=2))

        assert format_timestamp(datetime(2026, 1, 15, 10, 0, tzinfo=plus_two)) == (
            "2026-01-15T08:00:00.000Z"
        )
