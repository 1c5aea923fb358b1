"""
Timestamp Sequencer

Allocates wall-clock timestamps to simulated samples so the track spans
roughly the requested activity time.
"""

import logging
import math
import random
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from .models import SimulatedSample, TimestampedSample, TimingModel

logger = logging.getLogger(__name__)


class TimestampSequencer:
    """Turns per-point samples into timestamped samples"""

    def __init__(
        self,
        start_time: datetime,
        target_time_sec: float,
        inconsistency_pct: float = 0.0,
        timing_model: TimingModel = TimingModel.INDEPENDENT,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the sequencer.

        Args:
            start_time: Aware datetime of the first sample
            target_time_sec: Requested activity duration
            inconsistency_pct: 0-100 jitter strength for independent timing
            timing_model: INDEPENDENT (even intervals with jitter) or
                PACE_DERIVED (intervals follow simulated pace)
            rng: Random source (seed it for replays)
        """
        self.start_time = start_time
        self.target_time_sec = target_time_sec
        self.inconsistency_pct = inconsistency_pct
        self.timing_model = timing_model
        self.rng = rng or random.Random()

    def intervals(self, samples: Sequence[SimulatedSample]) -> List[float]:
        """
        Seconds elapsed before each sample (the first is always 0).

        Non-finite or negative intervals are replaced by 0.
        """
        if not samples:
            return []

        if self.timing_model == TimingModel.PACE_DERIVED:
            raw = self._pace_derived_intervals(samples)
        else:
            raw = self._independent_intervals(len(samples))

        intervals = []
        for i, interval in enumerate(raw):
            if not math.isfinite(interval) or interval < 0:
                logger.warning(f"Invalid time interval {interval} at point {i}, using 0")
                interval = 0.0
            intervals.append(interval)

        return intervals

    def sequence(self, samples: Sequence[SimulatedSample]) -> List[TimestampedSample]:
        """
        Assign timestamps starting at start_time.

        Returns:
            List of TimestampedSample in the same order as samples
        """
        elapsed = 0.0
        result = []

        for sample, interval in zip(samples, self.intervals(samples)):
            elapsed += interval
            result.append(
                TimestampedSample(
                    lat=sample.lat,
                    lon=sample.lon,
                    distance_from_start_m=sample.distance_from_start_m,
                    elevation_m=sample.elevation_m,
                    pace_sec_per_km=sample.pace_sec_per_km,
                    speed_kmh=sample.speed_kmh,
                    heart_rate_bpm=sample.heart_rate_bpm,
                    gradient_pct=sample.gradient_pct,
                    fatigue_accum_sec=sample.fatigue_accum_sec,
                    timestamp=self.start_time + timedelta(seconds=elapsed),
                )
            )

        if result:
            drift = elapsed - self.target_time_sec
            logger.debug(
                f"Sequenced {len(result)} points over {elapsed:.0f}s "
                f"(target {self.target_time_sec:.0f}s, drift {drift:+.0f}s)"
            )

        return result

    def _independent_intervals(self, count: int) -> List[float]:
        avg_interval = self.target_time_sec / max(1, count - 1)
        jitter = self.inconsistency_pct / 100

        intervals = [0.0]
        for _ in range(1, count):
            interval = avg_interval
            if self.inconsistency_pct > 0:
                interval *= 1 + (self.rng.random() - 0.5) * 2 * jitter
            intervals.append(interval)

        return intervals

    def _pace_derived_intervals(self, samples: Sequence[SimulatedSample]) -> List[float]:
        # Time to cover each segment at the pace simulated for its end point
        raw = [0.0]
        for prev, sample in zip(samples, samples[1:]):
            segment_km = (sample.distance_from_start_m - prev.distance_from_start_m) / 1000
            raw.append(max(0.0, segment_km) * sample.pace_sec_per_km)

        total = sum(raw)
        if total <= 0 or not math.isfinite(total):
            return self._independent_intervals(len(samples))

        scale = self.target_time_sec / total
        return [interval * scale for interval in raw]
