"""
Performance Simulator

Computes per-point pace (and speed) plus optional heart rate from:
- Immediate gradient effect (climbing costs more than descending saves)
- Cumulative fatigue that builds on climbs and recovers elsewhere
- Bounded random jitter scaled by the inconsistency setting

The same simulation feeds the exported track and the pace preview, so
what the user previews is what gets downloaded.
"""

import logging
import math
import random
from typing import List, Optional, Sequence

from .models import ActivityType, ElevatedPoint, HeartRateConfig, SimulatedSample

logger = logging.getLogger(__name__)


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


class PerformanceSimulator:
    """Simulates pace and heart rate along an elevated track"""

    # Pace bounds (2:30 - 15:00 min/km)
    MIN_PACE_SEC_PER_KM = 150.0
    MAX_PACE_SEC_PER_KM = 900.0

    # Gradient effect on pace, sec/km per percent grade
    UPHILL_PACE_PER_PCT = 10.0
    DOWNHILL_PACE_PER_PCT = 5.0

    # Pace fatigue accumulator
    FATIGUE_GRADIENT_THRESHOLD_PCT = 1.0
    FATIGUE_GAIN_PER_PCT = 0.5
    FATIGUE_RECOVERY_SEC = 2.0
    MAX_FATIGUE_SEC = 120.0

    # Inconsistency at which the terrain model runs at full strength
    FULL_PHYSICS_INCONSISTENCY_PCT = 50.0

    # Jitter amplitude as a share of the average pace at 100% inconsistency
    PACE_JITTER_SHARE = 0.5

    # Heart rate model
    UPHILL_HR_PER_PCT = 2.0
    DOWNHILL_HR_PER_PCT = 1.0
    HR_FATIGUE_GAIN_PER_PCT = 0.1
    HR_FATIGUE_RECOVERY = 0.5
    MAX_HR_FATIGUE = 15.0
    DEFAULT_HR_VARIABILITY_PCT = 10.0
    MAX_HR_VARIABILITY_PCT = 40.0
    MIN_HR_BPM = 60
    MAX_HR_BPM = 200

    def __init__(
        self,
        avg_pace_sec_per_km: float,
        inconsistency_pct: float = 0.0,
        heart_rate: Optional[HeartRateConfig] = None,
        activity_type: ActivityType = ActivityType.RUN,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the simulator.

        Args:
            avg_pace_sec_per_km: Target average pace (rides use it as 3600/speed)
            inconsistency_pct: 0-100 dial scaling terrain, fatigue and jitter
            heart_rate: Heart rate settings, None or disabled for no heart rate
            activity_type: Sport; rides report speed instead of pace
            rng: Random source (seed it for replays)
        """
        self.avg_pace = avg_pace_sec_per_km
        self.inconsistency_pct = inconsistency_pct
        self.heart_rate = heart_rate or HeartRateConfig(enabled=False)
        self.activity_type = activity_type
        self.rng = rng or random.Random()

    @property
    def physics_factor(self) -> float:
        """Terrain/fatigue strength: 0 = even pacing, 1 = normal, 2 = exaggerated"""
        return self.inconsistency_pct / self.FULL_PHYSICS_INCONSISTENCY_PCT

    @property
    def hr_variability_pct(self) -> float:
        variability = self.heart_rate.variability_pct
        if variability is None or not math.isfinite(variability):
            variability = self.DEFAULT_HR_VARIABILITY_PCT
        return _clamp(variability, 0.0, self.MAX_HR_VARIABILITY_PCT)

    def hr_band(self) -> tuple:
        """
        Allowed heart rate range from the average and variability.

        Returns:
            Tuple of (min_bpm, max_bpm), never inverted
        """
        avg = self.heart_rate.avg_bpm
        variability = self.hr_variability_pct / 100
        low = round(avg * (1 - variability))
        high = round(avg * (1 + variability))
        if low > high:
            low, high = high, low
        return low, high

    def simulate(self, points: Sequence[ElevatedPoint]) -> List[SimulatedSample]:
        """
        Run the simulation over every point.

        Args:
            points: Track points with elevation, in route order

        Returns:
            List of SimulatedSample, one per point
        """
        samples = []
        pace_fatigue = 0.0
        hr_fatigue = 0.0
        prev = None

        for point in points:
            gradient = self._gradient(prev, point)

            # Pace fatigue builds on real climbs and recovers everywhere else
            if gradient > self.FATIGUE_GRADIENT_THRESHOLD_PCT:
                pace_fatigue += gradient * self.FATIGUE_GAIN_PER_PCT
            else:
                pace_fatigue -= self.FATIGUE_RECOVERY_SEC
            pace_fatigue = _clamp(pace_fatigue, 0.0, self.MAX_FATIGUE_SEC)

            pace = self._pace(gradient, pace_fatigue)

            heart_rate = None
            if self.heart_rate.enabled:
                if gradient > self.FATIGUE_GRADIENT_THRESHOLD_PCT:
                    hr_fatigue += gradient * self.HR_FATIGUE_GAIN_PER_PCT
                else:
                    hr_fatigue -= self.HR_FATIGUE_RECOVERY
                hr_fatigue = _clamp(hr_fatigue, 0.0, self.MAX_HR_FATIGUE)
                heart_rate = self._heart_rate(gradient, hr_fatigue)

            samples.append(
                SimulatedSample(
                    lat=point.lat,
                    lon=point.lon,
                    distance_from_start_m=point.distance_from_start_m,
                    elevation_m=point.elevation_m,
                    pace_sec_per_km=pace,
                    speed_kmh=3600 / pace,
                    heart_rate_bpm=heart_rate,
                    gradient_pct=gradient,
                    fatigue_accum_sec=pace_fatigue,
                )
            )
            prev = point

        return samples

    @staticmethod
    def _gradient(prev: Optional[ElevatedPoint], point: ElevatedPoint) -> float:
        """Signed slope in percent between consecutive points"""
        if prev is None:
            return 0.0

        segment_length = point.distance_from_start_m - prev.distance_from_start_m
        rise = point.elevation_m - prev.elevation_m
        if segment_length <= 0 or not math.isfinite(segment_length):
            return 0.0

        gradient = rise / segment_length * 100
        if not math.isfinite(gradient):
            logger.warning(
                f"Non-finite gradient at {point.distance_from_start_m:.0f} m, using 0"
            )
            return 0.0

        return gradient

    def _pace(self, gradient: float, fatigue: float) -> float:
        if gradient > 0:
            grade_effect = gradient * self.UPHILL_PACE_PER_PCT
        else:
            grade_effect = gradient * self.DOWNHILL_PACE_PER_PCT

        pace = self.avg_pace + (grade_effect + fatigue) * self.physics_factor

        if self.inconsistency_pct > 0:
            amplitude = (self.inconsistency_pct / 100) * self.avg_pace * self.PACE_JITTER_SHARE
            pace += (self.rng.random() - 0.5) * 2 * amplitude

        if not math.isfinite(pace):
            logger.warning("Non-finite pace, falling back to average pace")
            pace = self.avg_pace

        return _clamp(pace, self.MIN_PACE_SEC_PER_KM, self.MAX_PACE_SEC_PER_KM)

    def _heart_rate(self, gradient: float, fatigue: float) -> int:
        avg = self.heart_rate.avg_bpm
        variability = self.hr_variability_pct

        if gradient > 0:
            grade_effect = gradient * self.UPHILL_HR_PER_PCT
        else:
            grade_effect = gradient * self.DOWNHILL_HR_PER_PCT

        noise = (self.rng.random() - 0.5) * (avg * variability / 100) * 0.5
        bpm = avg + (grade_effect + fatigue) * self.physics_factor + noise

        if not math.isfinite(bpm):
            logger.warning("Non-finite heart rate, falling back to average")
            bpm = avg

        low, high = self.hr_band()
        bpm = _clamp(round(bpm), low, high)
        return int(_clamp(bpm, self.MIN_HR_BPM, self.MAX_HR_BPM))
