"""
Elevation Synthesizer

Assigns an elevation to every interpolated track point:
- Resamples real elevation samples (from an elevation lookup service)
  onto the dense track with nearest-index mapping
- Optional Savitzky-Golay smoothing of the resampled profile
- Procedural hills when no real samples exist
- Elevation gain/loss recomputed from the final profile
"""

import logging
import math
import random
from typing import List, Optional, Sequence, Tuple

from scipy import signal

from .models import ElevatedPoint, TrackPoint

logger = logging.getLogger(__name__)


def elevation_gain_loss(elevations: Sequence[float]) -> Tuple[float, float]:
    """
    Sum positive and negative consecutive elevation deltas.

    Returns:
        Tuple of (gain, loss) in meters, both non-negative
    """
    gain = 0.0
    loss = 0.0

    for i in range(1, len(elevations)):
        diff = elevations[i] - elevations[i - 1]
        if not math.isfinite(diff):
            continue
        if diff > 0:
            gain += diff
        else:
            loss += abs(diff)

    return gain, loss


class ElevationSynthesizer:
    """Builds an elevation profile for a densified track"""

    BASE_ELEVATION_M = 10.0

    # Uniform noise half-widths
    HILLY_NOISE_M = 2.5
    FLAT_NOISE_M = 1.0

    SMOOTHING_POLYORDER = 2

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Args:
            rng: Random source for procedural noise (seed it for replays)
        """
        self.rng = rng or random.Random()

    def synthesize(
        self,
        points: Sequence[TrackPoint],
        elevation_samples: Optional[Sequence[float]] = None,
        elevation_gain_m: float = 0.0,
        smoothing_window: int = 0,
    ) -> List[ElevatedPoint]:
        """
        Attach an elevation to each track point.

        Args:
            points: Densified track points
            elevation_samples: Real elevations along the route (same or
                coarser granularity), or None/empty for a procedural profile
            elevation_gain_m: Requested total climb for procedural profiles
            smoothing_window: Savitzky-Golay window for real samples (< 3 = off)

        Returns:
            List of ElevatedPoint in the same order as points
        """
        if not points:
            return []

        if elevation_samples:
            elevations = self.resample(elevation_samples, len(points))
            if smoothing_window >= 3:
                elevations = self.smooth(elevations, smoothing_window)
        else:
            elevations = self.procedural_profile(len(points), elevation_gain_m)

        return [
            ElevatedPoint(
                lat=point.lat,
                lon=point.lon,
                distance_from_start_m=point.distance_from_start_m,
                elevation_m=elevation,
            )
            for point, elevation in zip(points, elevations)
        ]

    def resample(self, samples: Sequence[float], total: int) -> List[float]:
        """
        Map real elevation samples onto total points by nearest index.

        Non-finite samples fall back to the previous elevation.
        """
        elevations = []
        previous = self.BASE_ELEVATION_M
        last_index = len(samples) - 1

        for i in range(total):
            index = math.floor(i / total * last_index)
            value = samples[index]
            try:
                value = float(value)
            except (TypeError, ValueError):
                value = math.nan

            if not math.isfinite(value):
                logger.warning(
                    f"Non-finite elevation sample at index {index}, "
                    f"using previous elevation {previous:.1f} m"
                )
                value = previous

            elevations.append(value)
            previous = value

        return elevations

    def procedural_profile(self, total: int, elevation_gain_m: float) -> List[float]:
        """
        Generate a synthetic elevation profile.

        With a requested gain: a half-sine overall climb reaching the gain
        towards the end plus a faster sine hill pattern of gain/4 amplitude.
        Without: a flat profile with small noise.
        """
        elevations = []

        for i in range(total):
            if elevation_gain_m > 0:
                progress = i / total
                hill_pattern = math.sin(progress * math.pi * 4) * (elevation_gain_m / 4)
                overall_climb = (math.sin(progress * math.pi - math.pi / 2) + 1) * (
                    elevation_gain_m / 2
                )
                noise = self._uniform_noise(self.HILLY_NOISE_M)
                elevations.append(
                    self.BASE_ELEVATION_M + overall_climb + hill_pattern + noise
                )
            else:
                elevations.append(
                    self.BASE_ELEVATION_M + self._uniform_noise(self.FLAT_NOISE_M)
                )

        return elevations

    def smooth(self, elevations: List[float], window_size: int) -> List[float]:
        """
        Apply Savitzky-Golay filter to remove stair steps left by resampling.

        Returns the input unchanged when there are fewer points than the window.
        """
        if window_size % 2 == 0:
            window_size += 1

        if len(elevations) < window_size:
            return elevations

        smoothed = signal.savgol_filter(
            elevations, window_length=window_size, polyorder=self.SMOOTHING_POLYORDER
        )

        return smoothed.tolist()

    def _uniform_noise(self, half_width: float) -> float:
        return (self.rng.random() - 0.5) * 2 * half_width
