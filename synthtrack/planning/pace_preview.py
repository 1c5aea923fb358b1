"""
Pace Preview

Builds the pace/elevation/heart rate series shown in the activity chart.

The series is sampled from the same simulated samples that get exported,
so the preview matches the downloaded file.
"""

import bisect
import math
from typing import Any, Dict, List, Optional

from ..generation.models import ActivityConfig, ActivityType, GeneratedTrack
from .activity_state import format_pace, format_speed

DEFAULT_PREVIEW_POINTS = 20


def build_pace_preview(
    track: GeneratedTrack, num_points: int = DEFAULT_PREVIEW_POINTS
) -> List[Dict[str, Any]]:
    """
    Sample a generated track at evenly spaced distances for charting.

    Args:
        track: Generated track
        num_points: Number of distance steps (num_points + 1 rows)

    Returns:
        List of dicts with name, distance, pace, speed, displayPace,
        elevation and heartRate
    """
    if not track.samples or num_points <= 0:
        return []

    is_ride = track.config.activity_type == ActivityType.RIDE
    distances = [s.distance_from_start_m for s in track.samples]
    track_length_m = distances[-1]
    step_km = track.distance_km / num_points

    rows = []
    for i in range(num_points + 1):
        current_km = i * step_km
        target_m = track_length_m * i / num_points
        sample = track.samples[_nearest_index(distances, target_m)]

        pace = sample.pace_sec_per_km
        rows.append(
            {
                "name": f"{current_km:.1f}",
                "distance": round(current_km, 3),
                "pace": round(pace),
                "speed": float(format_speed(pace)),
                "displayPace": format_speed(pace) if is_ride else format_pace(pace),
                "elevation": round(sample.elevation_m),
                "heartRate": sample.heart_rate_bpm,
            }
        )

    return rows


def heart_rate_axis(config: ActivityConfig) -> Optional[Dict[str, int]]:
    """
    Chart axis bounds for heart rate, padded around the variability band.

    Returns:
        Dict with min and max bpm, or None when heart rate is disabled
    """
    if not config.heart_rate.enabled:
        return None

    avg = config.heart_rate.avg_bpm
    variability = config.heart_rate.variability_pct or 0
    return {
        "min": max(60, math.floor(avg * (1 - variability / 100)) - 5),
        "max": min(220, math.ceil(avg * (1 + variability / 100)) + 5),
    }


def _nearest_index(distances: List[float], target: float) -> int:
    """Index of the distance closest to target (distances ascending)"""
    idx = bisect.bisect_left(distances, target)
    if idx <= 0:
        return 0
    if idx >= len(distances):
        return len(distances) - 1
    if target - distances[idx - 1] <= distances[idx] - target:
        return idx - 1
    return idx
