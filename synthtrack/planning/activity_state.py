"""
Activity State

Pure helpers for the activity form:
- Derived field recomputation when distance, pace or time changes
- Display formatting for pace, speed and duration
"""

from dataclasses import fields, replace
from typing import Any, Dict

from ..generation.models import ActivityConfig

_CONFIG_FIELDS = {f.name for f in fields(ActivityConfig)}


def derive_fields(prev: ActivityConfig, patch: Dict[str, Any]) -> ActivityConfig:
    """
    Apply a patch to a config and recompute the dependent field.

    Precedence when several fields change at once:
    1. Distance changed -> time = distance * pace
    2. Pace changed -> time = distance * pace
    3. Time changed -> pace = time / distance (only when distance > 0)

    Args:
        prev: Current config (left untouched)
        patch: Field name -> new value, using ActivityConfig field names

    Returns:
        New ActivityConfig

    Raises:
        ValueError: If the patch names an unknown field
    """
    unknown = set(patch) - _CONFIG_FIELDS
    if unknown:
        raise ValueError(f"Unknown activity fields: {', '.join(sorted(unknown))}")

    updated = replace(prev, **patch)

    distance_changed = updated.distance_km != prev.distance_km
    pace_changed = updated.avg_pace_sec_per_km != prev.avg_pace_sec_per_km
    time_changed = updated.target_time_sec != prev.target_time_sec

    if distance_changed or pace_changed:
        return replace(
            updated, target_time_sec=updated.distance_km * updated.avg_pace_sec_per_km
        )

    if time_changed and updated.distance_km > 0:
        return replace(
            updated, avg_pace_sec_per_km=updated.target_time_sec / updated.distance_km
        )

    return updated


def format_pace(pace_sec_per_km: float) -> str:
    """Format pace as M:SS (e.g. 300 -> 5:00)"""
    total = int(round(pace_sec_per_km))
    return f"{total // 60}:{total % 60:02d}"


def format_speed(pace_sec_per_km: float) -> str:
    """Convert pace to speed in km/h with one decimal"""
    if pace_sec_per_km <= 0:
        return "0.0"
    return f"{3600 / pace_sec_per_km:.1f}"


def format_duration(seconds: float) -> str:
    """Format seconds as HH:MM:SS"""
    total = int(round(seconds))
    hours = total // 3600
    mins = (total % 3600) // 60
    secs = total % 60
    return f"{hours:02d}:{mins:02d}:{secs:02d}"
