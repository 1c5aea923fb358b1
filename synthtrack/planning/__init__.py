"""
Planning Module

Activity form state handling and the pace preview series.
"""

from .activity_state import derive_fields, format_duration, format_pace, format_speed
from .pace_preview import build_pace_preview, heart_rate_axis

__all__ = [
    "derive_fields",
    "format_pace",
    "format_speed",
    "format_duration",
    "build_pace_preview",
    "heart_rate_axis",
]
