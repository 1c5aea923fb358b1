"""
Activity Preview Tasks

Handles the pace chart series and derived form fields.
"""

from dataclasses import fields
import logging
from typing import Any, Dict

from ..generation import ActivityConfig, ActivityTrackGenerator
from ..planning import (
    build_pace_preview,
    derive_fields,
    format_duration,
    format_pace,
    format_speed,
    heart_rate_axis,
)
from ..planning.pace_preview import DEFAULT_PREVIEW_POINTS
from . import app

logger = logging.getLogger(__name__)


@app.task(name='preview_activity')
def preview_activity(
    activity: Dict[str, Any],
    num_points: int = DEFAULT_PREVIEW_POINTS
) -> Dict[str, Any]:
    """
    Simulate an activity and return the chart series.

    Uses the same generator as the file export, so a seeded config shows
    exactly the pace, elevation and heart rate that will be downloaded.

    Args:
        activity: Activity config dict with camelCase keys
        num_points: Number of distance steps in the chart

    Returns:
        Dict with chart rows, heart rate axis bounds and summary stats
    """
    try:
        config = ActivityConfig.from_dict(activity)
        track = ActivityTrackGenerator().generate(config)

        return {
            'success': True,
            'points': build_pace_preview(track, num_points),
            'heart_rate_axis': heart_rate_axis(config),
            'summary': track.summary(),
        }

    except Exception as e:
        logger.warning(f"Preview failed: {e}")
        return {'success': False, 'error': str(e), 'error_type': type(e).__name__}


@app.task(name='derive_activity_fields')
def derive_activity_fields(
    previous: Dict[str, Any],
    patch: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Apply a form edit and recompute the dependent field.

    Distance and pace edits recompute the target time; time edits
    recompute the pace.

    Args:
        previous: Current activity config dict (camelCase keys)
        patch: Changed keys (camelCase)

    Returns:
        Dict with the updated activity and display strings
    """
    try:
        prev_config = ActivityConfig.from_dict(previous)
        patched = ActivityConfig.from_dict({**previous, **patch})

        changes = {
            f.name: getattr(patched, f.name)
            for f in fields(ActivityConfig)
            if getattr(patched, f.name) != getattr(prev_config, f.name)
        }
        updated = derive_fields(prev_config, changes)

        return {
            'success': True,
            'activity': updated.to_dict(),
            'display': {
                'pace': format_pace(updated.avg_pace_sec_per_km),
                'speed': format_speed(updated.avg_pace_sec_per_km),
                'time': format_duration(updated.target_time_sec),
            },
        }

    except Exception as e:
        return {'success': False, 'error': str(e), 'error_type': type(e).__name__}
