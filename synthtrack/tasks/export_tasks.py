"""
Activity Export Tasks

Celery tasks that generate synthetic activities and render them as
GPX or TCX files for download.
"""

import logging
from typing import Any, Dict

from ..generation import (
    ActivityConfig,
    ActivityTrackGenerator,
    ExportNotAllowedError,
    FileFormat,
)
from . import app

logger = logging.getLogger(__name__)


def _error_result(e: Exception) -> Dict[str, Any]:
    return {
        "success": False,
        "error": str(e),
        "error_type": type(e).__name__,
    }


@app.task(name="generate_activity_file", bind=True)
def generate_activity_file(
    self,
    activity: Dict[str, Any],
    file_format: str = "gpx",
    may_export: bool = True,
) -> Dict[str, Any]:
    """
    Generate a synthetic activity and render it as a GPX or TCX file.

    Args:
        activity: Activity config dict with camelCase keys (name, date,
            startTime, distanceKm, avgPaceSecPerKm, inconsistencyPct,
            activityType, elevationGainM, elevationProfile, heartRate, route)
        file_format: "gpx" or "tcx"
        may_export: Result of the caller's export gate (token balance)

    Returns:
        Dict containing:
            - filename: Suggested download name
            - content: File content as UTF-8 XML text
            - media_type: MIME type for the download
            - summary: Point count, distance, duration and elevation stats
    """
    logger.info(
        f"[Task {self.request.id}] Starting generate_activity_file "
        f"format={file_format}"
    )

    try:
        fmt = FileFormat(file_format.lower())
        config = ActivityConfig.from_dict(activity)

        if not may_export:
            raise ExportNotAllowedError("Export not allowed, token balance exhausted")

        generator = ActivityTrackGenerator()

        track = generator.generate(config)
        exported = generator.serializer.render(track, fmt)

        logger.info(
            f"[Task {self.request.id}] Rendered {exported.filename}: "
            f"{len(track.samples)} points, {len(exported.content)} chars"
        )

        return {
            "success": True,
            **exported.to_dict(),
            "summary": track.summary(),
        }

    except Exception as e:
        logger.error(
            f"[Task {self.request.id}] Error generating activity file: {e}",
            exc_info=True,
        )
        return _error_result(e)


@app.task(name="generate_gpx")
def generate_gpx(activity: Dict[str, Any], may_export: bool = True) -> Dict[str, Any]:
    """Generate an activity and render it as GPX"""
    return generate_activity_file(activity, "gpx", may_export)


@app.task(name="generate_tcx")
def generate_tcx(activity: Dict[str, Any], may_export: bool = True) -> Dict[str, Any]:
    """Generate an activity and render it as TCX"""
    return generate_activity_file(activity, "tcx", may_export)
