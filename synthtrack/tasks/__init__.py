"""
SynthTrack Worker Tasks Package
"""

from ..celery_app import app

# Import all tasks to ensure they're registered with Celery
from .export_tasks import generate_activity_file, generate_gpx, generate_tcx
from .preview_tasks import derive_activity_fields, preview_activity

__all__ = [
    "app",
    "generate_activity_file",
    "generate_gpx",
    "generate_tcx",
    "preview_activity",
    "derive_activity_fields",
]
