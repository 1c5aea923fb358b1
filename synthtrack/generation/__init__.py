"""
Generation Module

Synthetic activity track generation and GPX/TCX encoding.
"""

from .elevation_synthesizer import elevation_gain_loss, ElevationSynthesizer
from .errors import (
    ExportNotAllowedError,
    InvalidConfigError,
    NoRouteError,
    TrackGenerationError,
)
from .models import (
    ActivityConfig,
    ActivityType,
    ElevatedPoint,
    ExportedFile,
    FileFormat,
    GeneratedTrack,
    HeartRateConfig,
    SimulatedSample,
    TimestampedSample,
    TimingModel,
    TrackPoint,
)
from .performance_simulator import PerformanceSimulator
from .timestamp_sequencer import TimestampSequencer
from .track_generator import ActivityTrackGenerator
from .track_serializer import export_filename, TrackSerializer
from .waypoint_interpolator import (
    haversine_distance,
    route_length_m,
    synthetic_loop,
    WaypointInterpolator,
)

__all__ = [
    "ActivityTrackGenerator",
    "ActivityConfig",
    "ActivityType",
    "HeartRateConfig",
    "TimingModel",
    "FileFormat",
    "TrackPoint",
    "ElevatedPoint",
    "SimulatedSample",
    "TimestampedSample",
    "GeneratedTrack",
    "ExportedFile",
    "WaypointInterpolator",
    "haversine_distance",
    "route_length_m",
    "synthetic_loop",
    "ElevationSynthesizer",
    "elevation_gain_loss",
    "PerformanceSimulator",
    "TimestampSequencer",
    "TrackSerializer",
    "export_filename",
    "TrackGenerationError",
    "InvalidConfigError",
    "NoRouteError",
    "ExportNotAllowedError",
]
