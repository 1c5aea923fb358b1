"""
Activity Track Generator

Runs the full generation pipeline for one activity:

    waypoints -> WaypointInterpolator -> ElevationSynthesizer
              -> PerformanceSimulator -> TimestampSequencer -> TrackSerializer

Every call builds fresh pipeline stages around one injected random source,
so calls are independent and a seeded source replays the same track.
"""

import logging
import math
import random
from dataclasses import replace
from typing import Optional

from .elevation_synthesizer import ElevationSynthesizer, elevation_gain_loss
from .errors import ExportNotAllowedError, InvalidConfigError, NoRouteError
from .models import ActivityConfig, ExportedFile, FileFormat, GeneratedTrack
from .performance_simulator import PerformanceSimulator
from .timestamp_sequencer import TimestampSequencer
from .track_serializer import TrackSerializer
from .waypoint_interpolator import (
    route_length_m,
    synthetic_loop,
    WaypointInterpolator,
)

logger = logging.getLogger(__name__)


class ActivityTrackGenerator:
    """Generates synthetic activity tracks and renders them for export"""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        interpolator: Optional[WaypointInterpolator] = None,
        serializer: Optional[TrackSerializer] = None,
    ):
        """
        Initialize generator.

        Args:
            rng: Random source shared by all stages of one generation. When
                omitted, each generate() call seeds from the config's seed
                (or the OS when the config has none).
            interpolator: Custom interpolator (e.g. different point spacing)
            serializer: Custom serializer
        """
        self.rng = rng
        self.interpolator = interpolator or WaypointInterpolator()
        self.serializer = serializer or TrackSerializer()

    def generate(self, config: ActivityConfig) -> GeneratedTrack:
        """
        Generate a timestamped track for the activity.

        Args:
            config: Activity parameters

        Returns:
            GeneratedTrack with one sample per interpolated point

        Raises:
            NoRouteError: Fewer than 2 route points and no distance
            InvalidConfigError: Config values cannot produce a track
        """
        self.validate(config)
        rng = self.rng or random.Random(config.seed)

        if len(config.route) >= 2:
            route = config.route
            distance_km = config.distance_km
            if distance_km <= 0:
                distance_km = route_length_m(route) / 1000
        else:
            distance_km = config.distance_km
            route = synthetic_loop(distance_km)
            logger.info(f"No route drawn, using a {distance_km:.2f} km synthetic loop")

        target_time_sec = config.target_time_sec
        if target_time_sec <= 0:
            target_time_sec = distance_km * config.avg_pace_sec_per_km

        points = self.interpolator.interpolate(route)
        if not points:
            raise NoRouteError("Route produced no track points")

        elevated = ElevationSynthesizer(rng).synthesize(
            points,
            elevation_samples=config.elevation_profile,
            elevation_gain_m=config.elevation_gain_m,
            smoothing_window=config.elevation_smoothing_window,
        )

        simulated = PerformanceSimulator(
            avg_pace_sec_per_km=config.avg_pace_sec_per_km,
            inconsistency_pct=config.inconsistency_pct,
            heart_rate=config.heart_rate,
            activity_type=config.activity_type,
            rng=rng,
        ).simulate(elevated)

        sequencer = TimestampSequencer(
            start_time=config.start_datetime(),
            target_time_sec=target_time_sec,
            inconsistency_pct=config.inconsistency_pct,
            timing_model=config.timing_model,
            rng=rng,
        )
        samples = sequencer.sequence(simulated)

        gain, loss = elevation_gain_loss([s.elevation_m for s in samples])
        elapsed = (
            (samples[-1].timestamp - samples[0].timestamp).total_seconds()
            if samples
            else 0.0
        )

        track = GeneratedTrack(
            config=replace(
                config, distance_km=distance_km, target_time_sec=target_time_sec
            ),
            samples=samples,
            distance_km=distance_km,
            target_time_sec=target_time_sec,
            elevation_gain_m=gain,
            elevation_loss_m=loss,
            track_distance_m=samples[-1].distance_from_start_m,
            elapsed_seconds=elapsed,
        )

        logger.info(
            f"Generated '{config.name}': {len(samples)} points, "
            f"{distance_km:.2f} km, {elapsed:.0f}s, +{gain:.0f} m"
        )

        return track

    def export(
        self,
        config: ActivityConfig,
        file_format: FileFormat,
        may_export: bool = True,
    ) -> ExportedFile:
        """
        Generate and render an activity file.

        Args:
            config: Activity parameters
            file_format: FileFormat.GPX or FileFormat.TCX
            may_export: Result of the caller's export gate (e.g. token balance)

        Returns:
            ExportedFile ready for download

        Raises:
            ExportNotAllowedError: If the export gate is closed
        """
        if not may_export:
            raise ExportNotAllowedError("Export not allowed for this activity")

        track = self.generate(config)
        return self.serializer.render(track, file_format)

    @staticmethod
    def validate(config: ActivityConfig) -> None:
        """
        Check that a config can produce a track.

        Raises:
            NoRouteError: Fewer than 2 route points and distance_km <= 0
            InvalidConfigError: Any other unusable value
        """
        if not math.isfinite(config.distance_km) or config.distance_km < 0:
            raise InvalidConfigError(
                f"Distance must be a non-negative number, got {config.distance_km}"
            )

        if len(config.route) < 2 and config.distance_km <= 0:
            raise NoRouteError(
                "Draw a route with at least 2 points or set a distance"
            )

        if not math.isfinite(config.avg_pace_sec_per_km) or config.avg_pace_sec_per_km <= 0:
            raise InvalidConfigError(
                f"Average pace must be positive, got {config.avg_pace_sec_per_km}"
            )

        if not math.isfinite(config.target_time_sec) or config.target_time_sec < 0:
            raise InvalidConfigError(
                f"Target time must be non-negative, got {config.target_time_sec}"
            )

        if not 0 <= config.inconsistency_pct <= 100:
            raise InvalidConfigError(
                f"Inconsistency must be within 0-100%, got {config.inconsistency_pct}"
            )

        if not math.isfinite(config.elevation_gain_m) or config.elevation_gain_m < 0:
            raise InvalidConfigError(
                f"Elevation gain must be non-negative, got {config.elevation_gain_m}"
            )

        hr = config.heart_rate
        if hr.enabled and (not math.isfinite(hr.avg_bpm) or hr.avg_bpm <= 0):
            raise InvalidConfigError(
                f"Average heart rate must be positive, got {hr.avg_bpm}"
            )

        if hr.enabled and hr.variability_pct is not None and (
            isinstance(hr.variability_pct, bool)
            or not isinstance(hr.variability_pct, (int, float))
        ):
            raise InvalidConfigError(
                f"Heart rate variability must be a number, got {hr.variability_pct!r}"
            )

        if config.seed is not None and (
            isinstance(config.seed, bool) or not isinstance(config.seed, int)
        ):
            raise InvalidConfigError(f"Seed must be an integer, got {config.seed!r}")

        # Fails fast on malformed date/time
        config.start_datetime()
