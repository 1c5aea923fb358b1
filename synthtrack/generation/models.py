"""
Activity Generation Models

Dataclasses passed between the stages of the track generation pipeline:
- ActivityConfig: what the user asked for
- TrackPoint / ElevatedPoint: densified route geometry
- SimulatedSample / TimestampedSample: per-point pace, heart rate and time
- GeneratedTrack / ExportedFile: pipeline results
"""

from dataclasses import asdict, dataclass, field
from datetime import date as date_type
from datetime import datetime, timezone
from enum import Enum
import math
from typing import Any, Dict, List, Optional

from .errors import InvalidConfigError


class ActivityType(Enum):
    """Sport of the generated activity"""

    RUN = "run"
    RIDE = "ride"
    HIKE = "hike"


class TimingModel(Enum):
    """How elapsed time is spread across the track points"""

    INDEPENDENT = "independent"  # even intervals with random jitter
    PACE_DERIVED = "pace_derived"  # intervals follow the simulated pace


class FileFormat(Enum):
    """Supported export formats"""

    GPX = "gpx"
    TCX = "tcx"


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _elevation_sample(value: Any) -> float:
    """Elevation lookups report missing samples as null; keep them as NaN"""
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _parse_seed(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f"seed must be an integer, got {value!r}")
    return int(value)


@dataclass
class HeartRateConfig:
    """Heart rate simulation settings"""

    enabled: bool = False
    avg_bpm: float = 140.0
    variability_pct: Optional[float] = 10.0

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "HeartRateConfig":
        if not data:
            return cls()
        return cls(
            enabled=bool(data.get("enabled", False)),
            avg_bpm=float(data.get("avgBpm", 140.0)),
            variability_pct=_optional_float(data.get("variabilityPct", 10.0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "avgBpm": self.avg_bpm,
            "variabilityPct": self.variability_pct,
        }


@dataclass
class ActivityConfig:
    """User supplied activity parameters"""

    name: str = "Morning Run"
    date: str = field(default_factory=lambda: date_type.today().isoformat())
    start_time: str = "08:00"
    distance_km: float = 0.0
    target_time_sec: float = 0.0
    avg_pace_sec_per_km: float = 360.0
    inconsistency_pct: float = 10.0
    activity_type: ActivityType = ActivityType.RUN
    elevation_gain_m: float = 0.0
    elevation_profile: List[float] = field(default_factory=list)
    heart_rate: HeartRateConfig = field(default_factory=HeartRateConfig)
    route: List[List[float]] = field(default_factory=list)  # [lon, lat] pairs
    description: str = ""
    seed: Optional[int] = None
    timing_model: TimingModel = TimingModel.INDEPENDENT
    elevation_smoothing_window: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActivityConfig":
        """
        Build a config from the camelCase payload sent by the front end.

        Args:
            data: Dict with keys such as distanceKm, avgPaceSecPerKm,
                heartRate {enabled, avgBpm, variabilityPct}, route

        Returns:
            ActivityConfig

        Raises:
            InvalidConfigError: If an enum value or number cannot be parsed
        """
        defaults = cls()
        try:
            return cls(
                name=str(data.get("name", defaults.name)),
                date=str(data.get("date", defaults.date)),
                start_time=str(data.get("startTime", defaults.start_time)),
                distance_km=float(data.get("distanceKm", 0.0) or 0.0),
                target_time_sec=float(data.get("targetTimeSec", 0.0) or 0.0),
                avg_pace_sec_per_km=float(
                    data.get("avgPaceSecPerKm", defaults.avg_pace_sec_per_km)
                ),
                inconsistency_pct=float(
                    data.get("inconsistencyPct", defaults.inconsistency_pct)
                ),
                activity_type=ActivityType(data.get("activityType", "run")),
                elevation_gain_m=float(data.get("elevationGainM", 0.0) or 0.0),
                elevation_profile=[
                    _elevation_sample(e) for e in data.get("elevationProfile") or []
                ],
                heart_rate=HeartRateConfig.from_dict(data.get("heartRate")),
                route=[[float(c) for c in coord] for coord in data.get("route") or []],
                description=str(data.get("description", "")),
                seed=_parse_seed(data.get("seed")),
                timing_model=TimingModel(data.get("timingModel", "independent")),
                elevation_smoothing_window=int(
                    data.get("elevationSmoothingWindow", 0) or 0
                ),
            )
        except (TypeError, ValueError) as e:
            raise InvalidConfigError(f"Invalid activity config: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        """Export config in the same camelCase shape accepted by from_dict"""
        return {
            "name": self.name,
            "date": self.date,
            "startTime": self.start_time,
            "distanceKm": self.distance_km,
            "targetTimeSec": self.target_time_sec,
            "avgPaceSecPerKm": self.avg_pace_sec_per_km,
            "inconsistencyPct": self.inconsistency_pct,
            "activityType": self.activity_type.value,
            "elevationGainM": self.elevation_gain_m,
            "elevationProfile": list(self.elevation_profile),
            "heartRate": self.heart_rate.to_dict(),
            "route": [list(coord) for coord in self.route],
            "description": self.description,
            "seed": self.seed,
            "timingModel": self.timing_model.value,
            "elevationSmoothingWindow": self.elevation_smoothing_window,
        }

    def start_datetime(self) -> datetime:
        """
        Combine date and start time into an aware UTC datetime.

        Raises:
            InvalidConfigError: If date or start time is malformed
        """
        try:
            return datetime.strptime(
                f"{self.date}T{self.start_time}", "%Y-%m-%dT%H:%M"
            ).replace(tzinfo=timezone.utc)
        except ValueError as e:
            raise InvalidConfigError(
                f"Invalid start date/time '{self.date} {self.start_time}': {e}"
            ) from e


@dataclass(frozen=True)
class TrackPoint:
    """A densified point on the route"""

    lat: float
    lon: float
    distance_from_start_m: float


@dataclass(frozen=True)
class ElevatedPoint(TrackPoint):
    """Track point with an assigned elevation"""

    elevation_m: float = 0.0


@dataclass(frozen=True)
class SimulatedSample(ElevatedPoint):
    """Elevated point with simulated pace and heart rate"""

    pace_sec_per_km: float = 0.0
    speed_kmh: float = 0.0
    heart_rate_bpm: Optional[int] = None
    gradient_pct: float = 0.0
    fatigue_accum_sec: float = 0.0


@dataclass(frozen=True)
class TimestampedSample(SimulatedSample):
    """Simulated sample with its wall-clock time"""

    timestamp: Optional[datetime] = None

    @property
    def timestamp_iso(self) -> str:
        """ISO-8601 UTC timestamp with millisecond precision"""
        if self.timestamp is None:
            return ""
        return format_timestamp(self.timestamp)


@dataclass
class GeneratedTrack:
    """Result of running the full generation pipeline"""

    config: ActivityConfig
    samples: List[TimestampedSample]
    distance_km: float
    target_time_sec: float
    elevation_gain_m: float
    elevation_loss_m: float
    track_distance_m: float
    elapsed_seconds: float

    @property
    def start_time(self) -> Optional[datetime]:
        return self.samples[0].timestamp if self.samples else None

    def summary(self) -> Dict[str, Any]:
        """Summary stats for task results and display"""
        return {
            "name": self.config.name,
            "activity_type": self.config.activity_type.value,
            "point_count": len(self.samples),
            "distance_km": round(self.distance_km, 2),
            "track_distance_m": round(self.track_distance_m, 1),
            "target_time_seconds": round(self.target_time_sec, 0),
            "elapsed_seconds": round(self.elapsed_seconds, 0),
            "elevation_gain_m": round(self.elevation_gain_m, 0),
            "elevation_loss_m": round(self.elevation_loss_m, 0),
        }


@dataclass
class ExportedFile:
    """A rendered activity file ready for download"""

    filename: str
    content: str
    media_type: str
    file_format: FileFormat

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["file_format"] = self.file_format.value
        return result


def format_timestamp(value: datetime) -> str:
    """Render an aware datetime as e.g. 2026-01-15T08:00:00.000Z"""
    return (
        value.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )
