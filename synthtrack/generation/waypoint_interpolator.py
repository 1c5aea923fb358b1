"""
Waypoint Interpolator

Densifies a sparse, user-drawn route into a point sequence with
near-uniform (~10 m) spacing:
- Great-circle segment lengths (haversine)
- Linear lat/lon interpolation inside each segment
- Synthetic circular loop when no route was drawn
"""

import logging
import math
from typing import List, Sequence

from .errors import InvalidConfigError
from .models import TrackPoint

logger = logging.getLogger(__name__)

EARTH_RADIUS_M = 6371000

# Center of the synthetic loop used when no route was drawn (New York City)
LOOP_CENTER_LAT = 40.7128
LOOP_CENTER_LON = -74.0060
LOOP_STEPS = 100


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great-circle distance between two points.

    Args:
        lat1, lon1: First point coordinates (degrees)
        lat2, lon2: Second point coordinates (degrees)

    Returns:
        Distance in meters
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.asin(min(1.0, math.sqrt(a)))

    return EARTH_RADIUS_M * c


def route_length_m(route: Sequence[Sequence[float]]) -> float:
    """Total great-circle length of a [lon, lat] route in meters"""
    total = 0.0
    for (lon1, lat1), (lon2, lat2) in zip(route, route[1:]):
        total += haversine_distance(lat1, lon1, lat2, lon2)
    return total


def synthetic_loop(distance_km: float, steps: int = LOOP_STEPS) -> List[List[float]]:
    """
    Build a closed circular route whose circumference is distance_km.

    Args:
        distance_km: Loop length in kilometers
        steps: Number of polygon steps (steps + 1 vertices, first == last)

    Returns:
        List of [lon, lat] waypoints
    """
    radius_km = distance_km / (2 * math.pi)
    earth_radius_km = EARTH_RADIUS_M / 1000
    cos_center = math.cos(math.radians(LOOP_CENTER_LAT))

    route = []
    for i in range(steps + 1):
        angle = (i / steps) * 2 * math.pi
        d_lat = math.degrees(radius_km / earth_radius_km) * math.cos(angle)
        d_lon = math.degrees(radius_km / earth_radius_km) * math.sin(angle) / cos_center
        route.append([LOOP_CENTER_LON + d_lon, LOOP_CENTER_LAT + d_lat])

    return route


class WaypointInterpolator:
    """Turns ordered [lon, lat] waypoints into evenly spaced track points"""

    # Target spacing between generated points
    POINT_SPACING_M = 10.0

    # Absorbs float error so a 1000 m segment yields 100 points, not 99
    _SPACING_EPSILON = 1e-6

    def __init__(self, spacing_m: float = POINT_SPACING_M):
        if spacing_m <= 0:
            raise ValueError(f"Point spacing must be positive, got {spacing_m}")
        self.spacing_m = spacing_m

    def points_for_segment(self, segment_distance_m: float) -> int:
        """Number of points a segment of the given length contributes"""
        if not math.isfinite(segment_distance_m):
            return 1
        return max(
            1, math.floor(segment_distance_m / self.spacing_m + self._SPACING_EPSILON)
        )

    def interpolate(self, waypoints: Sequence[Sequence[float]]) -> List[TrackPoint]:
        """
        Densify waypoints into track points.

        Each segment contributes its start point plus evenly spaced interior
        points; the final segment spreads its points from start to end so the
        last waypoint appears exactly once at the end of the sequence.

        Args:
            waypoints: Ordered [lon, lat] pairs

        Returns:
            List of TrackPoint, empty when fewer than two waypoints are given

        Raises:
            InvalidConfigError: If a waypoint is malformed or not finite
        """
        if len(waypoints) < 2:
            return []

        coords = [self._parse_waypoint(wp, i) for i, wp in enumerate(waypoints)]
        last_segment = len(coords) - 2

        latlons = []
        for i in range(len(coords) - 1):
            lat1, lon1 = coords[i]
            lat2, lon2 = coords[i + 1]

            segment_distance = haversine_distance(lat1, lon1, lat2, lon2)
            count = self.points_for_segment(segment_distance)

            if i < last_segment:
                # Segment end is the next segment's start
                fractions = [k / count for k in range(count)]
            elif count == 1:
                fractions = [0.0, 1.0]
            else:
                fractions = [k / (count - 1) for k in range(count)]

            for fraction in fractions:
                latlons.append(
                    (lat1 + (lat2 - lat1) * fraction, lon1 + (lon2 - lon1) * fraction)
                )

        points = []
        cumulative_distance = 0.0
        prev = None
        for lat, lon in latlons:
            if prev is not None:
                step = haversine_distance(prev[0], prev[1], lat, lon)
                if math.isfinite(step):
                    cumulative_distance += step
            points.append(
                TrackPoint(lat=lat, lon=lon, distance_from_start_m=cumulative_distance)
            )
            prev = (lat, lon)

        logger.debug(
            f"Interpolated {len(coords)} waypoints into {len(points)} points "
            f"({cumulative_distance:.0f} m)"
        )

        return points

    @staticmethod
    def _parse_waypoint(waypoint: Sequence[float], index: int):
        """Validate a [lon, lat] pair and return it as (lat, lon)"""
        try:
            lon, lat = float(waypoint[0]), float(waypoint[1])
        except (TypeError, ValueError, IndexError) as e:
            raise InvalidConfigError(f"Malformed waypoint at index {index}: {e}") from e

        if not (math.isfinite(lat) and math.isfinite(lon)):
            raise InvalidConfigError(f"Non-finite waypoint at index {index}")
        if not (-90 <= lat <= 90 and -180 <= lon <= 180):
            raise InvalidConfigError(
                f"Waypoint at index {index} out of range: lon={lon}, lat={lat}"
            )

        return lat, lon
