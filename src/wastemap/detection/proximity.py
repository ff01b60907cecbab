"""Proximity tests for matching cleaned signals to active detections.

Matching uses an axis-aligned degree box and ranks candidates inside the box by
plain Euclidean distance in degree space. Neither is geodesically correct; both
are cheap and deterministic. :func:`haversine_distance` is provided for display
and diagnostics only.
"""

from __future__ import annotations

import math

from wastemap.core.records import Coordinates

DEFAULT_LAT_THRESHOLD = 0.005
DEFAULT_LON_THRESHOLD = 0.005


def within_threshold(
    a: Coordinates,
    b: Coordinates,
    lat_threshold: float = DEFAULT_LAT_THRESHOLD,
    lon_threshold: float = DEFAULT_LON_THRESHOLD,
) -> bool:
    """Check whether two points fall inside the same degree box.

    Args:
        a: First point
        b: Second point
        lat_threshold: Exclusive latitude difference bound in degrees
        lon_threshold: Exclusive longitude difference bound in degrees

    Returns:
        True if both axis differences are strictly below their thresholds
    """
    return (
        abs(a.latitude - b.latitude) < lat_threshold
        and abs(a.longitude - b.longitude) < lon_threshold
    )


def degree_distance(a: Coordinates, b: Coordinates) -> float:
    """Euclidean distance in degree space, for ranking nearby candidates."""
    return math.hypot(a.latitude - b.latitude, a.longitude - b.longitude)


def haversine_distance(
    lat1: float, lon1: float, lat2: float, lon2: float
) -> float:
    """Calculate distance between two GPS points in metres.

    Uses the haversine formula for calculating great-circle distance
    between two points on a sphere.

    Args:
        lat1: Latitude of first point in degrees
        lon1: Longitude of first point in degrees
        lat2: Latitude of second point in degrees
        lon2: Longitude of second point in degrees

    Returns:
        Distance in metres
    """
    earth_radius = 6371000  # Earth's radius in metres

    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return earth_radius * c


def coordinate_haversine(a: Coordinates, b: Coordinates) -> float:
    """Haversine distance in metres between two :class:`Coordinates`."""
    return haversine_distance(a.latitude, a.longitude, b.latitude, b.longitude)
