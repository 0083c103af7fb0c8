"""
Geographic utilities for the shutdown tracker.

Coordinates in this package are always ``[lat, lng]`` in decimal
degrees, the order the map layer consumes them in.
"""

import math
from typing import Iterable, Optional, Sequence, Tuple

LatLng = Tuple[float, float]

def validate_coordinates(lat: float, lng: float) -> bool:
    """
    Check that a coordinate pair is finite and within range.

    Args:
        lat: latitude
        lng: longitude

    Returns:
        True when the pair is a valid WGS84 position
    """
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return -90 <= lat <= 90 and -180 <= lng <= 180

def as_lat_lng(value: Sequence) -> Optional[LatLng]:
    """Coerce a ``[lat, lng]`` pair to floats, or None if it is not one."""
    if isinstance(value, (str, bytes)):
        return None
    try:
        if len(value) != 2:
            return None
        lat, lng = float(value[0]), float(value[1])
    except (TypeError, ValueError):
        return None
    return (lat, lng)

def calculate_bounding_box(points: Iterable[LatLng]) -> Optional[Tuple[float, float, float, float]]:
    """
    Compute the bounding box of a set of points.

    Args:
        points: ``(lat, lng)`` pairs

    Returns:
        (south, west, north, east), or None for an empty input
    """
    pts = list(points)
    if not pts:
        return None

    lats = [p[0] for p in pts]
    lngs = [p[1] for p in pts]

    return (min(lats), min(lngs), max(lats), max(lngs))
