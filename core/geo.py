"""Map scaling helpers shared by the page compute functions."""

from __future__ import annotations

import math
from typing import Iterable, List, Mapping, Optional

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in kilometers."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def _scale(count: float, max_count: float, low: float, high: float) -> float:
    if max_count == 0:
        return low
    return low + (count / max_count) * (high - low)


def circle_size(count: float, max_count: float, min_size: float = 5, max_size: float = 50) -> float:
    return _scale(count, max_count, min_size, max_size)


def line_width(count: float, max_count: float, min_width: float = 1, max_width: float = 8) -> float:
    return _scale(count, max_count, min_width, max_width)


def line_opacity(count: float, max_count: float, min_opacity: float = 0.3, max_opacity: float = 0.9) -> float:
    return _scale(count, max_count, min_opacity, max_opacity)


def _present(value: object) -> bool:
    # NaN != NaN
    return value is not None and value == value


def data_bounds(points: Iterable[Mapping[str, object]]) -> Optional[List[float]]:
    """Return ``[south, west, north, east]`` over the points' lat/lon, or None."""
    points = list(points)
    lats = [float(p["lat"]) for p in points if _present(p.get("lat"))]
    lons = [float(p["lon"]) for p in points if _present(p.get("lon"))]
    if not lats or not lons:
        return None
    return [min(lats), min(lons), max(lats), max(lons)]
