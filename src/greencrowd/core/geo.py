from __future__ import annotations

from dataclasses import dataclass
from math import atan2, cos, radians, sin, sqrt

"""
Great-circle distance helpers.

Polygon geometry lives in `greencrowd.geo.geofence` (Shapely); this module stays
dependency-free so any layer can measure point-to-point distances.
"""

EARTH_RADIUS_M = 6_371_000


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Compute great-circle distance in meters between two coordinates.

    No range validation: NaN in, NaN out.
    """
    d_lat = radians(lat2 - lat1)
    d_lng = radians(lng2 - lng1)

    a = sin(d_lat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(d_lng / 2) ** 2
    return EARTH_RADIUS_M * 2 * atan2(sqrt(a), sqrt(1 - a))


def haversine_m(a: GeoPoint, b: GeoPoint) -> float:
    """Point-object form of `haversine_distance`."""
    return haversine_distance(a.lat, a.lng, b.lat, b.lng)


def split_km_m(distance_m: float) -> tuple[int, int]:
    """Split a distance into whole kilometers and the remaining (rounded) meters."""
    total_m = round(distance_m)
    return int(distance_m // 1000), int(total_m % 1000)
