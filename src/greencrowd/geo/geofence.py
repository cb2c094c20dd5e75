"""
Geofencing: is a contributor inside a campaign area, and if not, how far away?

Inputs use the `(lat, lng)` vertex convention of the catalog and the devices.
Shapely works in `(x, y)`, so every ring is flipped to `(lng, lat)` before any
geometric test. The nearest point of an outline is searched in a local metric
frame around the position (pyproj), then measured on the sphere with Haversine.

Two lookups with deliberately different tie-breaking live here:
- `evaluate_position` reports the LAST containing polygon (later hits overwrite earlier ones).
- `find_containing_area` returns the FIRST containing area.

Everything is pure: inputs are read-only snapshots and nothing is cached.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping, Sequence

from pyproj import Transformer
from pyproj.enums import TransformDirection
from shapely.geometry import LineString, Point, Polygon
from shapely.ops import nearest_points, transform

from greencrowd.core.geo import EARTH_RADIUS_M, GeoPoint, haversine_distance, haversine_m, split_km_m
from greencrowd.domain.models import (
    AreaRef,
    Campaign,
    CampaignEvaluation,
    PoiProximity,
    PointOfInterest,
    PolygonEvaluation,
)

logger = logging.getLogger(__name__)

MIN_POLYGON_VERTICES = 3
# A closed ring needs 3 distinct vertices plus the closing one.
MIN_RING_COORDS = 4
SPHERE_CRS = f"+proj=longlat +R={EARTH_RADIUS_M} +no_defs"


def _lat_lng(position: Any) -> tuple[float, float]:
    if isinstance(position, Mapping):
        return float(position["lat"]), float(position["lng"])
    return float(position.lat), float(position.lng)


def _area_polygon(area: Any) -> Sequence[Sequence[float]] | None:
    if area is None:
        return None
    if isinstance(area, Mapping):
        return area.get("polygon")
    return getattr(area, "polygon", None)


def close_ring(polygon: Sequence[Sequence[float]]) -> list[tuple[float, float]]:
    """Flip `(lat, lng)` vertices to `(lng, lat)` and close the ring if it is open."""
    ring = [(float(v[1]), float(v[0])) for v in polygon]
    first, last = ring[0], ring[-1]
    if first[0] != last[0] or first[1] != last[1]:
        ring.append(first)
    return ring


def usable_ring(polygon: Sequence[Sequence[float]] | None) -> list[tuple[float, float]] | None:
    if not polygon or len(polygon) < MIN_POLYGON_VERTICES:
        return None
    ring = close_ring(polygon)
    if len(ring) < MIN_RING_COORDS:
        # e.g. [A, B, A]: three entries but only two distinct vertices.
        return None
    return ring


def _as_point(lat: float, lng: float) -> Point | None:
    # NaN positions never reach GEOS: they contain nothing and measure NaN.
    if math.isnan(lat) or math.isnan(lng):
        return None
    return Point(lng, lat)


def _contains(ring: list[tuple[float, float]], point: Point | None) -> bool:
    if point is None:
        return False
    # `covers` keeps points lying exactly on an edge inside the area.
    return Polygon(ring).covers(point)


def local_frame(lat: float, lng: float) -> Transformer:
    """Azimuthal equidistant frame in meters centred on `(lat, lng)`.

    Uses the same sphere as Haversine, so the centre maps to `(0, 0)` and the
    planar distance from it to any projected point is its great-circle distance.
    """
    centred = f"+proj=aeqd +lat_0={lat:.10f} +lon_0={lng:.10f} +R={EARTH_RADIUS_M} +units=m +no_defs"
    return Transformer.from_crs(SPHERE_CRS, centred, always_xy=True)


def _boundary_distance_m(ring: list[tuple[float, float]], frame: Transformer | None, lat: float, lng: float) -> float:
    """Great-circle meters from the point to the nearest point on the ring's outline."""
    if frame is None:
        return math.nan
    outline = transform(frame.transform, LineString(ring))
    nearest, _ = nearest_points(outline, Point(0.0, 0.0))
    near_lng, near_lat = frame.transform(nearest.x, nearest.y, direction=TransformDirection.INVERSE)
    return haversine_distance(lat, lng, near_lat, near_lng)


def evaluate_position(position: Any, polygons: Sequence[Sequence[Sequence[float]] | None]) -> PolygonEvaluation:
    """Evaluate a position against an ordered list of `(lat, lng)` polygons.

    - Polygons with fewer than 3 vertices are skipped.
    - A containing polygon sets the distance to 0; a later containing polygon
      overwrites the reported index.
    - Otherwise the polygon with the smallest boundary distance (meters) wins,
      earliest index on ties.

    Empty input, or only degenerate polygons, yields `(False, None, None)`.
    """
    lat, lng = _lat_lng(position)
    point = _as_point(lat, lng)
    frame = local_frame(lat, lng) if point is not None else None

    inside = False
    closest_index: int | None = None
    min_distance = math.inf

    for index, polygon in enumerate(polygons):
        ring = usable_ring(polygon)
        if ring is None:
            logger.debug("Skipping degenerate polygon at index %d", index)
            continue

        if _contains(ring, point):
            inside = True
            closest_index = index
            min_distance = 0.0
            continue

        dist = _boundary_distance_m(ring, frame, lat, lng)
        if dist < min_distance:
            min_distance = dist
            closest_index = index

    return PolygonEvaluation(
        is_inside_any_polygon=inside,
        closest_polygon_index=closest_index,
        distance_to_closest_polygon=min_distance if math.isfinite(min_distance) else None,
    )


def find_containing_area(areas: Iterable[Any] | None, position: Any) -> Any | None:
    """Return the first area (in input order) whose polygon contains the position."""
    if not areas:
        return None

    lat, lng = _lat_lng(position)
    point = _as_point(lat, lng)

    for area in areas:
        ring = usable_ring(_area_polygon(area))
        if ring is None:
            continue
        if _contains(ring, point):
            return area
    return None


def find_campaign_area(campaign: Campaign | Mapping[str, Any] | None, position: Any) -> Any | None:
    """`find_containing_area` over a campaign's areas; tolerates a missing campaign."""
    if campaign is None:
        return None
    areas = campaign.get("areas") if isinstance(campaign, Mapping) else campaign.areas
    if not isinstance(areas, list):
        return None
    return find_containing_area(areas, position)


def evaluate_campaign(campaign: Campaign, position: Any) -> CampaignEvaluation:
    """Evaluate a position against a campaign's areas, naming the area behind the index."""
    result = evaluate_position(position, [a.polygon for a in campaign.areas])

    closest_area = None
    if result.closest_polygon_index is not None:
        area = campaign.areas[result.closest_polygon_index]
        closest_area = AreaRef(id=area.id, name=area.name)

    return CampaignEvaluation(**result.model_dump(), closest_area=closest_area)


def check_poi_proximity(position: Any, poi: PointOfInterest, *, default_radius_m: float) -> PoiProximity:
    """Distance to a point of interest and whether the position is within its radius."""
    lat, lng = _lat_lng(position)
    distance_m = haversine_m(GeoPoint(lat=lat, lng=lng), GeoPoint(lat=poi.latitude, lng=poi.longitude))
    kilometers, meters = split_km_m(distance_m)
    radius_m = poi.radius if poi.radius is not None else default_radius_m
    return PoiProximity(
        poi_id=poi.id,
        distance_m=distance_m,
        kilometers=kilometers,
        meters=meters,
        radius_m=radius_m,
        is_inside_radius=distance_m <= radius_m,
    )
