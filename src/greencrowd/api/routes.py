"""
API routes.

Endpoints:
- GET  `/api/campaigns`, `/api/campaigns/{id}`: catalog browsing.
- POST `/api/campaigns/{id}/evaluate`: is the device inside any campaign area (else: nearest area + distance).
- POST `/api/campaigns/{id}/locate`: first campaign area containing the device.
- POST `/api/geofence/evaluate`: same evaluation for ad-hoc polygons.
- POST `/api/pois/{id}/proximity`: distance to a point of interest and radius check.
- GET  `/api/distance`: Haversine distance between two coordinates.
- GET  `/api/campaigns/{id}/areas.kml`, POST `/api/areas/import-kml`: KML exchange.
- POST `/api/log`: client activity events.
- GET  `/api/quality/report`: offline catalog checks.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import Response

from greencrowd import __version__
from greencrowd.catalog.loader import find_campaign, find_poi, load_catalog
from greencrowd.config.settings import get_settings
from greencrowd.core.exceptions import CatalogError, GreenCrowdError, KmlError, NotFoundError
from greencrowd.core.geo import haversine_distance
from greencrowd.core.logging import log_event
from greencrowd.domain.models import (
    Campaign,
    CampaignEvaluation,
    ClientEvent,
    PoiProximity,
    PolygonEvaluation,
    PolygonEvaluationRequest,
    Position,
)
from greencrowd.geo.geofence import check_poi_proximity, evaluate_campaign, evaluate_position, find_containing_area
from greencrowd.geo.kml import KML_MEDIA_TYPE, export_areas_kml, import_areas_kml
from greencrowd.quality.report import build_quality_report

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache
def _catalog() -> list[Campaign]:
    settings = get_settings()
    return load_catalog(settings.catalog.path)


def _http_error(e: GreenCrowdError) -> HTTPException:
    if isinstance(e, NotFoundError):
        status = 404
    elif isinstance(e, KmlError):
        status = 400
    else:
        status = 500
    if status == 500:
        logger.error("Request failed: %s", e.message)
    return HTTPException(status_code=status, detail=e.to_error_dict())


def _campaign(campaign_id: str) -> Campaign:
    try:
        return find_campaign(_catalog(), campaign_id)
    except GreenCrowdError as e:
        raise _http_error(e) from e


@router.get("/api/health")
def get_health() -> dict:
    return {"status": "ok", "version": __version__}


@router.get("/api/campaigns")
def get_campaigns() -> dict:
    """Return campaign summaries (no geometry)."""
    try:
        campaigns = _catalog()
    except CatalogError as e:
        raise _http_error(e) from e
    return {
        "campaigns": [
            {
                "id": c.id,
                "name": c.name,
                "description": c.description,
                "area_count": len(c.areas),
                "poi_count": len(c.points_of_interest),
            }
            for c in campaigns
        ]
    }


@router.get("/api/campaigns/{campaign_id}", response_model=Campaign)
def get_campaign(campaign_id: str) -> Campaign:
    return _campaign(campaign_id)


@router.post("/api/campaigns/{campaign_id}/evaluate", response_model=CampaignEvaluation)
def post_campaign_evaluate(campaign_id: str, position: Position) -> CampaignEvaluation:
    """Evaluate the device position against the campaign's areas, in stored order."""
    campaign = _campaign(campaign_id)
    result = evaluate_campaign(campaign, position)
    logger.debug(
        "campaign=%s inside=%s closest=%s distance_m=%s",
        campaign.id,
        result.is_inside_any_polygon,
        result.closest_polygon_index,
        result.distance_to_closest_polygon,
    )
    return result


@router.post("/api/campaigns/{campaign_id}/locate")
def post_campaign_locate(campaign_id: str, position: Position) -> dict:
    """Return the first campaign area containing the device position (or null)."""
    campaign = _campaign(campaign_id)
    area = find_containing_area(campaign.areas, position)
    return {"area": area.model_dump(mode="json", by_alias=True) if area is not None else None}


@router.post("/api/geofence/evaluate", response_model=PolygonEvaluation)
def post_geofence_evaluate(payload: PolygonEvaluationRequest) -> PolygonEvaluation:
    return evaluate_position(payload.position, payload.polygons)


@router.post("/api/pois/{poi_id}/proximity", response_model=PoiProximity)
def post_poi_proximity(poi_id: str, position: Position) -> PoiProximity:
    """Return distance to the POI and whether the device is within its radius."""
    settings = get_settings()
    try:
        _, poi = find_poi(_catalog(), poi_id)
    except GreenCrowdError as e:
        raise _http_error(e) from e
    return check_poi_proximity(position, poi, default_radius_m=settings.geofence.default_poi_radius_m)


@router.get("/api/distance")
def get_distance(
    lat1: float = Query(..., ge=-90, le=90),
    lng1: float = Query(..., ge=-180, le=180),
    lat2: float = Query(..., ge=-90, le=90),
    lng2: float = Query(..., ge=-180, le=180),
) -> dict:
    return {"meters": haversine_distance(lat1, lng1, lat2, lng2)}


@router.get("/api/campaigns/{campaign_id}/areas.kml")
def get_campaign_areas_kml(campaign_id: str, ids: str | None = None) -> Response:
    """Export campaign areas (optionally filtered by comma-separated IDs) as KML."""
    settings = get_settings()
    campaign = _campaign(campaign_id)

    areas = campaign.areas
    if ids:
        want = {s.strip() for s in ids.split(",") if s.strip()}
        areas = [a for a in areas if a.id in want]
    if not areas:
        raise HTTPException(
            status_code=400,
            detail={"code": "NO_AREAS_SELECTED", "message": "Select at least one area to export."},
        )

    content = export_areas_kml(areas, document_name=settings.kml.document_name)
    return Response(
        content=content,
        media_type=KML_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{settings.kml.export_filename}"'},
    )


@router.post("/api/areas/import-kml")
async def post_import_kml(request: Request, campaign_id: str | None = None) -> dict:
    """Decode area drafts from an uploaded KML document (raw request body)."""
    content = await request.body()
    if not content.strip():
        raise HTTPException(status_code=400, detail={"code": "EMPTY_BODY", "message": "Request body is empty."})
    try:
        result = import_areas_kml(content, campaign_id=campaign_id)
    except KmlError as e:
        raise _http_error(e) from e
    return {
        "areas": [a.model_dump(mode="json", by_alias=True) for a in result.areas],
        "skipped": result.skipped,
    }


@router.post("/api/log")
def post_log(event: ClientEvent) -> dict:
    """Record a client-side activity event in the server log."""
    return {"logged": log_event(event.event_type, event.description, event.metadata)}


@router.get("/api/quality/report")
def get_quality_report() -> dict:
    """Return an offline catalog quality report."""
    return build_quality_report(get_settings())
