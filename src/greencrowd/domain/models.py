"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- device inputs (`Position`)
- catalog entities (`Campaign`, `Area`, `PointOfInterest`)
- geofence outputs (`PolygonEvaluation`, `PoiProximity`)

Polygons are always `(lat, lng)` pairs at this layer; conversion to the
`(lng, lat)` geometry convention happens inside `greencrowd.geo`.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

LatLng = tuple[float, float]


class Position(BaseModel):
    """A device-reported position in decimal degrees."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    accuracy: float | None = Field(default=None, ge=0)
    heading: float | None = None
    speed: float | None = None


class Area(BaseModel):
    """A named geofenced region within a campaign."""

    id: str
    name: str
    description: str | None = None
    campaign_id: str | None = Field(default=None, alias="campaignId")
    polygon: list[LatLng] | None = None

    model_config = ConfigDict(populate_by_name=True)


class PointOfInterest(BaseModel):
    """A location users must be near (within `radius` meters) to open its tasks."""

    id: str
    name: str
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    radius: float | None = Field(default=None, gt=0)
    area_id: str | None = Field(default=None, alias="areaId")
    task_count: int = Field(default=0, ge=0, alias="taskCount")

    model_config = ConfigDict(populate_by_name=True)


class Campaign(BaseModel):
    """A collection of areas and points of interest open to contributors."""

    id: str
    name: str
    description: str | None = None
    areas: list[Area] = Field(default_factory=list)
    points_of_interest: list[PointOfInterest] = Field(default_factory=list, alias="pointsOfInterest")

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def _attach_area_campaign(self) -> "Campaign":
        # Areas stored under a campaign belong to it unless they say otherwise.
        self.areas = [
            a if a.campaign_id else a.model_copy(update={"campaign_id": self.id}) for a in self.areas
        ]
        return self


class PolygonEvaluation(BaseModel):
    """Result of evaluating one position against an ordered list of polygons."""

    is_inside_any_polygon: bool = Field(default=False, alias="isInsideAnyPolygon")
    closest_polygon_index: int | None = Field(default=None, alias="closestPolygonIndex")
    distance_to_closest_polygon: float | None = Field(default=None, alias="distanceToClosestPolygon")

    model_config = ConfigDict(populate_by_name=True)


class PolygonEvaluationRequest(BaseModel):
    position: Position
    polygons: list[list[LatLng]] = Field(default_factory=list)


class AreaRef(BaseModel):
    id: str
    name: str


class CampaignEvaluation(PolygonEvaluation):
    """A `PolygonEvaluation` over a campaign's areas, plus the area behind the index."""

    closest_area: AreaRef | None = Field(default=None, alias="closestArea")


class PoiProximity(BaseModel):
    """Distance from a position to a point of interest and whether it is within reach."""

    poi_id: str
    distance_m: float
    kilometers: int
    meters: int
    radius_m: float
    is_inside_radius: bool


class AreaDraft(BaseModel):
    """An area decoded from KML, not yet attached to a stored campaign."""

    name: str
    description: str = ""
    campaign_id: str | None = Field(default=None, alias="campaignId")
    polygon: list[LatLng] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class ClientEvent(BaseModel):
    """A client-side activity event forwarded to the server log."""

    event_type: str = Field(..., min_length=1, alias="eventType")
    description: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)
