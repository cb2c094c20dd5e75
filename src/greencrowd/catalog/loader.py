"""
Campaign catalog loader.

The catalog is a local JSON file (default: `data/catalogs/campaigns.json`) holding
campaigns with their areas and points of interest. It is a read-only snapshot of
the relational store; we validate it into typed Pydantic models so geofence and
API code can assume a consistent shape.

Accepted layouts: a top-level list of campaigns, or `{"campaigns": [...]}`.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from greencrowd.core.env import resolve_project_path
from greencrowd.core.exceptions import CampaignNotFoundError, CatalogError, PoiNotFoundError
from greencrowd.domain.models import Campaign, PointOfInterest

logger = logging.getLogger(__name__)

_CAMPAIGNS_ADAPTER = TypeAdapter(list[Campaign])


def load_catalog(path: str | Path) -> list[Campaign]:
    """Load and validate a campaign catalog JSON file.

    Raises:
        CatalogError: If the file is missing, not JSON, or fails validation.
    """
    resolved = resolve_project_path(path)
    try:
        payload = json.loads(resolved.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise CatalogError(f"Catalog file not found: {resolved}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"Catalog file is not valid JSON ({resolved}): {e}") from e

    if isinstance(payload, dict):
        payload = payload.get("campaigns", [])

    try:
        campaigns = _CAMPAIGNS_ADAPTER.validate_python(payload)
    except ValidationError as e:
        raise CatalogError(f"Catalog file failed validation ({resolved}): {e}") from e

    logger.debug("Loaded %d campaign(s) from %s", len(campaigns), resolved)
    return campaigns


def find_campaign(campaigns: list[Campaign], campaign_id: str) -> Campaign:
    for c in campaigns:
        if c.id == campaign_id:
            return c
    raise CampaignNotFoundError(f"Campaign '{campaign_id}' not found")


def find_poi(campaigns: list[Campaign], poi_id: str) -> tuple[Campaign, PointOfInterest]:
    """Return the POI with `poi_id` and the campaign that owns it."""
    for c in campaigns:
        for p in c.points_of_interest:
            if p.id == poi_id:
                return c, p
    raise PoiNotFoundError(f"Point of interest '{poi_id}' not found")
