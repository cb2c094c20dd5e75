"""
Offline catalog quality report.

Goal: a deterministic, network-free view of "will the geofence behave on this catalog?"
Degenerate polygons are silently skipped at evaluation time, so this report is
where they surface. Used by:
- CLI debugging
- API status endpoint
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from greencrowd.catalog.loader import load_catalog
from greencrowd.config.settings import Settings
from greencrowd.core.env import resolve_project_path
from greencrowd.core.exceptions import CatalogError
from greencrowd.domain.models import Campaign
from greencrowd.geo.geofence import find_containing_area, usable_ring

SAMPLE_SIZE = 8


@dataclass(frozen=True)
class Issue:
    severity: str  # "info" | "warning" | "error"
    code: str
    message: str
    count: int = 1
    sample: list[str] | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity,
            "code": self.code,
            "message": self.message,
            "count": int(self.count),
            "sample": list(self.sample or []),
        }


def _duplicates(ids: list[str]) -> list[str]:
    seen: set[str] = set()
    dup: set[str] = set()
    for i in ids:
        if i in seen:
            dup.add(i)
        seen.add(i)
    return sorted(dup)


def _is_open_ring(polygon: list[tuple[float, float]]) -> bool:
    return polygon[0] != polygon[-1]


def catalog_issues(campaigns: list[Campaign]) -> list[Issue]:
    issues: list[Issue] = []

    for kind, ids in [
        ("campaign", [c.id for c in campaigns]),
        ("area", [a.id for c in campaigns for a in c.areas]),
        ("point of interest", [p.id for c in campaigns for p in c.points_of_interest]),
    ]:
        dup = _duplicates(ids)
        if dup:
            issues.append(
                Issue(
                    severity="error",
                    code="CATALOG_DUPLICATE_ID",
                    message=f"Duplicate {kind} ids in catalog.",
                    count=len(dup),
                    sample=dup[:SAMPLE_SIZE],
                )
            )

    degenerate = [f"{c.id}:{a.id}" for c in campaigns for a in c.areas if usable_ring(a.polygon) is None]
    if degenerate:
        issues.append(
            Issue(
                severity="warning",
                code="AREA_DEGENERATE_POLYGON",
                message="Some areas have fewer than 3 distinct vertices and are ignored by the geofence.",
                count=len(degenerate),
                sample=degenerate[:SAMPLE_SIZE],
            )
        )

    open_rings = [
        f"{c.id}:{a.id}"
        for c in campaigns
        for a in c.areas
        if usable_ring(a.polygon) is not None and _is_open_ring(a.polygon)
    ]
    if open_rings:
        issues.append(
            Issue(
                severity="info",
                code="AREA_OPEN_RING",
                message="Some area polygons are open rings (closed implicitly at evaluation time).",
                count=len(open_rings),
                sample=open_rings[:SAMPLE_SIZE],
            )
        )

    outside: list[str] = []
    for c in campaigns:
        areas_by_id = {a.id: a for a in c.areas}
        for p in c.points_of_interest:
            candidates = [areas_by_id[p.area_id]] if p.area_id in areas_by_id else c.areas
            if not any(usable_ring(a.polygon) is not None for a in candidates):
                continue
            if find_containing_area(candidates, {"lat": p.latitude, "lng": p.longitude}) is None:
                outside.append(f"{c.id}:{p.id}")
    if outside:
        issues.append(
            Issue(
                severity="warning",
                code="POI_OUTSIDE_AREAS",
                message="Some points of interest lie outside their campaign areas.",
                count=len(outside),
                sample=outside[:SAMPLE_SIZE],
            )
        )

    return issues


def build_quality_report(settings: Settings) -> dict[str, Any]:
    catalog_path = resolve_project_path(settings.catalog.path)

    try:
        campaigns = load_catalog(catalog_path)
    except CatalogError as e:
        campaigns = []
        issues = [Issue(severity="error", code="CATALOG_LOAD_FAILED", message=str(e))]
    else:
        issues = catalog_issues(campaigns)

    severity_rank = {"error": 3, "warning": 2, "info": 1}
    worst = "info"
    for i in issues:
        if severity_rank.get(i.severity, 0) > severity_rank.get(worst, 0):
            worst = i.severity

    return {
        "overall": {"severity": worst, "issue_count": len(issues)},
        "paths": {"catalog_path": str(catalog_path)},
        "counts": {
            "campaigns": len(campaigns),
            "areas": sum(len(c.areas) for c in campaigns),
            "points_of_interest": sum(len(c.points_of_interest) for c in campaigns),
        },
        "issues": [i.as_dict() for i in issues],
    }
