from greencrowd.config.settings import CatalogSettings, get_settings
from greencrowd.domain.models import Campaign
from greencrowd.quality.report import build_quality_report, catalog_issues


def _codes(issues):
    return {i.code: i for i in issues}


def test_catalog_issues_flags_degenerate_and_open_rings(campaigns):
    issues = _codes(catalog_issues(campaigns))

    assert issues["AREA_DEGENERATE_POLYGON"].sample == ["c1:bad"]
    # Both squares are stored without a closing vertex.
    assert issues["AREA_OPEN_RING"].count == 2
    assert "CATALOG_DUPLICATE_ID" not in issues
    assert "POI_OUTSIDE_AREAS" not in issues


def test_catalog_issues_flags_duplicates_and_stray_pois():
    campaign = Campaign.model_validate(
        {
            "id": "c",
            "name": "C",
            "areas": [
                {"id": "x", "name": "X", "polygon": [[0, 0], [0, 1], [1, 1], [0, 0]]},
                {"id": "x", "name": "X again", "polygon": [[0, 0], [0, 1], [1, 1], [0, 0]]},
            ],
            "pointsOfInterest": [{"id": "far", "name": "Far", "latitude": 10, "longitude": 10}],
        }
    )

    issues = _codes(catalog_issues([campaign]))

    assert issues["CATALOG_DUPLICATE_ID"].sample == ["x"]
    assert issues["POI_OUTSIDE_AREAS"].sample == ["c:far"]
    assert "AREA_OPEN_RING" not in issues


def test_build_quality_report_on_catalog_file(catalog_file):
    settings = get_settings().model_copy(update={"catalog": CatalogSettings(path=str(catalog_file))})

    report = build_quality_report(settings)

    assert report["overall"]["severity"] == "warning"
    assert report["counts"] == {"campaigns": 2, "areas": 3, "points_of_interest": 2}


def test_build_quality_report_when_catalog_is_missing(tmp_path):
    settings = get_settings().model_copy(
        update={"catalog": CatalogSettings(path=str(tmp_path / "missing.json"))}
    )

    report = build_quality_report(settings)

    assert report["overall"] == {"severity": "error", "issue_count": 1}
    assert report["issues"][0]["code"] == "CATALOG_LOAD_FAILED"


def test_closed_ring_with_two_distinct_vertices_is_degenerate():
    campaign = Campaign.model_validate(
        {
            "id": "c",
            "name": "C",
            "areas": [{"id": "sliver", "name": "Sliver", "polygon": [[0, 0], [1, 1], [0, 0]]}],
            "pointsOfInterest": [{"id": "p", "name": "P", "latitude": 5, "longitude": 5, "areaId": "sliver"}],
        }
    )

    issues = _codes(catalog_issues([campaign]))

    assert issues["AREA_DEGENERATE_POLYGON"].sample == ["c:sliver"]
    assert "AREA_OPEN_RING" not in issues
    # The geofence ignores the sliver, so its POI cannot be judged against it.
    assert "POI_OUTSIDE_AREAS" not in issues
