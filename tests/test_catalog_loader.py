import json

import pytest

from greencrowd.catalog.loader import find_campaign, find_poi, load_catalog
from greencrowd.core.exceptions import CampaignNotFoundError, CatalogError, PoiNotFoundError


def test_load_catalog_from_mapping_layout(catalog_file):
    campaigns = load_catalog(catalog_file)

    assert [c.id for c in campaigns] == ["c1", "c2"]
    # Area order is preserved exactly as stored.
    assert [a.id for a in campaigns[0].areas] == ["a1", "a2", "bad"]
    assert campaigns[0].points_of_interest[0].area_id == "a1"


def test_load_catalog_from_list_layout(tmp_path, catalog_payload):
    path = tmp_path / "list.json"
    path.write_text(json.dumps(catalog_payload["campaigns"]), encoding="utf-8")
    assert len(load_catalog(path)) == 2


def test_areas_inherit_their_campaign_id(catalog_file):
    campaigns = load_catalog(catalog_file)
    assert {a.campaign_id for a in campaigns[0].areas} == {"c1"}


def test_load_catalog_errors_are_catalog_errors(tmp_path):
    with pytest.raises(CatalogError, match="not found"):
        load_catalog(tmp_path / "missing.json")

    bad_json = tmp_path / "bad.json"
    bad_json.write_text("{not json", encoding="utf-8")
    with pytest.raises(CatalogError, match="not valid JSON"):
        load_catalog(bad_json)

    bad_shape = tmp_path / "shape.json"
    bad_shape.write_text(json.dumps([{"id": "c", "areas": []}]), encoding="utf-8")
    with pytest.raises(CatalogError, match="failed validation"):
        load_catalog(bad_shape)


def test_lookups(campaigns):
    assert find_campaign(campaigns, "c2").name == "Empty"
    campaign, poi = find_poi(campaigns, "p2")
    assert (campaign.id, poi.name) == ("c1", "No radius")

    with pytest.raises(CampaignNotFoundError):
        find_campaign(campaigns, "nope")
    with pytest.raises(PoiNotFoundError):
        find_poi(campaigns, "nope")


def test_shipped_sample_catalog_loads():
    campaigns = load_catalog("data/catalogs/campaigns.json")
    assert campaigns
    assert all(c.areas for c in campaigns)
