import json

import pytest

from greencrowd.domain.models import Campaign

# Two overlapping unit squares plus one degenerate area, in (lat, lng).
SQUARE_A = [[0.0, 0.0], [0.0, 1.0], [1.0, 1.0], [1.0, 0.0]]
SQUARE_B = [[0.5, 0.5], [0.5, 1.5], [1.5, 1.5], [1.5, 0.5]]

CATALOG_PAYLOAD = {
    "campaigns": [
        {
            "id": "c1",
            "name": "Squares",
            "areas": [
                {"id": "a1", "name": "Square A", "polygon": SQUARE_A},
                {"id": "a2", "name": "Square B", "description": "overlaps A", "polygon": SQUARE_B},
                {"id": "bad", "name": "Two points", "polygon": [[5.0, 5.0], [6.0, 6.0]]},
            ],
            "pointsOfInterest": [
                {"id": "p1", "name": "Center of A", "latitude": 0.5, "longitude": 0.5, "radius": 100, "areaId": "a1"},
                {"id": "p2", "name": "No radius", "latitude": 0.2, "longitude": 0.2},
            ],
        },
        {"id": "c2", "name": "Empty", "areas": []},
    ]
}


@pytest.fixture
def catalog_payload():
    return json.loads(json.dumps(CATALOG_PAYLOAD))


@pytest.fixture
def campaigns(catalog_payload):
    return [Campaign.model_validate(c) for c in catalog_payload["campaigns"]]


@pytest.fixture
def catalog_file(tmp_path, catalog_payload):
    path = tmp_path / "campaigns.json"
    path.write_text(json.dumps(catalog_payload), encoding="utf-8")
    return path
