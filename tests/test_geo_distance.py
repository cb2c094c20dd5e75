import math

import pytest

from greencrowd.core.geo import GeoPoint, haversine_distance, haversine_m, split_km_m


def test_haversine_identical_points_is_zero():
    assert haversine_distance(0, 0, 0, 0) == 0
    assert haversine_distance(39.47, -0.37, 39.47, -0.37) == 0


def test_haversine_london_paris():
    d = haversine_distance(51.5, -0.12, 48.85, 2.35)
    assert 341_000 <= d <= 345_000


def test_haversine_is_symmetric():
    a = haversine_distance(51.5, -0.12, 48.85, 2.35)
    b = haversine_distance(48.85, 2.35, 51.5, -0.12)
    assert a == pytest.approx(b, rel=1e-12)


def test_haversine_one_hundredth_degree_of_latitude():
    # 6_371_000 * radians(0.01)
    assert haversine_distance(0, 0, 0.01, 0) == pytest.approx(1111.95, rel=1e-4)


def test_haversine_propagates_nan():
    assert math.isnan(haversine_distance(float("nan"), 0, 0, 0))


def test_haversine_m_matches_coordinate_form():
    a = GeoPoint(lat=51.5, lng=-0.12)
    b = GeoPoint(lat=48.85, lng=2.35)
    assert haversine_m(a, b) == haversine_distance(51.5, -0.12, 48.85, 2.35)


@pytest.mark.parametrize(
    "distance_m, expected",
    [
        (0.0, (0, 0)),
        (55.6, (0, 56)),
        (1111.95, (1, 112)),
        (1500.4, (1, 500)),
    ],
)
def test_split_km_m(distance_m, expected):
    assert split_km_m(distance_m) == expected
