"""Haversine distance tests."""

import math

import pytest

from poiquery.services.geo import EARTH_RADIUS_METERS, haversine_meters, meters_to_kilometers

pytestmark = pytest.mark.unit

NYC = (40.7128, -74.0060)
LONDON = (51.5074, -0.1278)


def test_same_point_is_zero():
    assert haversine_meters(*NYC, *NYC) == 0.0


def test_symmetric():
    assert haversine_meters(*NYC, *LONDON) == pytest.approx(haversine_meters(*LONDON, *NYC))


def test_one_degree_of_latitude():
    expected = EARTH_RADIUS_METERS * math.pi / 180
    assert haversine_meters(0, 0, 1, 0) == pytest.approx(expected)


def test_nyc_to_london():
    distance_km = meters_to_kilometers(haversine_meters(*NYC, *LONDON))
    assert 5550 < distance_km < 5590


def test_antipodal_points():
    assert haversine_meters(0, 0, 0, 180) == pytest.approx(math.pi * EARTH_RADIUS_METERS)


def test_meters_to_kilometers():
    assert meters_to_kilometers(1500) == 1.5
