import math

import pytest

from delivery.tracking.geo_utils import bearing_degrees, distance_km
from delivery.tracking.models import GeoPoint

PAIRS = [
    (GeoPoint(12.97, 77.59), GeoPoint(12.935, 77.625)),
    (GeoPoint(39.92409, 32.845382), GeoPoint(39.9210086, 32.8529793)),
    (GeoPoint(-33.8688, 151.2093), GeoPoint(51.5074, -0.1278)),
    (GeoPoint(0.0, 179.9), GeoPoint(0.0, -179.9)),
]


@pytest.mark.parametrize("a, b", PAIRS)
def test_distance_is_symmetric(a, b):
    assert distance_km(a, b) == pytest.approx(distance_km(b, a))


@pytest.mark.parametrize("a, _", PAIRS)
def test_distance_to_self_is_zero(a, _):
    assert distance_km(a, a) == 0.0


def test_one_degree_of_latitude():
    assert distance_km(GeoPoint(0, 0), GeoPoint(1, 0)) == pytest.approx(111.19, abs=0.01)


def test_distance_across_antimeridian_is_short():
    a, b = PAIRS[3]
    assert distance_km(a, b) == pytest.approx(22.24, abs=0.01)


def test_restaurant_to_destination_distance():
    a, b = PAIRS[0]
    assert distance_km(a, b) == pytest.approx(5.43, abs=0.02)


def test_distance_propagates_nan():
    assert math.isnan(distance_km(GeoPoint(float("nan"), 0), GeoPoint(1, 1)))


@pytest.mark.parametrize("target, expected", [
    (GeoPoint(1, 0), 0.0),
    (GeoPoint(0, 1), 90.0),
    (GeoPoint(-1, 0), 180.0),
    (GeoPoint(0, -1), -90.0),
])
def test_cardinal_bearings(target, expected):
    assert bearing_degrees(GeoPoint(0, 0), target) == pytest.approx(expected)


@pytest.mark.parametrize("a, b", PAIRS)
def test_bearing_in_range(a, b):
    assert -180.0 <= bearing_degrees(a, b) <= 180.0


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
def test_bearing_non_finite_is_zero(bad):
    assert bearing_degrees(GeoPoint(bad, 0), GeoPoint(1, 1)) == 0.0
    assert bearing_degrees(GeoPoint(0, 0), GeoPoint(1, bad)) == 0.0
