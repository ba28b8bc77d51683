"""Tests for haversine distance and bounding boxes."""
import math

import pytest
from pydantic import ValidationError

from city_navigation.geo.geometry import (
    EARTH_RADIUS_M,
    Coordinate,
    EmptyInputError,
    bounding_box,
    distance,
    midpoint,
)


def test_same_point_zero_distance():
    p = Coordinate.of(40.0, -88.0)
    assert distance(p, p) == 0.0
    assert distance(p, Coordinate.of(40.0, -88.0)) == 0.0


def test_distinct_points_positive_distance():
    assert distance(Coordinate.of(0.0, 0.0), Coordinate.of(0.0, 0.0001)) > 0.0


def test_antipodal_roughly_half_circumference():
    d = distance(Coordinate.of(0.0, 0.0), Coordinate.of(0.0, 180.0))
    assert abs(d - math.pi * EARTH_RADIUS_M) < 1.0


def test_symmetry():
    a = Coordinate.of(40.1, -88.2)
    b = Coordinate.of(40.2, -88.1)
    assert distance(a, b) == distance(b, a)


def test_triangle_inequality():
    a = Coordinate.of(-22.90, -43.12)
    b = Coordinate.of(-22.95, -43.05)
    c = Coordinate.of(-23.55, -46.63)
    assert distance(a, c) <= distance(a, b) + distance(b, c) + 1e-6


def test_known_distance_niteroi(niteroi_origin, niteroi_destination):
    # ~0.0012 deg lat and ~0.0082 deg lon at 22.9 S: about 850 m
    d = distance(niteroi_origin, niteroi_destination)
    assert 800 < d < 900


def test_coordinate_range_validated():
    with pytest.raises(ValidationError):
        Coordinate.of(91.0, 0.0)
    with pytest.raises(ValidationError):
        Coordinate.of(0.0, -180.5)


def test_pole_and_antimeridian_have_one_representation():
    assert Coordinate.of(90.0, 100.0) == Coordinate.of(90.0, 0.0)
    assert Coordinate.of(-90.0, -45.0).longitude == 0.0
    assert Coordinate.of(10.0, -180.0) == Coordinate.of(10.0, 180.0)
    assert distance(Coordinate.of(90.0, 0.0), Coordinate.of(90.0, 100.0)) == 0.0
    assert distance(Coordinate.of(89.9, 0.0), Coordinate.of(89.9, 100.0)) > 0.0


def test_bounding_box_multiple_points():
    box = bounding_box([Coordinate.of(-22.90, -43.12), Coordinate.of(-22.91, -43.10), Coordinate.of(-22.95, -43.11)])
    assert box.min_lat == -22.95
    assert box.max_lat == -22.90
    assert box.min_lon == -43.12
    assert box.max_lon == -43.10


def test_bounding_box_single_point_is_degenerate():
    box = bounding_box([Coordinate.of(10.0, 20.0)])
    assert box.min_lat == box.max_lat == 10.0
    assert box.min_lon == box.max_lon == 20.0
    assert box.lat_extent == 0.0
    assert box.lon_extent == 0.0


def test_bounding_box_empty_raises():
    with pytest.raises(EmptyInputError):
        bounding_box([])


def test_bounding_box_accepts_generator():
    box = bounding_box(Coordinate.of(float(i), float(i)) for i in range(3))
    assert box.max_lat == 2.0


def test_midpoint():
    box = bounding_box([Coordinate.of(-22.90, -43.12), Coordinate.of(-22.91, -43.10)])
    center = midpoint(box)
    assert center.latitude == pytest.approx(-22.905)
    assert center.longitude == pytest.approx(-43.11)
