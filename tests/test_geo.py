import math

import pytest

from rally_mapper.geo import (
    cumulative_distance_km,
    distance_km,
    initial_bearing_deg,
    track_distance_km,
)
from rally_mapper.models import Coordinate

from conftest import make_manual, make_track


ONE_DEGREE_KM = 6371.0 * math.pi / 180.0


def test_distance_is_zero_for_identical_points():
    point = Coordinate(-41.2865, 174.7762)
    assert distance_km(point, point) == 0.0


def test_distance_is_symmetric_and_non_negative():
    a = Coordinate(-41.2865, 174.7762)
    b = Coordinate(-36.8485, 174.7633)
    assert distance_km(a, b) > 0
    assert distance_km(a, b) == pytest.approx(distance_km(b, a))


def test_one_degree_along_equator():
    assert distance_km(Coordinate(0, 0), Coordinate(0, 1)) == pytest.approx(
        ONE_DEGREE_KM
    )


def test_nan_propagates_without_raising():
    assert math.isnan(distance_km(Coordinate(float("nan"), 0), Coordinate(0, 0)))


def test_cumulative_distance_empty_prior_is_zero():
    assert cumulative_distance_km([], Coordinate(10, 10)) == 0.0


def test_cumulative_distance_walks_every_leg_from_first_waypoint():
    prior = [make_manual(0, 0), make_manual(0, 0.5), make_manual(0, 1.0)]
    expected = 1.5 * ONE_DEGREE_KM
    assert cumulative_distance_km(prior, Coordinate(0, 1.5)) == pytest.approx(expected)


def test_cumulative_distance_is_not_rounded():
    prior = [make_manual(0, 0)]
    value = cumulative_distance_km(prior, Coordinate(0, 0.0123))
    assert value != round(value, 2)


def test_initial_bearing_cardinal_directions():
    origin = Coordinate(0, 0)
    assert initial_bearing_deg(origin, Coordinate(1, 0)) == pytest.approx(0.0)
    assert initial_bearing_deg(origin, Coordinate(0, 1)) == pytest.approx(90.0)
    assert initial_bearing_deg(origin, Coordinate(-1, 0)) == pytest.approx(180.0)
    assert initial_bearing_deg(origin, Coordinate(0, -1)) == pytest.approx(270.0)


def test_track_distance_matches_scalar_haversine():
    points = [make_track(-41.0, 174.0 + i * 0.01, i * 20) for i in range(6)]
    scalar = sum(
        distance_km(a.coordinate, b.coordinate) for a, b in zip(points, points[1:])
    )
    assert track_distance_km(points) == pytest.approx(scalar)


def test_track_distance_needs_two_points():
    assert track_distance_km([]) == 0.0
    assert track_distance_km([make_track(1, 1)]) == 0.0
