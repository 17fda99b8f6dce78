"""Great-circle distance and bearing helpers."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from .config import EARTH_RADIUS_KM
from .models import Coordinate, TrackingPoint, Waypoint

__all__ = [
    "distance_km",
    "cumulative_distance_km",
    "initial_bearing_deg",
    "track_distance_km",
]


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Compute the haversine distance in kilometres between two coordinates.

    Inputs are not range checked; NaN propagates.
    """

    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    d_phi = math.radians(b.lat - a.lat)
    d_lambda = math.radians(b.lon - a.lon)

    h = (
        math.sin(d_phi / 2.0) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    )
    c = 2.0 * math.atan2(math.sqrt(h), math.sqrt(1.0 - h))
    return EARTH_RADIUS_KM * c


def cumulative_distance_km(
    prior_waypoints: Sequence[Waypoint], current: Coordinate
) -> float:
    """Stage distance at ``current`` given the waypoints captured so far.

    Walks every leg between consecutive prior waypoints and then the leg from
    the last prior waypoint to ``current``. The whole path is re-walked on
    every call because waypoints can be deleted after capture. Returns 0 for
    an empty sequence. The result is not rounded.
    """

    if not prior_waypoints:
        return 0.0
    total = 0.0
    previous = prior_waypoints[0].coordinate
    for waypoint in prior_waypoints[1:]:
        total += distance_km(previous, waypoint.coordinate)
        previous = waypoint.coordinate
    total += distance_km(previous, current)
    return total


def initial_bearing_deg(a: Coordinate, b: Coordinate) -> float:
    """Forward azimuth from ``a`` towards ``b`` in degrees, ``[0, 360)``."""

    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    d_lambda = math.radians(b.lon - a.lon)
    y = math.sin(d_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(
        d_lambda
    )
    return (math.degrees(math.atan2(y, x)) + 360.0) % 360.0


def track_distance_km(points: Sequence[TrackingPoint]) -> float:
    """Total length of a breadcrumb track in kilometres."""

    if len(points) < 2:
        return 0.0
    lat = np.radians(np.array([p.coordinate.lat for p in points], dtype=np.float64))
    lon = np.radians(np.array([p.coordinate.lon for p in points], dtype=np.float64))
    d_lat = np.diff(lat)
    d_lon = np.diff(lon)
    h = (
        np.sin(d_lat / 2.0) ** 2
        + np.cos(lat[:-1]) * np.cos(lat[1:]) * np.sin(d_lon / 2.0) ** 2
    )
    legs = 2.0 * np.arctan2(np.sqrt(h), np.sqrt(1.0 - h)) * EARTH_RADIUS_KM
    return float(legs.sum())
