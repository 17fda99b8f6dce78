"""Global pytest fixtures & helpers.

Adds project root to path and provides reusable factories for waypoints,
stages and a manually driven timer so tests never sleep.
"""
from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Optional

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from rally_mapper.models import (
    Category,
    Coordinate,
    SpeedContext,
    StageSnapshot,
    TrackingPoint,
    Waypoint,
)


# --- Factory helpers -------------------------------------------------
BASE_TIME = datetime(2025, 6, 1, 8, 0, 0, tzinfo=timezone.utc)


def iso(seconds: float = 0) -> str:
    return (BASE_TIME + timedelta(seconds=seconds)).isoformat().replace("+00:00", "Z")


def make_manual(lat, lon, distance=0.0, name="Unnamed", note="", icon_ref=None):
    return Waypoint(
        coordinate=Coordinate(lat, lon),
        name=name,
        timestamp="08:00:00",
        full_timestamp=iso(),
        distance_from_start=distance,
        note=note,
        icon_ref=icon_ref,
    )


def make_voice(lat, lon, distance=0.0, name="Left turn", category=Category.NAVIGATION,
               raw="turn left", speed=SpeedContext.UNKNOWN, note=""):
    return Waypoint(
        coordinate=Coordinate(lat, lon),
        name=name,
        timestamp="08:00:00",
        full_timestamp=iso(),
        distance_from_start=distance,
        note=note,
        category=category,
        voice_created=True,
        raw_transcript=raw,
        processed_text=name,
        speed_context=speed,
    )


def make_track(lat, lon, seconds=0):
    return TrackingPoint(Coordinate(lat, lon), iso(seconds))


def make_snapshot(waypoints=(), tracking=(), name="Day1/Route1/Stage1", route_name=""):
    start = waypoints[0].coordinate if waypoints else Coordinate(0.0, 0.0)
    return StageSnapshot(
        name=name,
        start_coordinate=start,
        waypoints=tuple(waypoints),
        tracking_points=tuple(tracking),
        route_name=route_name,
    )


class FakeTimer:
    """Stand-in for ``threading.Timer`` that only fires when told to."""

    def __init__(self, interval: float, function: Callable[..., Any], args=()):
        self.interval = interval
        self.function = function
        self.args = args
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.function(*self.args)


class FakeTimerFactory:
    def __init__(self) -> None:
        self.timers: List[FakeTimer] = []

    def __call__(self, interval, function, args=()):
        timer = FakeTimer(interval, function, args)
        self.timers.append(timer)
        return timer

    @property
    def last(self) -> Optional[FakeTimer]:
        return self.timers[-1] if self.timers else None


class StepClock:
    """Deterministic clock advancing a fixed step per call."""

    def __init__(self, step_seconds: float = 20.0) -> None:
        self.step = timedelta(seconds=step_seconds)
        self.now = BASE_TIME

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def timer_factory():
    return FakeTimerFactory()


@pytest.fixture
def step_clock():
    return StepClock()


@pytest.fixture
def sample_snapshot():
    waypoints = [
        make_voice(-41.0, 174.0, 0.0, name="Grid ahead", category=Category.OBSTACLE,
                   raw="cattle guard ahead"),
        make_manual(-41.0, 174.01, 0.84, name="Summit", icon_ref="/icons/summit.svg",
                    note="Blind crest"),
        make_voice(-41.0, 174.02, 1.68, name="Severe washout", category=Category.SAFETY,
                   raw="severe wash out", speed=SpeedContext.SLOW),
    ]
    tracking = [make_track(-41.0, 174.0 + i * 0.005, i * 20) for i in range(5)]
    return make_snapshot(waypoints, tracking)
