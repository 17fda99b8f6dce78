"""Ordered, mutable record of the stage currently being recorded."""

from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from threading import RLock
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .config import (
    DEFAULT_ROUTE_NAME,
    DEFAULT_WAYPOINT_NAME,
    DISTANCE_DECIMALS,
    STAGE_NAME_TEMPLATE,
)
from .errors import InputUnavailableError, StageStateError
from .geo import cumulative_distance_km
from .models import (
    CompletedStage,
    Coordinate,
    StageSnapshot,
    StageSummary,
    TrackingPoint,
    Waypoint,
)

__all__ = ["StageState", "StageLedger"]

LOGGER = logging.getLogger(__name__)


class StageState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"


class StageLedger:
    """State machine holding at most one open stage.

    Waypoints and breadcrumbs are appended in arrival order and never
    reordered. Every public mutation takes the ledger lock so a background
    sampler and a manual add cannot interleave, and each one either applies
    fully or leaves the ledger untouched.
    """

    def __init__(
        self,
        *,
        day: int = 1,
        route: int = 1,
        stage_number: int = 1,
        route_name: str = DEFAULT_ROUTE_NAME,
    ) -> None:
        self._lock = RLock()
        self._state = StageState.IDLE
        self.day = day
        self.route = route
        self.stage_number = stage_number
        self.route_name = route_name
        self._name = ""
        self._start: Optional[Coordinate] = None
        self._waypoints: List[Waypoint] = []
        self._tracking: List[TrackingPoint] = []
        self.completed_stages: List[CompletedStage] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def state(self) -> StageState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state is StageState.RECORDING

    @property
    def name(self) -> str:
        return self._name

    @property
    def start_coordinate(self) -> Optional[Coordinate]:
        return self._start

    @property
    def waypoints(self) -> Tuple[Waypoint, ...]:
        with self._lock:
            return tuple(self._waypoints)

    @property
    def tracking_points(self) -> Tuple[TrackingPoint, ...]:
        with self._lock:
            return tuple(self._tracking)

    @property
    def total_distance_km(self) -> float:
        with self._lock:
            if not self._waypoints:
                return 0.0
            return self._waypoints[-1].distance_from_start

    @property
    def summaries(self) -> List[StageSummary]:
        return [stage.summary for stage in self.completed_stages]

    def snapshot(self) -> StageSnapshot:
        with self._lock:
            return StageSnapshot(
                name=self._name,
                start_coordinate=self._start,
                waypoints=tuple(self._waypoints),
                tracking_points=tuple(self._tracking),
                route_name=self.route_name,
            )

    def next_distance_km(self, coordinate: Coordinate) -> float:
        """Distance a waypoint captured now at ``coordinate`` would store."""

        with self._lock:
            return round(
                cumulative_distance_km(self._waypoints, coordinate), DISTANCE_DECIMALS
            )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def _require_recording(self, action: str) -> None:
        if self._state is not StageState.RECORDING:
            raise StageStateError(f"Cannot {action}: no stage is being recorded")

    def _stage_name(self) -> str:
        return STAGE_NAME_TEMPLATE.format(
            day=self.day, route=self.route, stage=self.stage_number
        )

    def start_stage(self, coordinate: Optional[Coordinate]) -> str:
        """Open a new stage at ``coordinate`` and return its name.

        Raises:
            InputUnavailableError: If no starting GPS fix is available.
            StageStateError: If a stage is already being recorded.
        """

        with self._lock:
            if self._state is StageState.RECORDING:
                raise StageStateError(f"Stage {self._name} is already recording")
            if coordinate is None:
                raise InputUnavailableError(
                    "Failed to get starting GPS position. Please try again."
                )
            self._waypoints = []
            self._tracking = []
            self._start = coordinate
            self._name = self._stage_name()
            self._state = StageState.RECORDING
        LOGGER.info(
            "Stage %s started at %.6f, %.6f", self._name, coordinate.lat, coordinate.lon
        )
        return self._name

    def end_stage(self) -> CompletedStage:
        """Close the open stage and freeze it together with its summary."""

        with self._lock:
            self._require_recording("end stage")
            snapshot = self.snapshot()
            completed = CompletedStage(
                snapshot=snapshot, summary=StageSummary.from_snapshot(snapshot)
            )
            self.completed_stages.append(completed)
            self.stage_number += 1
            self._state = StageState.IDLE
        LOGGER.info(
            "Stage %s ended: %d waypoints, %d tracking points, %.2f km",
            snapshot.name,
            len(snapshot.waypoints),
            len(snapshot.tracking_points),
            snapshot.total_distance_km,
        )
        return completed

    def resume(self, snapshot: StageSnapshot) -> None:
        """Reopen an in-progress stage restored from a backup."""

        with self._lock:
            if self._state is StageState.RECORDING:
                raise StageStateError(f"Stage {self._name} is already recording")
            self._name = snapshot.name or self._stage_name()
            self._start = snapshot.start_coordinate
            self._waypoints = list(snapshot.waypoints)
            self._tracking = list(snapshot.tracking_points)
            if snapshot.route_name:
                self.route_name = snapshot.route_name
            self._state = StageState.RECORDING
        LOGGER.info(
            "Resumed stage %s with %d waypoints", self._name, len(snapshot.waypoints)
        )

    def new_route(self, route_name: str = "") -> None:
        with self._lock:
            if self._state is StageState.RECORDING:
                raise StageStateError("End the current stage before a new route")
            self.route += 1
            self.stage_number = 1
            self.route_name = route_name
        LOGGER.info("Started Route %d for Day %d", self.route, self.day)

    def new_day(self) -> None:
        with self._lock:
            if self._state is StageState.RECORDING:
                raise StageStateError("End the current stage before a new day")
            self.day += 1
            self.route = 1
            self.stage_number = 1
            self.route_name = ""
            self.completed_stages = []
        LOGGER.info("Started Day %d", self.day)

    # ------------------------------------------------------------------
    # Mutations while recording
    # ------------------------------------------------------------------
    def add_waypoint(self, waypoint: Waypoint) -> int:
        """Append ``waypoint`` and return its index."""

        with self._lock:
            self._require_recording("add waypoint")
            self._waypoints.append(waypoint)
            index = len(self._waypoints) - 1
        LOGGER.info(
            "Waypoint %d added: %s (%.2f km)",
            index + 1,
            waypoint.name,
            waypoint.distance_from_start,
        )
        return index

    def capture_waypoint(
        self, build: Callable[[Sequence[Waypoint]], Waypoint]
    ) -> Waypoint:
        """Build a waypoint from the current prior sequence and append it.

        ``build`` runs under the ledger lock so the distance it derives from
        the prior waypoints cannot go stale before the append. If it raises,
        nothing is appended.
        """

        with self._lock:
            self._require_recording("add waypoint")
            waypoint = build(tuple(self._waypoints))
            self.add_waypoint(waypoint)
        return waypoint

    def add_tracking_point(self, point: TrackingPoint) -> None:
        with self._lock:
            self._require_recording("add tracking point")
            self._tracking.append(point)
        LOGGER.debug(
            "Auto-tracked %.6f, %.6f", point.coordinate.lat, point.coordinate.lon
        )

    def delete_waypoints(self, indices: Iterable[int]) -> int:
        """Remove several waypoints in one batch and return how many went.

        Raises:
            StageStateError: If any index is out of range; nothing is removed.
        """

        with self._lock:
            self._require_recording("delete waypoints")
            targets = sorted(set(indices), reverse=True)
            bad = [i for i in targets if i < 0 or i >= len(self._waypoints)]
            if bad:
                raise StageStateError(f"Waypoint indices out of range: {sorted(bad)}")
            for index in targets:
                del self._waypoints[index]
        LOGGER.info("Deleted %d waypoints", len(targets))
        return len(targets)

    def edit_waypoint(self, index: int, name: str, note: str = "") -> Waypoint:
        """Replace the name and note of one waypoint; distance and time stay."""

        with self._lock:
            self._require_recording("edit waypoint")
            if index < 0 or index >= len(self._waypoints):
                raise StageStateError(f"Waypoint index out of range: {index}")
            current = self._waypoints[index]
            updated = replace(
                current, name=name.strip() or DEFAULT_WAYPOINT_NAME, note=note.strip()
            )
            self._waypoints[index] = updated
        return updated

    def undo_last_waypoint(self) -> Optional[Waypoint]:
        """Drop the most recent waypoint, returning it (``None`` when empty)."""

        with self._lock:
            self._require_recording("undo waypoint")
            if not self._waypoints:
                return None
            removed = self._waypoints.pop()
        LOGGER.info("Last waypoint undone: %s", removed.name)
        return removed
