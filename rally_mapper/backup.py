"""Local backup of the open stage so recording survives a restart."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, List, Optional

from .models import Coordinate, StageSnapshot, TrackingPoint, Waypoint
from .utils import iso_timestamp, utc_now

__all__ = ["save_backup", "load_backup", "clear_backup"]

LOGGER = logging.getLogger(__name__)


def save_backup(path: str | Path, snapshot: StageSnapshot) -> None:
    """Persist ``snapshot`` as JSON, replacing the previous backup atomically."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    start = snapshot.start_coordinate
    payload = {
        "stageName": snapshot.name,
        "routeName": snapshot.route_name,
        "startCoordinate": {"lat": start.lat, "lon": start.lon} if start else None,
        "waypoints": [wp.to_dict() for wp in snapshot.waypoints],
        "trackingPoints": [pt.to_dict() for pt in snapshot.tracking_points],
        "lastSaved": iso_timestamp(utc_now()),
    }
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent)
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False)
        os.replace(tmp_name, target)
    except OSError:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    LOGGER.debug(
        "Backup saved to %s (%d waypoints)", target, len(snapshot.waypoints)
    )


def _coordinate(value: Any) -> Optional[Coordinate]:
    if not isinstance(value, dict):
        return None
    try:
        return Coordinate(float(value["lat"]), float(value["lon"]))
    except (KeyError, TypeError, ValueError):
        return None


def load_backup(path: str | Path) -> Optional[StageSnapshot]:
    """Load a backup written by :func:`save_backup`.

    Returns ``None`` when there is no backup or it cannot be read at all.
    Individual waypoint or tracking entries that fail to parse are skipped
    so one corrupt record never loses the rest of the stage.
    """

    source = Path(path)
    if not source.is_file():
        return None
    try:
        with open(source, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        LOGGER.warning("Ignoring unreadable backup %s: %s", source, exc)
        return None
    if not isinstance(data, dict):
        LOGGER.warning("Ignoring malformed backup %s", source)
        return None

    waypoints: List[Waypoint] = []
    raw_waypoints = data.get("waypoints")
    if not isinstance(raw_waypoints, list):
        raw_waypoints = []
    for entry in raw_waypoints:
        try:
            waypoints.append(Waypoint.from_dict(entry))
        except (KeyError, TypeError, ValueError, AttributeError):
            continue
    tracking: List[TrackingPoint] = []
    raw_points = data.get("trackingPoints")
    if not isinstance(raw_points, list):
        raw_points = []
    for entry in raw_points:
        try:
            tracking.append(TrackingPoint.from_dict(entry))
        except (KeyError, TypeError, ValueError):
            continue

    skipped = (len(raw_waypoints) - len(waypoints)) + (
        len(raw_points) - len(tracking)
    )
    if skipped > 0:
        LOGGER.warning(
            "Backup %s: %s entries failed to parse and were skipped", source, skipped
        )

    start = _coordinate(data.get("startCoordinate"))
    if start is None and waypoints:
        start = waypoints[0].coordinate
    return StageSnapshot(
        name=str(data.get("stageName") or ""),
        start_coordinate=start,
        waypoints=tuple(waypoints),
        tracking_points=tuple(tracking),
        route_name=str(data.get("routeName") or ""),
    )


def clear_backup(path: str | Path) -> None:
    Path(path).unlink(missing_ok=True)
