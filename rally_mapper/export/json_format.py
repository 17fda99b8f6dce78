"""JSON interchange documents for recorded stages.

``encode_json`` writes the detailed document other Rally Mapper tools read
back with ``decode_json``. ``encode_simple_json`` is a flat variant for
spreadsheets and quick scripts.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..config import APP_CREATOR, TRACKING_INTERVAL_SECONDS
from ..geo import track_distance_km
from ..icons import icon_for_category
from ..models import (
    Category,
    Coordinate,
    SpeedContext,
    StageSnapshot,
    TrackingPoint,
    Waypoint,
)
from ..utils import interval_label, iso_timestamp, utc_now

__all__ = ["encode_json", "encode_simple_json", "decode_json"]

LOGGER = logging.getLogger(__name__)


def _waypoint_record(index: int, wp: Waypoint) -> Dict[str, Any]:
    category = wp.category or Category.GENERAL
    info = icon_for_category(wp.category, wp.name)
    return {
        "id": index,
        "name": wp.name,
        "coordinates": {"lat": wp.lat, "lon": wp.lon},
        "timing": {
            "timestamp": wp.timestamp,
            "fullTimestamp": wp.full_timestamp,
            "distanceFromStart": wp.distance_from_start,
        },
        "classification": {
            "category": category.value,
            "priority": info.priority,
            "rallyIcon": info.icon,
            "gpxType": info.gpx_type,
        },
        "creation": {
            "method": "voice" if wp.voice_created else "manual",
            "rawTranscript": wp.raw_transcript,
            "processedText": wp.processed_text or wp.name,
            "speedContext": wp.speed_context.value if wp.speed_context else None,
        },
        "notes": wp.note or None,
        "iconRef": wp.icon_ref,
    }


def encode_json(
    waypoints: Sequence[Waypoint],
    tracking_points: Sequence[TrackingPoint],
    stage_name: str,
    *,
    route_name: str = "",
    exported_at: Optional[datetime] = None,
    tracking_interval_s: float = TRACKING_INTERVAL_SECONDS,
) -> str:
    """Render the detailed JSON export (metadata, waypoints, tracking)."""

    voice = sum(1 for wp in waypoints if wp.voice_created)
    categories = Counter((wp.category or Category.GENERAL).value for wp in waypoints)
    data = {
        "metadata": {
            "routeName": route_name or stage_name,
            "stageName": stage_name,
            "exportDate": iso_timestamp(exported_at or utc_now()),
            "appVersion": APP_CREATOR,
            "totalWaypoints": len(waypoints),
            "voiceWaypoints": voice,
            "manualWaypoints": len(waypoints) - voice,
            "categories": dict(categories),
            "totalDistance": waypoints[-1].distance_from_start if waypoints else 0,
            "trackDistance": round(track_distance_km(tracking_points), 2),
            "hasTracking": bool(tracking_points),
            "trackingPoints": len(tracking_points),
        },
        "waypoints": [
            _waypoint_record(index, wp) for index, wp in enumerate(waypoints, start=1)
        ],
        "tracking": {
            "enabled": bool(tracking_points),
            "points": [pt.to_dict() for pt in tracking_points],
            "interval": interval_label(tracking_interval_s),
            "totalPoints": len(tracking_points),
        },
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


def encode_simple_json(
    waypoints: Sequence[Waypoint],
    tracking_points: Sequence[TrackingPoint],
    stage_name: str,
    *,
    exported_at: Optional[datetime] = None,
) -> str:
    """Render the flat JSON export with one object per waypoint."""

    data = {
        "name": stage_name,
        "date": iso_timestamp(exported_at or utc_now()),
        "waypoints": [
            {
                "name": wp.name,
                "lat": wp.lat,
                "lon": wp.lon,
                "distance": wp.distance_from_start,
                "timestamp": wp.full_timestamp,
                "description": wp.name + (" (Voice)" if wp.voice_created else ""),
            }
            for wp in waypoints
        ],
        "track": (
            {
                "name": f"{stage_name} Track",
                "points": [pt.to_dict() for pt in tracking_points],
            }
            if tracking_points
            else None
        ),
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


def _waypoint_from_record(record: Mapping[str, Any]) -> Waypoint:
    coordinates = record["coordinates"]
    timing = record.get("timing") or {}
    classification = record.get("classification") or {}
    creation = record.get("creation") or {}
    voice = creation.get("method") == "voice"
    speed = creation.get("speedContext")
    return Waypoint(
        coordinate=Coordinate(float(coordinates["lat"]), float(coordinates["lon"])),
        name=str(record["name"]),
        timestamp=str(timing.get("timestamp") or ""),
        full_timestamp=str(timing["fullTimestamp"]),
        distance_from_start=float(timing.get("distanceFromStart") or 0.0),
        note=str(record.get("notes") or ""),
        icon_ref=record.get("iconRef") or None,
        category=Category(classification["category"]) if voice else None,
        voice_created=voice,
        raw_transcript=creation.get("rawTranscript") if voice else None,
        processed_text=creation.get("processedText") if voice else None,
        speed_context=SpeedContext(speed) if speed else None,
    )


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, dict) else {}


def _entries(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def decode_json(document: str) -> StageSnapshot:
    """Read an :func:`encode_json` document back into a stage snapshot.

    Waypoint or tracking entries that cannot be parsed are dropped with a
    warning instead of failing the whole document, and sections of the
    wrong type are treated as empty.

    Raises:
        ValueError: If ``document`` is not a JSON object.
    """

    data = json.loads(document)
    if not isinstance(data, dict):
        raise ValueError("Stage JSON must be an object")
    metadata = _mapping(data.get("metadata"))

    waypoints: List[Waypoint] = []
    raw_waypoints = _entries(data.get("waypoints"))
    for record in raw_waypoints:
        try:
            waypoints.append(_waypoint_from_record(record))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            LOGGER.warning("Skipping unreadable waypoint entry: %s", exc)

    tracking: List[TrackingPoint] = []
    raw_points = _entries(_mapping(data.get("tracking")).get("points"))
    for point in raw_points:
        try:
            tracking.append(TrackingPoint.from_dict(point))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            LOGGER.warning("Skipping unreadable tracking point: %s", exc)

    route_name = str(metadata.get("routeName") or "")
    stage_name = str(metadata.get("stageName") or route_name)
    return StageSnapshot(
        name=stage_name,
        start_coordinate=waypoints[0].coordinate if waypoints else None,
        waypoints=tuple(waypoints),
        tracking_points=tuple(tracking),
        route_name=route_name if route_name != stage_name else "",
    )
