"""Dataclasses describing a recorded rally stage."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


class Category(str, Enum):
    """Navigation category assigned to voice-created waypoints.

    Declaration order is significant: it breaks classifier score ties.
    """

    SAFETY = "safety"
    NAVIGATION = "navigation"
    SURFACE = "surface"
    OBSTACLE = "obstacle"
    ELEVATION = "elevation"
    CROSSING = "crossing"
    LANDMARK = "landmark"
    TIMING = "timing"
    GENERAL = "general"


class SpeedContext(str, Enum):
    FAST = "fast"
    MEDIUM = "medium"
    SLOW = "slow"
    STATIONARY = "stationary"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class Coordinate:
    """WGS-84 position in decimal degrees."""

    lat: float
    lon: float


@dataclass(frozen=True, slots=True)
class Waypoint:
    """A point of interest logged during a stage.

    Two variants share this type. Voice-created waypoints always carry the
    original transcript and a category; manual waypoints carry neither. The
    variant rule is checked on construction.
    """

    coordinate: Coordinate
    name: str
    timestamp: str
    full_timestamp: str
    distance_from_start: float
    note: str = ""
    icon_ref: Optional[str] = None
    category: Optional[Category] = None
    voice_created: bool = False
    raw_transcript: Optional[str] = None
    processed_text: Optional[str] = None
    speed_context: Optional[SpeedContext] = None

    def __post_init__(self) -> None:
        if self.voice_created:
            if not self.raw_transcript or not self.raw_transcript.strip():
                raise ValueError("Voice waypoints require a raw transcript")
            if self.category is None:
                raise ValueError("Voice waypoints require a category")
        elif self.category is not None or self.raw_transcript is not None:
            raise ValueError(
                "Manual waypoints cannot carry a category or raw transcript"
            )

    @property
    def lat(self) -> float:
        return self.coordinate.lat

    @property
    def lon(self) -> float:
        return self.coordinate.lon

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lat": self.coordinate.lat,
            "lon": self.coordinate.lon,
            "name": self.name,
            "timestamp": self.timestamp,
            "fullTimestamp": self.full_timestamp,
            "distanceFromStart": self.distance_from_start,
            "note": self.note,
            "iconRef": self.icon_ref,
            "category": self.category.value if self.category else None,
            "voiceCreated": self.voice_created,
            "rawTranscript": self.raw_transcript,
            "processedText": self.processed_text,
            "speedContext": self.speed_context.value if self.speed_context else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Waypoint":
        """Rebuild a waypoint from :meth:`to_dict` output.

        Raises:
            KeyError, TypeError, ValueError: When the mapping is malformed.
        """

        category = data.get("category")
        speed = data.get("speedContext")
        return cls(
            coordinate=Coordinate(float(data["lat"]), float(data["lon"])),
            name=str(data["name"]),
            timestamp=str(data.get("timestamp") or ""),
            full_timestamp=str(data["fullTimestamp"]),
            distance_from_start=float(data.get("distanceFromStart") or 0.0),
            note=str(data.get("note") or ""),
            icon_ref=data.get("iconRef") or None,
            category=Category(category) if category else None,
            voice_created=bool(data.get("voiceCreated", False)),
            raw_transcript=data.get("rawTranscript"),
            processed_text=data.get("processedText"),
            speed_context=SpeedContext(speed) if speed else None,
        )


@dataclass(frozen=True, slots=True)
class TrackingPoint:
    """Automatically sampled breadcrumb fix."""

    coordinate: Coordinate
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lat": self.coordinate.lat,
            "lon": self.coordinate.lon,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TrackingPoint":
        return cls(
            coordinate=Coordinate(float(data["lat"]), float(data["lon"])),
            timestamp=str(data["timestamp"]),
        )


@dataclass(frozen=True, slots=True)
class StageSnapshot:
    """Read-only view of a stage's recorded content."""

    name: str
    start_coordinate: Optional[Coordinate]
    waypoints: Tuple[Waypoint, ...] = ()
    tracking_points: Tuple[TrackingPoint, ...] = ()
    route_name: str = ""

    @property
    def total_distance_km(self) -> float:
        if not self.waypoints:
            return 0.0
        return self.waypoints[-1].distance_from_start

    @property
    def export_name(self) -> str:
        """Name used for exported documents and file names."""

        return self.route_name or self.name


@dataclass(frozen=True, slots=True)
class StageSummary:
    """Aggregate figures captured once when a stage is closed."""

    name: str
    route_name: str
    waypoint_count: int
    voice_waypoint_count: int
    manual_waypoint_count: int
    tracking_point_count: int
    start_time: Optional[str]
    end_time: Optional[str]
    total_distance_km: float
    notes: Tuple[str, ...] = ()
    start_coordinate: Optional[Coordinate] = None
    end_coordinate: Optional[Coordinate] = None

    @classmethod
    def from_snapshot(cls, snapshot: StageSnapshot) -> "StageSummary":
        waypoints = snapshot.waypoints
        voice = sum(1 for wp in waypoints if wp.voice_created)
        # dict preserves first-seen order while deduplicating
        notes = tuple(dict.fromkeys(wp.note for wp in waypoints if wp.note))
        return cls(
            name=snapshot.name,
            route_name=snapshot.route_name,
            waypoint_count=len(waypoints),
            voice_waypoint_count=voice,
            manual_waypoint_count=len(waypoints) - voice,
            tracking_point_count=len(snapshot.tracking_points),
            start_time=waypoints[0].full_timestamp if waypoints else None,
            end_time=waypoints[-1].full_timestamp if waypoints else None,
            total_distance_km=snapshot.total_distance_km,
            notes=notes,
            start_coordinate=snapshot.start_coordinate,
            end_coordinate=waypoints[-1].coordinate if waypoints else None,
        )


@dataclass(frozen=True, slots=True)
class CompletedStage:
    """A closed stage together with its summary."""

    snapshot: StageSnapshot
    summary: StageSummary


@dataclass(slots=True)
class ExportReport:
    """Outcome of exporting one stage to several formats."""

    written: Dict[str, str] = field(default_factory=dict)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed
