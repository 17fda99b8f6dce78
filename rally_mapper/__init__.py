"""Rally Mapper stage recording and export core."""

from .errors import (
    ExportError,
    InputUnavailableError,
    RallyMapperError,
    StageStateError,
)
from .ledger import StageLedger, StageState
from .models import (
    Category,
    CompletedStage,
    Coordinate,
    SpeedContext,
    StageSnapshot,
    StageSummary,
    TrackingPoint,
    Waypoint,
)
from .session import GpsErrorKind, GpsFix, RecordingSession

__all__ = [
    "Category",
    "CompletedStage",
    "Coordinate",
    "ExportError",
    "GpsErrorKind",
    "GpsFix",
    "InputUnavailableError",
    "RallyMapperError",
    "RecordingSession",
    "SpeedContext",
    "StageLedger",
    "StageSnapshot",
    "StageState",
    "StageSummary",
    "StageStateError",
    "TrackingPoint",
    "Waypoint",
]
