"""Recording session: the entry points a host application calls.

The host owns GPS acquisition, speech recognition and the UI. It forwards
fixes, transcripts and button presses here; this module turns them into
ledger events, keeps the breadcrumb sampler in step with the stage
lifecycle, autosaves the open stage and exports it when the stage ends.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Optional

from .backup import clear_backup, load_backup, save_backup
from .config import (
    BACKUP_ENABLED,
    BACKUP_FILE,
    EXPORT_ON_STAGE_END,
    TRACKING_AUTO_START,
    TRACKING_INTERVAL_SECONDS,
)
from .errors import InputUnavailableError, StageStateError
from .export.writer import export_stage
from .ledger import StageLedger
from .models import (
    CompletedStage,
    Coordinate,
    ExportReport,
    StageSnapshot,
    TrackingPoint,
    Waypoint,
)
from .normalizer import speed_context
from .tracking import TimerFactory, TrackingSampler
from .utils import iso_timestamp, utc_now
from .voice import (
    VoiceCommand,
    build_manual_waypoint,
    build_voice_waypoint,
    parse_voice_command,
)

__all__ = ["GpsFix", "GpsErrorKind", "RecordingSession"]

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GpsFix:
    """Position delivered by the host's geolocation watch."""

    lat: float
    lon: float
    accuracy: Optional[float] = None
    timestamp: Optional[str] = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.lat, self.lon)


class GpsErrorKind(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"


_GPS_ERROR_MESSAGES = {
    GpsErrorKind.PERMISSION_DENIED: (
        "GPS access denied. Please enable location permissions."
    ),
    GpsErrorKind.POSITION_UNAVAILABLE: (
        "GPS signal unavailable. Try moving to an open area."
    ),
    GpsErrorKind.TIMEOUT: "GPS timeout. Trying again...",
}


class RecordingSession:
    """Wire ledger, voice pipeline, sampler, backup and exports together."""

    def __init__(
        self,
        ledger: Optional[StageLedger] = None,
        *,
        output_dir: str | Path | None = None,
        backup_path: str | Path | None = BACKUP_FILE if BACKUP_ENABLED else None,
        export_on_end: bool = EXPORT_ON_STAGE_END,
        auto_track: bool = TRACKING_AUTO_START,
        tracking_interval_s: float = TRACKING_INTERVAL_SECONDS,
        timer_factory: TimerFactory = threading.Timer,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.ledger = ledger or StageLedger()
        self.output_dir = output_dir
        self.backup_path = backup_path
        self.export_on_end = export_on_end
        self.auto_track = auto_track
        self._clock = clock
        self._fix: Optional[GpsFix] = None
        self.gps_error: Optional[str] = None
        self.last_export: Optional[ExportReport] = None
        self.sampler = TrackingSampler(
            self.sample_tracking_point,
            tracking_interval_s,
            timer_factory=timer_factory,
        )

    # ------------------------------------------------------------------
    # GPS intake
    # ------------------------------------------------------------------
    @property
    def current_fix(self) -> Optional[GpsFix]:
        return self._fix

    @property
    def current_coordinate(self) -> Optional[Coordinate]:
        return self._fix.coordinate if self._fix else None

    def on_gps_fix(self, fix: GpsFix) -> None:
        self._fix = fix
        self.gps_error = None
        LOGGER.debug(
            "GPS updated: %.6f, %.6f accuracy=%s", fix.lat, fix.lon, fix.accuracy
        )

    def on_gps_error(self, kind: GpsErrorKind, detail: str = "") -> str:
        """Record a geolocation failure and return the crew-facing message."""

        message = _GPS_ERROR_MESSAGES.get(
            kind, "GPS error. Check your location settings."
        )
        self.gps_error = message
        LOGGER.warning("GPS error %s: %s", kind.value, detail or message)
        return message

    # ------------------------------------------------------------------
    # Stage lifecycle
    # ------------------------------------------------------------------
    def snapshot(self) -> StageSnapshot:
        return self.ledger.snapshot()

    def start_stage(self) -> str:
        name = self.ledger.start_stage(self.current_coordinate)
        if self.auto_track:
            self.sampler.start()
        self._autosave()
        return name

    def end_stage(self) -> CompletedStage:
        """Stop tracking, close the stage and export it.

        The sampler is stopped before the ledger closes so no breadcrumb can
        be appended to a finished stage.
        """

        if not self.ledger.is_recording:
            raise StageStateError("No active stage to end.")
        self.sampler.stop()
        completed = self.ledger.end_stage()
        try:
            if self.export_on_end:
                self.last_export = export_stage(
                    completed.snapshot,
                    self.output_dir,
                    tracking_interval_s=self.sampler.interval_s,
                )
        finally:
            if self.backup_path:
                clear_backup(self.backup_path)
        return completed

    def resume_from_backup(self) -> bool:
        """Reopen a stage left behind by a previous run, if one was saved."""

        if not self.backup_path or self.ledger.is_recording:
            return False
        snapshot = load_backup(self.backup_path)
        if snapshot is None or not snapshot.name:
            return False
        self.ledger.resume(snapshot)
        if self.auto_track:
            self.sampler.start()
        return True

    def set_tracking(self, enabled: bool) -> None:
        if enabled:
            if not self.ledger.is_recording:
                raise StageStateError("Start a stage before enabling tracking.")
            self.sampler.start()
        else:
            self.sampler.stop()

    # ------------------------------------------------------------------
    # Waypoints
    # ------------------------------------------------------------------
    def add_manual_waypoint(self, icon_name: Optional[str] = None) -> Waypoint:
        coordinate = self.current_coordinate
        if coordinate is None:
            raise InputUnavailableError(
                "No GPS signal available. Please wait for GPS to be ready."
            )
        when = self._clock()
        waypoint = self.ledger.capture_waypoint(
            lambda prior: build_manual_waypoint(
                coordinate, prior, icon_name=icon_name, captured_at=when
            )
        )
        self._autosave()
        return waypoint

    def add_voice_waypoint(self, transcript: str) -> Waypoint:
        coordinate = self.current_coordinate
        speed = speed_context(self.ledger.tracking_points[-2:])
        when = self._clock()
        waypoint = self.ledger.capture_waypoint(
            lambda prior: build_voice_waypoint(
                transcript, coordinate, prior, speed, captured_at=when
            )
        )
        self._autosave()
        return waypoint

    def handle_transcript(self, transcript: str) -> VoiceCommand:
        """Route a finished transcript to a stage command or a new waypoint."""

        command = parse_voice_command(transcript)
        LOGGER.info("Voice input %r -> %s", transcript, command.value)
        if command is VoiceCommand.START_STAGE:
            self.start_stage()
        elif command is VoiceCommand.END_STAGE:
            self.end_stage()
        elif command is VoiceCommand.UNDO:
            self.undo_last_waypoint()
        else:
            if not self.ledger.is_recording:
                raise StageStateError("Start a stage first to add waypoints.")
            self.add_voice_waypoint(transcript)
        return command

    def undo_last_waypoint(self) -> Optional[Waypoint]:
        removed = self.ledger.undo_last_waypoint()
        self._autosave()
        return removed

    def edit_waypoint(self, index: int, name: str, note: str = "") -> Waypoint:
        updated = self.ledger.edit_waypoint(index, name, note)
        self._autosave()
        return updated

    def delete_waypoints(self, indices: Iterable[int]) -> int:
        removed = self.ledger.delete_waypoints(indices)
        self._autosave()
        return removed

    # ------------------------------------------------------------------
    # Tracking
    # ------------------------------------------------------------------
    def sample_tracking_point(self) -> TrackingPoint:
        """Append a breadcrumb at the latest GPS fix (called by the sampler)."""

        coordinate = self.current_coordinate
        if coordinate is None:
            raise InputUnavailableError("No GPS fix for tracking sample")
        point = TrackingPoint(coordinate, iso_timestamp(self._clock()))
        self.ledger.add_tracking_point(point)
        self._autosave()
        return point

    def _autosave(self) -> None:
        if not self.backup_path or not self.ledger.is_recording:
            return
        try:
            save_backup(self.backup_path, self.ledger.snapshot())
        except OSError as exc:
            LOGGER.warning("Backup to %s failed: %s", self.backup_path, exc)
