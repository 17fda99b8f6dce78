"""Waypoint construction from voice transcripts and manual button presses."""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence

from .config import DEFAULT_WAYPOINT_NAME, DISTANCE_DECIMALS
from .errors import InputUnavailableError
from .geo import cumulative_distance_km
from .icons import icon_ref_for
from .models import Coordinate, SpeedContext, Waypoint
from .normalizer import classify, normalize_transcript
from .utils import display_time, iso_timestamp, utc_now

__all__ = [
    "VoiceCommand",
    "parse_voice_command",
    "build_voice_waypoint",
    "build_manual_waypoint",
]

LOGGER = logging.getLogger(__name__)

_START_PHRASES = ("stage start", "start stage", "section start", "start section")
_END_PHRASES = ("stage end", "end stage", "section end", "end section")


class VoiceCommand(str, Enum):
    START_STAGE = "start_stage"
    END_STAGE = "end_stage"
    UNDO = "undo"
    WAYPOINT = "waypoint"


def parse_voice_command(transcript: str) -> VoiceCommand:
    """Decide whether a transcript is a control phrase or a waypoint label."""

    text = transcript.strip().lower()
    if any(phrase in text for phrase in _START_PHRASES):
        return VoiceCommand.START_STAGE
    if any(phrase in text for phrase in _END_PHRASES):
        return VoiceCommand.END_STAGE
    if "undo" in text:
        return VoiceCommand.UNDO
    return VoiceCommand.WAYPOINT


def _stored_distance(prior: Sequence[Waypoint], coordinate: Coordinate) -> float:
    return round(cumulative_distance_km(prior, coordinate), DISTANCE_DECIMALS)


def build_voice_waypoint(
    raw_transcript: str,
    coordinate: Optional[Coordinate],
    prior_waypoints: Sequence[Waypoint],
    speed: SpeedContext = SpeedContext.UNKNOWN,
    *,
    captured_at: Optional[datetime] = None,
) -> Waypoint:
    """Turn a finished transcript into a categorised waypoint.

    The label is normalised before classification so misheard words do not
    skew the category, while ``raw_transcript`` is kept exactly as received.

    Raises:
        InputUnavailableError: If the transcript is blank or there is no
            current GPS fix.
    """

    if raw_transcript is None or not raw_transcript.strip():
        raise InputUnavailableError("Please provide a waypoint description.")
    if coordinate is None:
        raise InputUnavailableError("No GPS signal available for waypoint.")

    name = normalize_transcript(raw_transcript, speed)
    category = classify(name)
    when = captured_at or utc_now()
    LOGGER.info(
        "Voice waypoint %r -> %r (category=%s, speed=%s)",
        raw_transcript,
        name,
        category.value,
        speed.value,
    )
    return Waypoint(
        coordinate=coordinate,
        name=name,
        timestamp=display_time(when),
        full_timestamp=iso_timestamp(when),
        distance_from_start=_stored_distance(prior_waypoints, coordinate),
        category=category,
        voice_created=True,
        raw_transcript=raw_transcript,
        processed_text=name,
        speed_context=speed,
    )


def build_manual_waypoint(
    coordinate: Optional[Coordinate],
    prior_waypoints: Sequence[Waypoint],
    *,
    icon_name: Optional[str] = None,
    captured_at: Optional[datetime] = None,
) -> Waypoint:
    """Build a button-press waypoint, optionally labelled with a picked icon.

    Raises:
        InputUnavailableError: If there is no current GPS fix.
    """

    if coordinate is None:
        raise InputUnavailableError(
            "No GPS signal available. Please wait for GPS to be ready."
        )
    when = captured_at or utc_now()
    label = icon_name.strip() if icon_name and icon_name.strip() else None
    return Waypoint(
        coordinate=coordinate,
        name=label or DEFAULT_WAYPOINT_NAME,
        timestamp=display_time(when),
        full_timestamp=iso_timestamp(when),
        distance_from_start=_stored_distance(prior_waypoints, coordinate),
        icon_ref=icon_ref_for(label) if label else None,
    )
