from datetime import datetime, timezone

import pytest

from rally_mapper.errors import InputUnavailableError
from rally_mapper.models import Category, Coordinate, SpeedContext, Waypoint
from rally_mapper.voice import (
    VoiceCommand,
    build_manual_waypoint,
    build_voice_waypoint,
    parse_voice_command,
)

from conftest import make_manual

CAPTURED = datetime(2025, 6, 1, 8, 30, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("transcript", ["", "   ", None])
def test_blank_transcript_is_rejected(transcript):
    with pytest.raises(InputUnavailableError):
        build_voice_waypoint(transcript, Coordinate(0, 0), [])


def test_missing_fix_is_rejected():
    with pytest.raises(InputUnavailableError):
        build_voice_waypoint("left turn", None, [])
    with pytest.raises(InputUnavailableError):
        build_manual_waypoint(None, [])


def test_voice_waypoint_keeps_raw_transcript_verbatim():
    raw = "Turn WRITE  "
    wp = build_voice_waypoint(
        raw, Coordinate(-41.0, 174.0), [], SpeedContext.MEDIUM, captured_at=CAPTURED
    )
    assert wp.raw_transcript == raw
    assert wp.name == "Right turn"
    assert wp.processed_text == "Right turn"
    assert wp.category is Category.NAVIGATION
    assert wp.voice_created is True
    assert wp.speed_context is SpeedContext.MEDIUM
    assert wp.full_timestamp == "2025-06-01T08:30:00.000Z"


def test_first_waypoint_distance_is_zero():
    wp = build_voice_waypoint("grid", Coordinate(-41.0, 174.0), [])
    assert wp.distance_from_start == 0.0


def test_distance_is_rounded_to_two_decimals():
    prior = [make_manual(0, 0)]
    wp = build_voice_waypoint("left", Coordinate(0, 0.0123), prior)
    assert wp.distance_from_start == 1.37


def test_manual_waypoint_defaults():
    wp = build_manual_waypoint(Coordinate(1, 2), [], captured_at=CAPTURED)
    assert wp.name == "Unnamed"
    assert wp.category is None
    assert wp.raw_transcript is None
    assert wp.voice_created is False
    assert wp.icon_ref is None


def test_manual_waypoint_with_picked_icon():
    wp = build_manual_waypoint(Coordinate(1, 2), [], icon_name="Summit")
    assert wp.name == "Summit"
    assert wp.icon_ref == "/icons/summit.svg"


def test_manual_waypoint_with_unknown_icon_keeps_label():
    wp = build_manual_waypoint(Coordinate(1, 2), [], icon_name="Mystery")
    assert wp.name == "Mystery"
    assert wp.icon_ref is None


def test_waypoint_variant_rule_enforced():
    with pytest.raises(ValueError):
        Waypoint(Coordinate(0, 0), "x", "t", "t", 0.0, voice_created=True,
                 category=Category.GENERAL)
    with pytest.raises(ValueError):
        Waypoint(Coordinate(0, 0), "x", "t", "t", 0.0, voice_created=True,
                 raw_transcript="x")
    with pytest.raises(ValueError):
        Waypoint(Coordinate(0, 0), "x", "t", "t", 0.0, category=Category.SAFETY)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Stage start", VoiceCommand.START_STAGE),
        ("start section now", VoiceCommand.START_STAGE),
        ("end stage", VoiceCommand.END_STAGE),
        ("Section end", VoiceCommand.END_STAGE),
        ("undo that", VoiceCommand.UNDO),
        ("left at the gate", VoiceCommand.WAYPOINT),
    ],
)
def test_parse_voice_command(text, expected):
    assert parse_voice_command(text) is expected
