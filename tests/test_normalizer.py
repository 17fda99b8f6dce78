import pytest

from rally_mapper.models import Category, SpeedContext
from rally_mapper.normalizer import (
    apply_speed_context,
    classify,
    correct,
    expand,
    normalize_transcript,
    speed_context,
)

from conftest import make_track


def test_correct_lowercases_and_trims():
    assert correct("  LEFT Turn  ") == "left turn"


def test_cattle_guard_becomes_grid_obstacle():
    label = normalize_transcript("Cattle guard ahead")
    assert label == "Grid ahead"
    assert classify(label) is Category.OBSTACLE


def test_misheard_direction_is_fixed_and_reordered():
    label = normalize_transcript("turn write in 2k")
    assert label == "Right turn in 2k"
    assert classify(label) is Category.NAVIGATION


def test_corrections_do_not_stack_on_their_own_output():
    # "washout" contains "wash"; it must not grow into "washoutout"
    assert correct("washout") == "washout"
    assert correct("wash out ahead") == "washout ahead"
    assert correct("wash") == "washout"


def test_corrections_replace_substrings_inside_longer_words():
    assert correct("cattle guards ahead") == "grids ahead"
    assert correct("straits") == "straights"
    assert correct("writes") == "rights"


def test_wash_is_not_extended_twice():
    for text in ("washout", "WASHOUT ahead", "big washouts", "wash out"):
        assert "washoutout" not in correct(text)
    assert correct("washouts") == "washouts"


def test_expand_whole_word_abbreviations():
    assert expand("kl at cg") == "keep left at cattle grid"
    assert expand("l then r") == "left then right"
    assert expand("tarmac") == "tarmac"


def test_normalize_capitalises_first_character_only():
    assert normalize_transcript("dngr wo") == "Danger washout"


def test_normalize_passes_unmatched_text_through():
    assert normalize_transcript("hello") == "Hello"
    assert normalize_transcript("") == ""


def test_severe_washout_is_safety():
    assert classify("severe washout ahead") is Category.SAFETY


def test_no_match_is_general():
    assert classify("hello") is Category.GENERAL
    assert classify("") is Category.GENERAL


def test_tie_goes_to_first_declared_category():
    # one safety hit and one navigation hit
    assert classify("danger left") is Category.SAFETY


def test_classify_scores_each_pattern_once():
    # "left" and "right" hit the same navigation pattern: one point, tie with gate
    assert classify("left then right at gate") is Category.NAVIGATION
    # repeated words do not outweigh a single hit in an earlier category
    assert classify("bump bump left") is Category.NAVIGATION
    # two distinct safety patterns beat one surface pattern
    assert classify("severe washout") is Category.SAFETY


def test_fast_speed_uses_terse_phrasing():
    assert apply_speed_context("left followed by right", SpeedContext.FAST) == (
        "left → right"
    )
    assert normalize_transcript("left followed by right", SpeedContext.FAST) == (
        "Left → right"
    )


def test_slow_speed_spells_out_symbols():
    assert apply_speed_context("left → right ~ 2k", SpeedContext.SLOW) == (
        "left followed by right approximately 2k"
    )


def test_other_speeds_leave_text_alone():
    for speed in (SpeedContext.MEDIUM, SpeedContext.STATIONARY, SpeedContext.UNKNOWN):
        assert apply_speed_context("left followed by right", speed) == (
            "left followed by right"
        )


@pytest.mark.parametrize(
    "delta_lat, expected",
    [
        (0.01, SpeedContext.FAST),  # ~200 km/h
        (0.003, SpeedContext.MEDIUM),  # ~60 km/h
        (0.001, SpeedContext.SLOW),  # ~20 km/h
        (0.0001, SpeedContext.STATIONARY),  # ~2 km/h
    ],
)
def test_speed_context_buckets(delta_lat, expected):
    points = [make_track(0.0, 0.0, 0), make_track(delta_lat, 0.0, 20)]
    assert speed_context(points) is expected


def test_speed_context_uses_last_two_points():
    points = [
        make_track(0.0, 0.0, 0),
        make_track(0.01, 0.0, 20),
        make_track(0.0101, 0.0, 40),
    ]
    assert speed_context(points) is SpeedContext.STATIONARY


def test_speed_context_unknown_without_history():
    assert speed_context([]) is SpeedContext.UNKNOWN
    assert speed_context([make_track(0, 0)]) is SpeedContext.UNKNOWN


def test_speed_context_unknown_for_non_positive_elapsed_time():
    same_time = [make_track(0.0, 0.0, 20), make_track(0.01, 0.0, 20)]
    backwards = [make_track(0.0, 0.0, 40), make_track(0.01, 0.0, 20)]
    assert speed_context(same_time) is SpeedContext.UNKNOWN
    assert speed_context(backwards) is SpeedContext.UNKNOWN


def test_speed_context_unknown_for_bad_timestamps():
    from rally_mapper.models import Coordinate, TrackingPoint

    points = [
        TrackingPoint(Coordinate(0, 0), "not-a-time"),
        TrackingPoint(Coordinate(0.01, 0), "also-bad"),
    ]
    assert speed_context(points) is SpeedContext.UNKNOWN
