from rally_mapper import config
from rally_mapper.utils import (
    interval_label,
    iso_timestamp,
    parse_iso_timestamp,
    safe_filename,
)


def test_env_helpers_fall_back_on_bad_values(monkeypatch):
    monkeypatch.setenv("RALLY_TEST_INT", "abc")
    monkeypatch.setenv("RALLY_TEST_FLOAT", "1.5")
    monkeypatch.setenv("RALLY_TEST_BOOL", "Off")
    assert config._env_int("RALLY_TEST_INT", 7) == 7
    assert config._env_float("RALLY_TEST_FLOAT", 0.0) == 1.5
    assert config._env_bool("RALLY_TEST_BOOL", True) is False
    monkeypatch.setenv("RALLY_TEST_BOOL", "maybe")
    assert config._env_bool("RALLY_TEST_BOOL", True) is True
    assert config._env_int("RALLY_TEST_UNSET", 3) == 3


def test_defaults_are_sane():
    assert config.EARTH_RADIUS_KM == 6371.0
    assert config.TRACKING_INTERVAL_SECONDS > 0


def test_interval_label_follows_the_interval():
    assert interval_label(20) == "20_seconds"
    assert interval_label(10.0) == "10_seconds"
    assert interval_label(2.5) == "2.5_seconds"


def test_timestamps_round_trip_through_z_suffix():
    parsed = parse_iso_timestamp("2025-06-01T08:00:00.000Z")
    assert iso_timestamp(parsed) == "2025-06-01T08:00:00.000Z"


def test_safe_filename():
    assert safe_filename("Day1/Route2/Stage3") == "Day1-Route2-Stage3"
    assert safe_filename("  ///  ") == "stage"
