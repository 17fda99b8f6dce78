import json

from rally_mapper.backup import clear_backup, load_backup, save_backup


def test_save_and_load_backup(tmp_path, sample_snapshot):
    path = tmp_path / "nested" / "backup.json"
    save_backup(path, sample_snapshot)
    restored = load_backup(path)
    assert restored == sample_snapshot
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["stageName"] == "Day1/Route1/Stage1"
    assert "lastSaved" in data
    # no temp files left behind
    assert [p.name for p in path.parent.iterdir()] == ["backup.json"]


def test_missing_backup_returns_none(tmp_path):
    assert load_backup(tmp_path / "absent.json") is None


def test_unreadable_backup_returns_none(tmp_path):
    path = tmp_path / "backup.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_backup(path) is None
    path.write_text("[1, 2]", encoding="utf-8")
    assert load_backup(path) is None


def test_corrupt_entries_are_skipped(tmp_path, sample_snapshot):
    path = tmp_path / "backup.json"
    save_backup(path, sample_snapshot)
    data = json.loads(path.read_text(encoding="utf-8"))
    data["waypoints"].insert(1, {"lat": "north"})
    data["waypoints"].append("garbage")
    data["trackingPoints"].append({"lat": 1})
    del data["startCoordinate"]
    path.write_text(json.dumps(data), encoding="utf-8")

    restored = load_backup(path)
    assert restored.waypoints == sample_snapshot.waypoints
    assert restored.tracking_points == sample_snapshot.tracking_points
    assert restored.start_coordinate == sample_snapshot.waypoints[0].coordinate


def test_clear_backup(tmp_path, sample_snapshot):
    path = tmp_path / "backup.json"
    save_backup(path, sample_snapshot)
    clear_backup(path)
    assert not path.exists()
    clear_backup(path)
