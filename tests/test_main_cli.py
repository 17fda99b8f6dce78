import json

from rally_mapper.backup import save_backup
from rally_mapper.export import encode_json
from rally_mapper.main import load_stage_file, main


def test_normalize_command(capsys):
    assert main(["normalize", "turn write at the cattle guard"]) == 0
    out = capsys.readouterr().out
    assert "label=Right turn at the grid" in out
    assert "category=navigation" in out


def test_export_command_from_backup(tmp_path, sample_snapshot, capsys):
    backup = tmp_path / "backup.json"
    save_backup(backup, sample_snapshot)
    out_dir = tmp_path / "out"
    code = main(
        ["export", str(backup), "--output-dir", str(out_dir), "--formats", "gpx,kml"]
    )
    assert code == 0
    assert (out_dir / "Day1-Route1-Stage1.gpx").exists()
    assert (out_dir / "Day1-Route1-Stage1.kml").exists()
    assert "gpx:" in capsys.readouterr().out


def test_load_stage_file_reads_enhanced_json(tmp_path, sample_snapshot):
    path = tmp_path / "stage-enhanced.json"
    path.write_text(
        encode_json(sample_snapshot.waypoints, [], sample_snapshot.name),
        encoding="utf-8",
    )
    assert len(load_stage_file(path).waypoints) == 3


def test_roadbook_command(tmp_path, sample_snapshot):
    backup = tmp_path / "backup.json"
    save_backup(backup, sample_snapshot)
    output = tmp_path / "book.xlsx"
    assert main(["roadbook", str(backup), "--output", str(output)]) == 0
    assert output.exists()


def test_bad_input_returns_error_code(tmp_path):
    missing = tmp_path / "missing.json"
    assert main(["export", str(missing)]) == 2
    junk = tmp_path / "junk.json"
    junk.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
    assert main(["roadbook", str(junk), "--output", str(tmp_path / "x.xlsx")]) == 2


def test_export_of_malformed_sections_does_not_crash(tmp_path):
    source = tmp_path / "odd.json"
    source.write_text(json.dumps({"metadata": 5, "tracking": "x"}), encoding="utf-8")
    out_dir = tmp_path / "out"
    code = main(
        ["export", str(source), "--output-dir", str(out_dir), "--formats", "gpx"]
    )
    assert code == 0
    assert (out_dir / "stage.gpx").exists()
