import json

from usagerecon import cli


def test_load_show_clear(tmp_path, write_export, capsys):
    export = write_export(
        "usage_1_0_2024-01-02_to_2024-01-02.csv",
        [("2024-01-02", "00:00", "1.0"), ("2024-01-02", "00:30", "0.5")],
    )
    store = str(tmp_path / "records.csv")

    assert cli.main(["--store", store, "load", str(export), "--granularity", "15min"]) == 0
    assert capsys.readouterr().out.startswith("Showing 3 points from 2024-01-02 12:00 AM")

    assert cli.main(["--store", store, "show", "--granularity", "daily", "--format", "json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["points"] == 1
    assert payload["total_import_kwh"] == 1.5

    assert cli.main(["--store", store, "show", "--format", "csv", "--window", "2"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("timestamp,civil_date,start_time,import_kwh,sample_count")
    assert lines[1].startswith("2024-01-02 00:00:00-08:00")

    assert cli.main(["--store", store, "clear"]) == 0
    assert "Data cleared" in capsys.readouterr().out
    assert not (tmp_path / "records.csv").exists()


def test_partial_failure_exit_code(tmp_path, write_export, capsys):
    good = write_export("usage_1_0_2024-01-02_to_2024-01-02.csv", [("2024-01-02", "00:00", "1")])
    bad = tmp_path / "usage_1_0_2024-01-03_to_2024-01-03.csv"
    bad.write_text("garbage\n", encoding="utf-8")

    code = cli.main(["--store", str(tmp_path / "r.csv"), "load", str(good), str(bad)])
    assert code == 2
    assert f"Failed to parse {bad.name}" in capsys.readouterr().err


def test_usage_errors_exit_with_one(tmp_path):
    missing = tmp_path / "nope.csv"
    assert cli.main(["--store", str(tmp_path / "r.csv"), "load", str(missing)]) == 1
