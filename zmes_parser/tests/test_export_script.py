from __future__ import annotations

import json

import pandas as pd

from zmes_parser.scripts.export_zmes import main


def _write(tmp_path, data: bytes):
    p = tmp_path / "sample.zmes"
    p.write_bytes(data)
    return p


def test_export_json(tmp_path, size_measurement_bytes, capsys) -> None:
    src = _write(tmp_path, size_measurement_bytes)
    out_dir = tmp_path / "out"

    assert main([str(src), "--out-dir", str(out_dir)]) == 0

    payload = json.loads((out_dir / "sample.json").read_text(encoding="utf-8"))
    assert payload["file"]["schema_version"] == 3
    assert len(payload["measurements"]) == 1
    assert payload["measurements"][0]["title"] == "SICPA-DNA FN230.A iPr"

    printed = capsys.readouterr().out
    assert "schema v3, 1 record(s)" in printed
    assert "wrote:" in printed


def test_export_csv_default_out_dir(tmp_path, size_measurement_bytes) -> None:
    src = _write(tmp_path, size_measurement_bytes)

    assert main([str(src), "--format", "csv"]) == 0

    out_dir = tmp_path / "sample_export"
    files = sorted(p.name for p in out_dir.iterdir())
    assert files == ["sample_measurement_1.csv", "sample_parameters_1.csv"]

    m = pd.read_csv(out_dir / "sample_measurement_1.csv")
    assert list(m.columns)[:2] == ["Particle diameter [nm]", "Intensity [%]"]
    assert len(m) == 70

    params = pd.read_csv(out_dir / "sample_parameters_1.csv")
    assert params.loc[0, "path"] == "Size Measurement Result"


def test_export_no_arrays_skips_measurements(tmp_path, size_measurement_bytes) -> None:
    src = _write(tmp_path, size_measurement_bytes)
    out_dir = tmp_path / "out"

    assert main([str(src), "--out-dir", str(out_dir), "--format", "csv", "--no-arrays"]) == 0
    assert [p.name for p in out_dir.iterdir()] == ["sample_parameters_1.csv"]


def test_invalid_file_exit_code(tmp_path, capsys) -> None:
    src = _write(tmp_path, b"\x00" * 4096)
    assert main([str(src)]) == 2
    assert "ERROR: not a valid .zmes file" in capsys.readouterr().out


def test_missing_file_exit_code(tmp_path, capsys) -> None:
    assert main([str(tmp_path / "missing.zmes")]) == 2
    assert "ERROR: file not found" in capsys.readouterr().out


def test_csv_per_record_with_shared_guid(tmp_path, zmes_builder, zmes_helpers) -> None:
    b = zmes_builder
    ids = zmes_helpers.build_size_tree(b)
    zmes_helpers.add_size_record(b, ids, guid="dup")
    zmes_helpers.add_size_record(b, ids, guid="dup")
    src = _write(tmp_path, b.to_bytes())
    out_dir = tmp_path / "out"

    assert main([str(src), "--out-dir", str(out_dir), "--format", "csv"]) == 0
    assert sorted(p.name for p in out_dir.iterdir()) == [
        "sample_measurement_1.csv",
        "sample_measurement_2.csv",
        "sample_parameters_1.csv",
        "sample_parameters_2.csv",
    ]


def test_record_without_root_type_exit_code(tmp_path, zmes_builder, capsys) -> None:
    b = zmes_builder
    group = b.add_group()
    b.conn.execute(
        "INSERT INTO StandardRecords (Guid, CreatedDateTime, ModifiedDateTime, RootParameterTypeId, GroupId) "
        "VALUES ('r', '', '', NULL, ?)",
        (group,),
    )
    src = _write(tmp_path, b.to_bytes())
    assert main([str(src)]) == 2
    assert "ERROR: not a valid .zmes file" in capsys.readouterr().out
