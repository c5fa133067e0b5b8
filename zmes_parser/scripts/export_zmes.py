"""
Export a .zmes file to JSON or CSV.

Outputs (in --out-dir, default ``<file dir>/<stem>_export``)
--------------------------------------------------------------
json:
    <stem>.json with the full parsed file (arrays as plain lists) and the
    size measurements projected from it.
csv:
    <stem>_parameters_<record id>.csv  one row per parameter node
    <stem>_measurement_<record id>.csv one column per variable (records with sizes only)

Examples
--------
>>> # python -m zmes_parser.scripts.export_zmes measurement.zmes --format csv
>>> # python -m zmes_parser.scripts.export_zmes measurement.zmes --no-arrays
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional, Sequence

from zmes_parser.analysis.frames import measurement_to_frame, parameters_to_frame, to_serializable
from zmes_parser.analysis.measurement_xy import record_to_measurement, to_measurement_xy
from zmes_parser.ingest.errors import SchemaError
from zmes_parser.ingest.reader import ZmesReaderConfig, parse_file
from zmes_parser.models.parameters import ZmesFile


def export_json(zmes_file: ZmesFile, out_path: Path) -> Path:
    measurements = to_measurement_xy(zmes_file)
    payload = {
        "file": to_serializable(zmes_file),
        "measurements": to_serializable(measurements),
    }
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return out_path


def export_csv(zmes_file: ZmesFile, out_dir: Path, stem: str) -> List[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []

    for record in zmes_file.records:
        p = out_dir / f"{stem}_parameters_{record.id}.csv"
        parameters_to_frame(record.parameters).to_csv(p, index=False)
        written.append(p)

        # keyed by record id, GUIDs may repeat
        m = record_to_measurement(record.parameters, record_id=record.guid)
        if m is not None:
            p = out_dir / f"{stem}_measurement_{record.id}.csv"
            measurement_to_frame(m, with_units=True).to_csv(p, index=False)
            written.append(p)

    return written


def main(argv: Optional[Sequence[str]] = None) -> int:
    import argparse

    p = argparse.ArgumentParser(
        prog="python -m zmes_parser.scripts.export_zmes",
        description="Export a Zetasizer .zmes file to JSON or CSV.",
    )
    p.add_argument("file", help=".zmes file to export")
    p.add_argument("--out-dir", default=None, help="Output directory (default: <file dir>/<stem>_export)")
    p.add_argument("--format", choices=("json", "csv"), default="json", help="Export format (default: json)")
    p.add_argument("--no-arrays", action="store_true", help="Skip decoding of blob arrays (metadata only)")

    ns = p.parse_args(list(argv) if argv is not None else None)

    src = Path(ns.file).expanduser()
    out_dir = Path(ns.out_dir).expanduser() if ns.out_dir else src.parent / f"{src.stem}_export"
    cfg = ZmesReaderConfig(decode_arrays=not bool(ns.no_arrays))

    try:
        zmes_file = parse_file(src, cfg)
    except FileNotFoundError as e:
        print(f"ERROR: file not found: {e}")
        return 2
    except SchemaError as e:
        print(f"ERROR: not a valid .zmes file: {e}")
        return 2

    print(f"schema v{zmes_file.schema_version}, {zmes_file.n_records} record(s)")
    for w in zmes_file.warnings:
        print("WARNING:", w)

    if ns.format == "json":
        written = [export_json(zmes_file, out_dir / f"{src.stem}.json")]
    else:
        written = export_csv(zmes_file, out_dir, src.stem)

    for path in written:
        print("wrote:", path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
